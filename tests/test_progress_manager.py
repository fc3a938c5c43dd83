from rich.console import Console

from pacup.cli.progress_manager import ProgressManager


def _manager() -> ProgressManager:
    return ProgressManager(Console(quiet=True))


def test_retried_attempts_do_not_count_towards_overall_progress() -> None:
    manager = _manager()
    manager.initialize_session(2)

    retried = manager.add_source_task("a.tar.gz", 0)
    manager.remove_task(retried, success=None)
    done = manager.add_source_task("a.tar.gz", 0)
    manager.remove_task(done, success=True)
    failed = manager.add_source_task("b.tar.gz", 0)
    manager.remove_task(failed, success=False)

    (overall,) = manager.overall_progress.tasks
    assert overall.total == 2
    assert overall.completed == 2
    assert manager.progress.tasks == []


def test_dry_run_tracks_nothing() -> None:
    manager = ProgressManager(Console(quiet=True), dry_run=True)
    manager.initialize_session(3)
    assert manager.add_source_task("a.tar.gz", 10) is None
    assert manager.overall_progress.tasks == []


def test_long_descriptions_are_shortened() -> None:
    manager = _manager()
    task_id = manager.add_source_task("x" * 60 + ".tar.gz", 100)
    (task,) = manager.progress.tasks
    assert task.id == task_id
    assert task.description.startswith("…")
    assert len(task.description) == 45
