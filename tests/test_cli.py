import asyncio
import shutil
import threading
from pathlib import Path

import pytest
from aiohttp import web
from typer.testing import CliRunner

from pacup import __version__
from pacup.cli import app as app_module
from pacup.cli.formatters import print_summary_panel
from pacup.exceptions import TransportError
from pacup.models.stats import FetchStats

DATA_DIR = Path(__file__).parent / "data"
SAMPLE = DATA_DIR / "1password-cli-bin.SRCINFO"

runner = CliRunner()


@pytest.fixture(autouse=True)
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    config_file = tmp_path / "config" / "config.ini"
    monkeypatch.setattr(app_module, "CONFIG_FILE", config_file)
    return config_file


def test_version() -> None:
    result = runner.invoke(app_module.app, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_info_shows_package() -> None:
    result = runner.invoke(app_module.app, ["info", str(SAMPLE)])
    assert result.exit_code == 0
    assert "1password-cli-bin" in result.output
    assert "2.28.0" in result.output


def test_info_accepts_package_directory(tmp_path: Path) -> None:
    package_dir = tmp_path / "1password-cli-bin"
    package_dir.mkdir()
    shutil.copy(SAMPLE, package_dir / ".SRCINFO")
    result = runner.invoke(app_module.app, ["info", str(package_dir)])
    assert result.exit_code == 0
    assert "1password-cli-bin" in result.output


def test_info_reports_bad_manifest(tmp_path: Path) -> None:
    manifest = tmp_path / ".SRCINFO"
    manifest.write_text("pkgbase = foo\n\tsource_windows = https://x/y\n", encoding="utf-8")
    result = runner.invoke(app_module.app, ["info", str(manifest)])
    assert result.exit_code == 1
    assert "UnknownQualifierError" in result.output


def test_info_reports_missing_file(tmp_path: Path) -> None:
    result = runner.invoke(app_module.app, ["info", str(tmp_path)])
    assert result.exit_code == 1
    assert "FileNotFoundError" in result.output


def test_fetch_dry_run(tmp_path: Path) -> None:
    output = tmp_path / "out"
    result = runner.invoke(
        app_module.app, ["fetch", str(SAMPLE), "--dry-run", "-o", str(output)]
    )
    assert result.exit_code == 0
    assert "Fetching sources for 1password-cli-bin" in result.output
    assert not output.exists()


def test_fetch_rejects_unknown_arch() -> None:
    result = runner.invoke(
        app_module.app, ["fetch", str(SAMPLE), "--dry-run", "--arch", "sparc"]
    )
    assert result.exit_code != 0


def test_init_then_validate(isolated_config: Path) -> None:
    result = runner.invoke(app_module.app, ["init"])
    assert result.exit_code == 0
    assert isolated_config.is_file()

    result = runner.invoke(app_module.app, ["validate"])
    assert result.exit_code == 0
    assert "Validated Settings" in result.output


def test_validate_reports_invalid_config(isolated_config: Path) -> None:
    isolated_config.parent.mkdir(parents=True)
    isolated_config.write_text("[DEFAULT]\nmax_workers = 0\n", encoding="utf-8")
    result = runner.invoke(app_module.app, ["validate"])
    assert result.exit_code == 1
    assert "invalid" in result.output


@pytest.fixture
def origin():
    """Serves a fixed payload from a background event loop."""

    async def payload(request: web.Request) -> web.Response:
        return web.Response(body=b"not what the manifest expects")

    app = web.Application()
    app.router.add_get("/{name}", payload)

    loop = asyncio.new_event_loop()
    app_runner = web.AppRunner(app)
    loop.run_until_complete(app_runner.setup())
    site = web.TCPSite(app_runner, "127.0.0.1", 0)
    loop.run_until_complete(site.start())
    host, port = app_runner.addresses[0][:2]
    thread = threading.Thread(target=loop.run_forever, daemon=True)
    thread.start()

    yield f"http://{host}:{port}"

    loop.call_soon_threadsafe(loop.stop)
    thread.join()
    loop.run_until_complete(app_runner.cleanup())
    loop.close()


def test_fetch_fails_on_checksum_mismatch(tmp_path: Path, origin: str) -> None:
    manifest = tmp_path / ".SRCINFO"
    manifest.write_text(
        f"pkgbase = foo\n\tpkgver = 1\n\tsource = {origin}/foo.tar.gz\n"
        f"\tsha256sums = {'0' * 64}\n",
        encoding="utf-8",
    )
    output = tmp_path / "out"
    result = runner.invoke(app_module.app, ["fetch", str(tmp_path), "-o", str(output)])
    assert result.exit_code == 1
    assert "Mismatches" in result.output
    assert not (output / "foo.tar.gz").exists()


def test_info_prints_bracketed_text_verbatim(tmp_path: Path) -> None:
    manifest = tmp_path / ".SRCINFO"
    manifest.write_text(
        "pkgbase = foo\n\tpkgver = 1.0[/]\n\tmaintainer = Ann [bot] <ann@example.com>\n",
        encoding="utf-8",
    )
    result = runner.invoke(app_module.app, ["info", str(manifest)])
    assert result.exit_code == 0
    assert "1.0[/]" in result.output
    assert "Ann [bot]" in result.output


def test_summary_prints_bracketed_failures_verbatim(
    capsys: pytest.CaptureFixture[str],
) -> None:
    stats = FetchStats()
    stats.record_failure("pkg[/].zip", TransportError("HTTP 404 [red]"))
    print_summary_panel(stats, 1.0)
    output = capsys.readouterr().out
    assert "pkg[/].zip" in output
    assert "HTTP 404 [red]" in output
