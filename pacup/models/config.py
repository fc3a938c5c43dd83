"""
Pydantic model for application configuration.
Provides robust validation for all settings.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

MIN_CHUNK_SIZE = 1024  # 1 KB
MAX_CHUNK_SIZE = 16 * 1024 * 1024  # 16 MB

WRITE_MODES = ("overwrite", "append")


class PacupConfig(BaseModel):
    """A validated configuration model for the application."""

    model_config = ConfigDict(validate_assignment=True, str_strip_whitespace=True)

    # Download Settings
    max_workers: int = 4
    max_attempts: int = 3
    base_delay: float = 1.5
    chunk_size: int = 131072
    write_mode: str = "overwrite"
    cleanup_partial: bool = True
    output_dir: str = "."
    dry_run: bool = False

    # Network Timeouts (seconds)
    connect_timeout: float = 15
    read_timeout: float = 90

    # Internal fields not loaded from INI file
    config_path: str = Field("", repr=False)

    @field_validator("max_workers")
    @classmethod
    def validate_workers(cls, v: int) -> int:
        """Ensures a reasonable number of workers."""
        if v < 1 or v > 32:
            raise ValueError("Max workers must be between 1 and 32.")
        return v

    @field_validator("max_attempts")
    @classmethod
    def validate_attempts(cls, v: int) -> int:
        if v < 1 or v > 10:
            raise ValueError("Max attempts must be between 1 and 10.")
        return v

    @field_validator("base_delay")
    @classmethod
    def validate_delay(cls, v: float) -> float:
        if v < 0:
            raise ValueError("Base delay cannot be negative.")
        return v

    @field_validator("chunk_size")
    @classmethod
    def validate_chunk_size(cls, v: int) -> int:
        """Keeps chunks large enough to be efficient and small enough to bound memory."""
        if v < MIN_CHUNK_SIZE or v > MAX_CHUNK_SIZE:
            raise ValueError(
                f"Chunk size must be between {MIN_CHUNK_SIZE} and {MAX_CHUNK_SIZE} bytes."
            )
        return v

    @field_validator("write_mode")
    @classmethod
    def validate_write_mode(cls, v: str) -> str:
        v = v.lower()
        if v not in WRITE_MODES:
            raise ValueError(f"Write mode must be one of: {', '.join(WRITE_MODES)}.")
        return v

    @field_validator("connect_timeout", "read_timeout")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("Timeouts must be positive.")
        return v

    @field_validator("output_dir")
    @classmethod
    def validate_output_dir(cls, v: str) -> str:
        if not v:
            raise ValueError("Output directory cannot be empty.")
        return v

    @model_validator(mode="after")
    def validate_option_conflicts(self) -> "PacupConfig":
        """Checks for conflicting download options."""
        if self.write_mode == "append" and self.cleanup_partial:
            raise ValueError(
                "Cannot use append mode with cleanup_partial: a failed resume "
                "would delete previously downloaded data."
            )
        return self

    @classmethod
    def get_ini_keys(cls) -> set[str]:
        """Returns a set of all keys that are expected in the INI file."""
        internal_fields = {"config_path", "dry_run"}
        return {key for key in cls.model_fields if key not in internal_fields}
