"""Configuration models."""

from pydantic import BaseModel, Field, field_validator


class Settings(BaseModel):
    """User settings, loaded from ``config.yaml``."""

    vboxmanage_path: str | None = None
    clonevdi_path: str | None = None
    disk_extension: str = Field(default=".vdi", pattern=r"^\.[A-Za-z0-9]+$")
    clone_prefix: str = "Clone of "
    shutdown_timeout: int = Field(default=60, ge=0)
    poll_interval: float = Field(default=1.0, gt=0)
    poweroff_settle: float = Field(default=3.0, ge=0)
    gui_close_timeout: int = Field(default=5, ge=0)
    empty_recycle_bin: bool = False

    @field_validator("clone_prefix")
    @classmethod
    def validate_clone_prefix(cls, v: str) -> str:
        """Reject prefixes that would not produce a sibling file.

        Args:
            v: Field value

        Returns:
            Validated value

        Raises:
            ValueError: If the prefix is empty or contains a path separator
        """
        if not v:
            raise ValueError("clone_prefix must not be empty")
        if "/" in v or "\\" in v:
            raise ValueError("clone_prefix must not contain path separators")
        return v
