"""Custom exceptions for vdicompact."""


class VdiCompactError(Exception):
    """Base exception for vdicompact."""

    pass


class ConfigError(VdiCompactError):
    """Configuration related errors."""

    pass


class ToolNotFoundError(VdiCompactError):
    """A required external executable could not be located."""

    def __init__(self, tool: str, detail: str | None = None) -> None:
        """Initialize tool not found error.

        Args:
            tool: Name of the missing tool (VBoxManage, CloneVDI)
            detail: Extra context, usually the paths that were tried
        """
        message = f"{tool} not found"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)
        self.tool = tool


class UnsupportedVersionError(VdiCompactError):
    """The compactor executable is too old or a known broken release."""

    def __init__(self, message: str, version: str | None = None) -> None:
        """Initialize unsupported version error.

        Args:
            message: Error message
            version: Version string reported by the executable, if any
        """
        super().__init__(message)
        self.version = version


class CommandError(VdiCompactError):
    """An external command failed or could not be started."""

    def __init__(self, message: str, returncode: int | None = None) -> None:
        """Initialize command error.

        Args:
            message: Error message
            returncode: Process exit code if the process ran
        """
        super().__init__(message)
        self.returncode = returncode
