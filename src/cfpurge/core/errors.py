class CfPurgeError(Exception):
    """Base error for all user-facing cfpurge exceptions."""


class ConfigurationError(CfPurgeError):
    """Raised when configuration is invalid or incomplete."""


class UsageError(CfPurgeError):
    """Raised when the command line cannot be acted on."""


class InputNotFoundError(UsageError):
    """Raised when the log file does not exist."""


class QueryError(CfPurgeError):
    """Raised when a hostkey lookup against PostgreSQL fails."""


class PurgeCommandError(CfPurgeError):
    """Raised when cf-key fails to remove a hostkey."""

    def __init__(self, message: str, output: str = "") -> None:
        super().__init__(message)
        self.output = output


class StagingIOError(CfPurgeError):
    """Raised when the report staging file cannot be created or written."""


class RelocationError(CfPurgeError):
    """Raised when the staged report cannot be moved to its final path."""

    def __init__(self, message: str, staging_path: str) -> None:
        super().__init__(message)
        self.staging_path = staging_path
