"""Custom exceptions for niv-updater."""


class UpdaterError(Exception):
    """Base exception for all updater errors."""


class ConfigError(UpdaterError):
    """Raised when the run settings are incomplete or inconsistent."""


class PinStoreError(UpdaterError):
    """Raised when the pin manifest or the base commit cannot be read. Fatal."""


class BranchCreationError(UpdaterError):
    """Raised when an update branch cannot be created. Fatal."""

    def __init__(self, branch: str, reason: str):
        self.branch = branch
        self.reason = reason
        super().__init__(f"failed to create branch '{branch}': {reason}")


class NivError(UpdaterError):
    """Raised when the pin-update tool fails, times out, or cannot be started."""

    def __init__(self, args: list[str], reason: str):
        self.command = args
        self.reason = reason
        super().__init__(f"{' '.join(args)} failed: {reason}")


class GitHubAPIError(UpdaterError):
    """Raised by the GitHub client for any non-success response."""

    def __init__(self, method: str, path: str, status_code: int | None, message: str):
        self.method = method
        self.path = path
        self.status_code = status_code
        self.message = message
        status = status_code if status_code is not None else "no response"
        super().__init__(f"{method} {path} -> {status}: {message}")
