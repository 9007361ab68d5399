"""Exceptions raised by the teardown engine and its runtime client."""

from typing import TYPE_CHECKING, List, Optional, Sequence

if TYPE_CHECKING:
    from .services.teardown_result import ResourceFailure


class TeardownError(Exception):
    """Base exception for teardown errors."""

    pass


class RuntimeUnavailableError(TeardownError):
    """Raised when no container runtime executable can be used."""

    pass


class RuntimeClientError(TeardownError):
    """Raised when a runtime command exits unsuccessfully."""

    def __init__(
        self,
        message: str,
        command: Optional[Sequence[str]] = None,
        returncode: Optional[int] = None,
        stderr: str = "",
    ):
        super().__init__(message)
        self.command = list(command) if command else []
        self.returncode = returncode
        self.stderr = stderr


class ResourceNotFoundError(RuntimeClientError):
    """Raised when the runtime reports that the object does not exist."""

    pass


class DiscoveryError(TeardownError):
    """Raised when project resources cannot be listed.

    Teardown never proceeds without a complete view of the project.
    """

    pass


class TeardownFailedError(TeardownError):
    """Raised when a finished teardown left resources behind."""

    def __init__(self, message: str, failures: List["ResourceFailure"]):
        super().__init__(message)
        self.failures = failures
