"""
Custom exceptions for srpmtools.
"""

from typing import Optional


class SrpmToolsError(Exception):
    """Base exception for srpmtools."""

    pass


class AcquisitionError(SrpmToolsError):
    """Raised when an SRPM cannot be fetched or copied locally."""

    pass


class DirectoryCreateError(SrpmToolsError):
    """Raised when a build directory cannot be created."""

    def __init__(self, path: str, reason: Optional[str] = None):
        self.path = path
        message = f"Failed to create directory: {path}"
        if reason:
            message = f"{message} - {reason}"
        super().__init__(message)


class UnpackFailedError(SrpmToolsError):
    """Raised when an SRPM cannot be unpacked."""

    def __init__(self, path: str, reason: Optional[str] = None):
        self.path = path
        message = f"Failed to unpack SRPM: {path}"
        if reason:
            message = f"{message} - {reason}"
        super().__init__(message)


class BuildToolError(SrpmToolsError):
    """Raised when an external build tool fails."""

    pass


class ToolNotFoundError(BuildToolError):
    """Raised when an external tool is not available in PATH."""

    pass


class EmptyBuildOutputError(SrpmToolsError):
    """Raised when rpmbuild succeeds but leaves the BUILD directory empty."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Build directory is empty after applying patches: {path}")


class SpecNotFoundError(SrpmToolsError):
    """Raised when no spec file can be found."""

    pass


class NormalizeError(SrpmToolsError):
    """Raised when a spec file cannot be cleaned up for rpmspec."""

    pass


class NoSourcesError(SrpmToolsError):
    """Raised when a spec file declares no sources."""

    pass
