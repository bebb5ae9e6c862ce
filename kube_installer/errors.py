#!/usr/bin/env python3
"""Exception types raised by installer steps."""


class InstallerError(Exception):
    """Base class for every fatal installation failure."""


class UsageError(InstallerError):
    """Raised when help was requested on the command line."""


class UnsupportedPlatformError(InstallerError):
    """The host OS release does not match the supported release."""


class InsufficientPrivilegesError(InstallerError):
    """The installer is not running as root."""


class CommandError(InstallerError):
    """An external command exited with a non-zero status."""

    def __init__(self, command, returncode, stderr=""):
        self.command = list(command)
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(f"Command '{' '.join(self.command)}' failed with exit code {returncode}")


class PackageNotFoundError(InstallerError):
    """A pinned package version is not available from the configured repositories."""


class NetworkDetectionError(InstallerError):
    """The primary IPv4 address of the node could not be determined."""


class ReadinessTimeoutError(InstallerError):
    """Cluster nodes did not report Ready before the deadline."""


class VersionMismatchError(InstallerError):
    """Installed client/server versions differ from each other or from the requested version."""


class SmokeTestTimeoutError(InstallerError):
    """The smoke test pod did not become Ready before the deadline."""


class ServiceNotActiveError(InstallerError):
    """A required system service is not active."""
