#!/usr/bin/env python3
"""Preflight checks run before any step mutates the host."""

import os
from dataclasses import dataclass

from .errors import InsufficientPrivilegesError, UnsupportedPlatformError
from .print_manager import printer
from .utilities import parse_key_value_file

LSB_RELEASE_PATH = "/etc/lsb-release"


@dataclass(frozen=True)
class HostInfo:
    """Identification of the host OS"""

    release: str
    codename: str


def check_linux_distribution(config, log, lsb_release_path=LSB_RELEASE_PATH):
    """
    Verify the host runs the supported Ubuntu release.

    Args:
        config: RunConfig with the expected ubuntu_version
        log: ScopedLogResource for the run
        lsb_release_path: OS identification file to read

    Returns:
        HostInfo: Release and codename of the host

    Raises:
        UnsupportedPlatformError: If the file is unreadable or the release differs
    """
    try:
        with open(lsb_release_path, "r") as f:
            values = parse_key_value_file(f.read())
    except OSError as e:
        raise UnsupportedPlatformError(f"Cannot read {lsb_release_path}: {e}") from e

    release = values.get("DISTRIB_RELEASE", "")
    codename = values.get("DISTRIB_CODENAME", "")
    log.write(f"Detected distribution: {values.get('DISTRIB_ID', 'unknown')} {release} ({codename})")

    if release != config.ubuntu_version:
        raise UnsupportedPlatformError(
            f"This installer only works on Ubuntu {config.ubuntu_version}, found release '{release or 'unknown'}'"
        )

    printer.print_success(f"Ubuntu {release} ({codename}) is supported")
    return HostInfo(release=release, codename=codename)


def check_root_privileges():
    """Raise InsufficientPrivilegesError unless running as root"""
    if os.geteuid() != 0:
        raise InsufficientPrivilegesError("This installer must be run as root (try sudo)")
