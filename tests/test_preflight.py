#!/usr/bin/env python3
"""
Pytest tests for the preflight checks.
"""

import pytest
import sys
import os
from unittest.mock import patch

# Add parent directory to path for module imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from kube_installer.errors import InsufficientPrivilegesError, UnsupportedPlatformError  # noqa: E402
from kube_installer.preflight import HostInfo, check_linux_distribution, check_root_privileges  # noqa: E402

NOBLE_LSB_RELEASE = """DISTRIB_ID=Ubuntu
DISTRIB_RELEASE=24.04
DISTRIB_CODENAME=noble
DISTRIB_DESCRIPTION="Ubuntu 24.04.2 LTS"
"""

JAMMY_LSB_RELEASE = """DISTRIB_ID=Ubuntu
DISTRIB_RELEASE=22.04
DISTRIB_CODENAME=jammy
DISTRIB_DESCRIPTION="Ubuntu 22.04.5 LTS"
"""


class TestCheckLinuxDistribution:
    """Test cases for the OS release check."""

    def test_supported_release(self, tmp_path, run_log, worker_config) -> None:
        lsb_release = tmp_path / "lsb-release"
        lsb_release.write_text(NOBLE_LSB_RELEASE)

        host_info = check_linux_distribution(worker_config, run_log, lsb_release_path=str(lsb_release))

        assert host_info == HostInfo(release="24.04", codename="noble")
        assert "Detected distribution: Ubuntu 24.04 (noble)" in run_log.read()

    def test_unsupported_release(self, tmp_path, run_log, worker_config) -> None:
        lsb_release = tmp_path / "lsb-release"
        lsb_release.write_text(JAMMY_LSB_RELEASE)

        with pytest.raises(UnsupportedPlatformError) as exc_info:
            check_linux_distribution(worker_config, run_log, lsb_release_path=str(lsb_release))

        assert "24.04" in str(exc_info.value)
        assert "22.04" in str(exc_info.value)

    def test_missing_release_file(self, tmp_path, run_log, worker_config) -> None:
        with pytest.raises(UnsupportedPlatformError):
            check_linux_distribution(worker_config, run_log, lsb_release_path=str(tmp_path / "missing"))

    def test_release_field_absent(self, tmp_path, run_log, worker_config) -> None:
        lsb_release = tmp_path / "lsb-release"
        lsb_release.write_text("DISTRIB_ID=Debian\n")

        with pytest.raises(UnsupportedPlatformError):
            check_linux_distribution(worker_config, run_log, lsb_release_path=str(lsb_release))


class TestCheckRootPrivileges:
    def test_root_passes(self) -> None:
        with patch("os.geteuid", return_value=0):
            check_root_privileges()

    def test_non_root_fails(self) -> None:
        with patch("os.geteuid", return_value=1000):
            with pytest.raises(InsufficientPrivilegesError):
                check_root_privileges()
