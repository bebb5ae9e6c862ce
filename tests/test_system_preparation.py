#!/usr/bin/env python3
"""
Pytest tests for the system preparation steps.
"""

import pytest
import sys
import os
from unittest.mock import patch, call

# Add parent directory to path for module imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from kube_installer.errors import CommandError  # noqa: E402
from kube_installer.system_preparation import (  # noqa: E402
    STALE_PACKAGE_COMMANDS,
    comment_swap_entries,
    configure_containerd,
    configure_system,
    disable_swap,
    enable_systemd_cgroup,
    remove_packages,
)

UBUNTU_FSTAB = """# /etc/fstab: static file system information.
UUID=3f1c2a8e-6f0b-4c47-9d1e-2b7a8c9d0e1f / ext4 defaults 0 1
/swap.img\tnone\tswap\tsw\t0\t0
UUID=9a8b7c6d-1111-2222-3333-444455556666 none swap sw 0 0
#/old.swap none swap sw 0 0
"""

CONTAINERD_DEFAULT_CONFIG = """version = 3

[plugins]
  [plugins.'io.containerd.cri.v1.runtime'.containerd.runtimes.runc.options]
    BinaryName = ''
    SystemdCgroup = false
"""


class TestCommentSwapEntries:
    """Test cases for the fstab rewrite."""

    def test_swap_lines_are_commented(self) -> None:
        result = comment_swap_entries(UBUNTU_FSTAB).splitlines()

        assert result[1].startswith("UUID=3f1c2a8e")
        assert result[2] == "#/swap.img\tnone\tswap\tsw\t0\t0"
        assert result[3].startswith("#UUID=9a8b7c6d")

    def test_already_commented_line_untouched(self) -> None:
        result = comment_swap_entries(UBUNTU_FSTAB).splitlines()
        assert result[4] == "#/old.swap none swap sw 0 0"

    def test_no_swap_is_unchanged(self) -> None:
        fstab = "UUID=abc / ext4 defaults 0 1\n/dev/sdb1 /mnt/swapfiles ext4 defaults 0 2\n"
        assert comment_swap_entries(fstab) == fstab


class TestDisableSwap:
    def test_swapoff_and_fstab_rewrite(self, tmp_path, run_log, worker_config) -> None:
        fstab = tmp_path / "fstab"
        fstab.write_text(UBUNTU_FSTAB)

        with patch("kube_installer.system_preparation.run_command") as mock_run:
            disable_swap(worker_config, run_log, fstab_path=str(fstab))

        mock_run.assert_called_once_with(["swapoff", "-a"], run_log)
        assert fstab.read_text() == comment_swap_entries(UBUNTU_FSTAB)

    def test_swapoff_failure_is_fatal(self, tmp_path, run_log, worker_config) -> None:
        fstab = tmp_path / "fstab"
        fstab.write_text(UBUNTU_FSTAB)

        with patch(
            "kube_installer.system_preparation.run_command", side_effect=CommandError(["swapoff", "-a"], 255)
        ):
            with pytest.raises(CommandError):
                disable_swap(worker_config, run_log, fstab_path=str(fstab))

        assert fstab.read_text() == UBUNTU_FSTAB


class TestRemovePackages:
    """Test cases for best-effort package removal."""

    def test_all_commands_run_without_check(self, run_log, worker_config, completed_process) -> None:
        with patch(
            "kube_installer.system_preparation.run_command", return_value=completed_process(0)
        ) as mock_run:
            remove_packages(worker_config, run_log)

        assert mock_run.call_args_list == [call(command, run_log, check=False) for command in STALE_PACKAGE_COMMANDS]

    def test_failures_are_tolerated(self, run_log, worker_config, completed_process, capsys) -> None:
        """Test that 'not installed' failures do not stop the step."""
        with patch(
            "kube_installer.system_preparation.run_command", return_value=completed_process(100)
        ) as mock_run:
            remove_packages(worker_config, run_log)

        assert mock_run.call_count == len(STALE_PACKAGE_COMMANDS)
        assert "cleanup command(s) reported errors" in capsys.readouterr().out


class TestConfigureSystem:
    def test_modules_and_sysctls_written_and_applied(self, tmp_path, run_log, worker_config) -> None:
        modules_load = tmp_path / "modules-load.d" / "k8s.conf"
        sysctl = tmp_path / "sysctl.d" / "k8s.conf"

        with patch("kube_installer.system_preparation.run_command") as mock_run:
            configure_system(worker_config, run_log, modules_load_path=str(modules_load), sysctl_path=str(sysctl))

        assert modules_load.read_text() == "overlay\nbr_netfilter\n"
        assert "net.ipv4.ip_forward = 1" in sysctl.read_text()
        assert "net.bridge.bridge-nf-call-iptables = 1" in sysctl.read_text()
        assert mock_run.call_args_list == [
            call(["modprobe", "overlay"], run_log),
            call(["modprobe", "br_netfilter"], run_log),
            call(["sysctl", "--system"], run_log),
        ]


class TestConfigureContainerd:
    def test_enable_systemd_cgroup(self) -> None:
        assert "SystemdCgroup = true" in enable_systemd_cgroup(CONTAINERD_DEFAULT_CONFIG)
        assert "SystemdCgroup = false" not in enable_systemd_cgroup(CONTAINERD_DEFAULT_CONFIG)

    def test_config_written_with_systemd_cgroup(self, tmp_path, run_log, worker_config, completed_process) -> None:
        config_path = tmp_path / "containerd" / "config.toml"

        with patch(
            "kube_installer.system_preparation.run_command",
            return_value=completed_process(0, stdout=CONTAINERD_DEFAULT_CONFIG),
        ):
            configure_containerd(worker_config, run_log, config_path=str(config_path))

        written = config_path.read_text()
        assert "SystemdCgroup = true" in written
        assert "BinaryName = ''" in written

    def test_empty_default_config_is_fatal(self, tmp_path, run_log, worker_config, completed_process) -> None:
        with patch("kube_installer.system_preparation.run_command", return_value=completed_process(0, stdout="")):
            with pytest.raises(CommandError):
                configure_containerd(worker_config, run_log, config_path=str(tmp_path / "config.toml"))
