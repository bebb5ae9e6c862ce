#!/usr/bin/env python3
"""
Shared pytest configuration and fixtures for all tests.
"""

import pytest
import sys
import os
import subprocess
import yaml
from pathlib import Path
from typing import Dict, Any
from unittest.mock import Mock

# Add the parent directory to Python path so we can import modules
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from kube_installer import print_manager  # noqa: E402
from kube_installer.config import Role, RunConfig  # noqa: E402
from kube_installer.log_manager import ScopedLogResource  # noqa: E402


@pytest.fixture(autouse=True)
def reset_verbose_mode():
    """Restore the global verbose flag changed by argument parsing"""
    yield
    print_manager.VERBOSE_MODE = False


@pytest.fixture
def mock_printer() -> Mock:
    """Mock printer for testing output operations.

    Returns:
        Mock: Mock printer instance with all required methods.
    """
    printer = Mock()
    printer.print_header = Mock()
    printer.print_info = Mock()
    printer.print_action = Mock()
    printer.print_success = Mock()
    printer.print_error = Mock()
    printer.print_warning = Mock()
    printer.print_step = Mock()
    return printer


@pytest.fixture
def run_log(tmp_path):
    """Real ScopedLogResource rooted in the test's temporary directory"""
    with ScopedLogResource(base_dir=str(tmp_path)) as log:
        yield log


@pytest.fixture
def completed_process():
    """Factory for subprocess.CompletedProcess results"""

    def _make(returncode=0, stdout="", stderr="", args=None):
        return subprocess.CompletedProcess(args or [], returncode, stdout=stdout, stderr=stderr)

    return _make


@pytest.fixture
def worker_config() -> RunConfig:
    return RunConfig(role=Role.WORKER)


@pytest.fixture
def control_plane_config(tmp_path) -> RunConfig:
    """Control plane config writing kubeadm-config.yaml into the test directory"""
    return RunConfig(
        role=Role.CONTROL_PLANE,
        kubeadm_config_path=str(tmp_path / "kubeadm-config.yaml"),
        poll_interval=0.01,
        taint_grace_period=0,
    )


@pytest.fixture
def single_node_config(tmp_path) -> RunConfig:
    return RunConfig(
        role=Role.SINGLE_NODE,
        kubeadm_config_path=str(tmp_path / "kubeadm-config.yaml"),
        poll_interval=0.01,
        taint_grace_period=0,
    )


@pytest.fixture
def sample_nodes_ready() -> Dict[str, Any]:
    """'kubectl get nodes -o json' output with a single Ready control plane node"""
    return {
        "items": [
            {
                "metadata": {"name": "cp-1", "labels": {"node-role.kubernetes.io/control-plane": ""}},
                "status": {
                    "conditions": [
                        {"type": "MemoryPressure", "status": "False"},
                        {"type": "Ready", "status": "True", "reason": "KubeletReady"},
                    ]
                },
            }
        ]
    }


@pytest.fixture
def sample_nodes_not_ready() -> Dict[str, Any]:
    """Node registered but waiting for the CNI"""
    return {
        "items": [
            {
                "metadata": {"name": "cp-1"},
                "status": {
                    "conditions": [
                        {
                            "type": "Ready",
                            "status": "False",
                            "reason": "KubeletNotReady",
                            "message": "container runtime network not ready",
                        }
                    ]
                },
            }
        ]
    }


@pytest.fixture
def yaml_validator():
    """YAML validation helper fixture.

    Returns:
        Callable that validates YAML file structure and content.
    """

    def _validate_yaml(file_path: str, expected_fields: Dict[str, Any] = None) -> Dict[str, Any]:
        """Validate YAML file structure and optionally check field values.

        Args:
            file_path: Path to YAML file to validate
            expected_fields: Optional dictionary of field:value pairs to check

        Returns:
            Dict containing the loaded YAML data
        """
        assert Path(file_path).exists(), f"YAML file does not exist: {file_path}"

        with open(file_path, "r") as f:
            data = yaml.safe_load(f)

        assert isinstance(data, dict), f"YAML file does not contain a dictionary: {file_path}"

        if expected_fields:
            for field_path, expected_value in expected_fields.items():
                # Support nested field paths like 'networking.podSubnet'
                current = data
                for key in field_path.split("."):
                    assert key in current, f"Field '{field_path}' not found in YAML"
                    current = current[key]
                assert current == expected_value, f"Field '{field_path}' = {current}, expected {expected_value}"

        return data

    return _validate_yaml
