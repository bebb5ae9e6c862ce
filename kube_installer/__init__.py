#!/usr/bin/env python3
"""
Kubernetes Node Installer - Modular Components.

This package contains the components of the Kubernetes node installer,
which bootstraps a worker, control-plane or single-node cluster on Ubuntu.

Modules:
- print_manager: Handles all output formatting and printing
- errors: Exceptions raised by installation steps
- config: Run configuration and version constants
- arguments_parser: Command-line argument parsing
- log_manager: Per-run temporary directory and captured command log
- utilities: Command execution and parsing helpers
- preflight: Host checks run before any change is made
- system_preparation: Swap, stale packages, kernel settings, containerd config
- package_installer: Container runtime and Kubernetes package installation
- service_manager: systemd service handling and worker checks
- resource_monitor: Bounded polling of cluster state
- cluster_bootstrap: Control plane initialization and validation
- orchestrator: High-level workflow orchestration and completion handling
"""

from .arguments_parser import ArgumentsParser
from .config import Role, RunConfig
from .log_manager import ScopedLogResource
from .print_manager import PrintManager, printer, VERBOSE_MODE
from .resource_monitor import ReadinessMonitor
from .utilities import (
    run_command,
    execute_kubectl_command,
    format_runtime,
)
from .preflight import HostInfo, check_linux_distribution, check_root_privileges
from .system_preparation import (
    disable_swap,
    remove_packages,
    configure_system,
    configure_containerd,
)
from .package_installer import install_container_runtime, install_kubernetes_packages
from .service_manager import start_services, check_worker_services
from .cluster_bootstrap import ClusterBootstrapper
from .orchestrator import (
    InstallOrchestrator,
    handle_successful_completion,
    handle_install_failure,
)

__all__ = [
    "ArgumentsParser",
    "Role",
    "RunConfig",
    "ScopedLogResource",
    "PrintManager",
    "printer",
    "VERBOSE_MODE",
    "ReadinessMonitor",
    "run_command",
    "execute_kubectl_command",
    "format_runtime",
    "HostInfo",
    "check_linux_distribution",
    "check_root_privileges",
    "disable_swap",
    "remove_packages",
    "configure_system",
    "configure_containerd",
    "install_container_runtime",
    "install_kubernetes_packages",
    "start_services",
    "check_worker_services",
    "ClusterBootstrapper",
    "InstallOrchestrator",
    "handle_successful_completion",
    "handle_install_failure",
]
