#!/usr/bin/env python3
"""Orchestrator module for the Kubernetes node installation workflow."""

import sys
import time
from functools import partial
from typing import Any, Callable, List, Optional, Tuple

from .errors import InstallerError

JOIN_COMMAND = "kubeadm token create --print-join-command --ttl 0"


class InstallOrchestrator:
    """
    Orchestrates the installation of a worker, control-plane or single-node Kubernetes node.
    """

    def __init__(self, **dependencies: Any) -> None:
        """
        Initialize the orchestrator with all required dependencies.

        Args:
            **dependencies: All required function and class dependencies including:
                - printer: PrintManager instance for output formatting
                - format_runtime: Function to format time durations
                - check_root_privileges, check_linux_distribution: Preflight checks
                - disable_swap, remove_packages, configure_system, configure_containerd: System preparation
                - install_container_runtime, install_kubernetes_packages: Package installation
                - start_services, check_worker_services: Service management
                - ClusterBootstrapper: ClusterBootstrapper class constructor
                - handle_successful_completion: Completion output function
        """
        # Core dependencies
        self.printer = dependencies["printer"]
        self.format_runtime = dependencies["format_runtime"]

        # Preflight
        self.check_root_privileges = dependencies["check_root_privileges"]
        self.check_linux_distribution = dependencies["check_linux_distribution"]

        # System preparation and installation
        self.disable_swap = dependencies["disable_swap"]
        self.remove_packages = dependencies["remove_packages"]
        self.configure_system = dependencies["configure_system"]
        self.install_container_runtime = dependencies["install_container_runtime"]
        self.configure_containerd = dependencies["configure_containerd"]
        self.install_kubernetes_packages = dependencies["install_kubernetes_packages"]

        # Services
        self.start_services = dependencies["start_services"]
        self.check_worker_services = dependencies["check_worker_services"]

        # Class constructors
        self.ClusterBootstrapper = dependencies["ClusterBootstrapper"]

        # Workflow functions
        self.handle_successful_completion = dependencies["handle_successful_completion"]

        self.host_info = None
        self.bootstrapper = None
        self.pods_running = None

    def _check_platform(self, config: Any, log: Any) -> None:
        self.host_info = self.check_linux_distribution(config, log)

    def _install_container_runtime(self, config: Any, log: Any) -> None:
        self.install_container_runtime(config, log, self.host_info)

    def _wait_for_pods_running(self) -> None:
        # Non-fatal: the result is only reported
        self.pods_running = self.bootstrapper.wait_for_pods_running()

    def build_step_plan(self, config: Any, log: Any) -> List[Tuple[str, Callable[[], Any]]]:
        """
        Build the ordered list of steps for the configured role.

        The single-node plan contains every control-plane step followed by the
        single-node steps; the worker plan ends with the service check.

        Args:
            config: RunConfig for the run
            log: ScopedLogResource for the run

        Returns:
            List of (step title, zero-argument callable) pairs
        """
        steps = [
            ("Checking for root privileges", self.check_root_privileges),
            ("Checking Linux distribution", partial(self._check_platform, config, log)),
            ("Disabling swap", partial(self.disable_swap, config, log)),
            ("Removing packages", partial(self.remove_packages, config, log)),
            ("Configuring kernel modules and sysctls", partial(self.configure_system, config, log)),
            ("Installing containerd", partial(self._install_container_runtime, config, log)),
            ("Configuring containerd", partial(self.configure_containerd, config, log)),
            ("Installing Kubernetes packages", partial(self.install_kubernetes_packages, config, log)),
            ("Starting services", partial(self.start_services, config, log)),
        ]

        if not config.is_control_plane:
            steps.append(("Checking worker services", partial(self.check_worker_services, config, log)))
            return steps

        self.bootstrapper = self.ClusterBootstrapper(config, log, printer=self.printer)
        steps += [
            ("Initialising the Kubernetes cluster via kubeadm", self.bootstrapper.kubeadm_init),
            ("Configuring kubeconfig", self.bootstrapper.configure_kubeconfig),
            ("Installing Calico CNI", self.bootstrapper.install_cni),
            ("Waiting for nodes to be ready", self.bootstrapper.wait_for_nodes),
            ("Checking Kubernetes version", self.bootstrapper.validate_kubernetes_version),
            ("Installing metrics server", self.bootstrapper.install_metrics_server),
        ]

        if config.is_single_node:
            steps += [
                ("Configuring as a single node cluster", self.bootstrapper.configure_as_single_node),
                ("Deploying test nginx pod", self.bootstrapper.test_nginx_pod),
                ("Waiting for all pods to be running", self._wait_for_pods_running),
            ]

        return steps

    def process_installation(self, config: Any, log: Any) -> Optional[str]:
        """
        Run every step for the configured role, then report completion.

        Steps run strictly in order and are attempted once; the first
        InstallerError propagates to the caller.

        Args:
            config: RunConfig for the run
            log: ScopedLogResource receiving command output

        Returns:
            The worker join command for control-plane roles, None for workers
        """
        start_time = time.time()
        self.printer.print_header(f"Installing Kubernetes {config.kube_version} ({config.role.value})")
        self.printer.print_info(f"Logging all output to {log.log_file}")

        steps = self.build_step_plan(config, log)
        total_steps = len(steps)

        for step_num, (title, step) in enumerate(steps, start=1):
            self.printer.print_step(step_num, total_steps, title)
            log.write_section(title)
            step()

        join_command = None
        if config.is_control_plane:
            log.write_section("Creating join command")
            join_command = self.bootstrapper.get_join_command()

        self.handle_successful_completion(
            config,
            join_command,
            start_time,
            pods_running=self.pods_running,
            printer=self.printer,
            format_runtime=self.format_runtime,
        )
        return join_command


def handle_successful_completion(
    config: Any,
    join_command: Optional[str],
    start_time: float,
    pods_running: Optional[bool] = None,
    printer: Any = None,
    format_runtime: Any = None,
) -> None:
    """
    Print the completion summary and the worker join instructions.

    Args:
        config: RunConfig for the run
        join_command: Join command created on the control plane, None for workers
        start_time: Start time of the installation
        pods_running: Result of the single-node pod check, None if it did not run
        printer: PrintManager instance for output formatting
        format_runtime: Function to format time duration
    """
    total_runtime = format_runtime(start_time, time.time())
    printer.print_header("Install complete!")

    if pods_running is False:
        printer.print_warning("Some pods were not Running when the installer finished")

    if config.is_control_plane:
        print()
        print("### Command to add a worker node ###")
        print(join_command)
    else:
        print()
        print("### To add this node as a worker node ###")
        print("Run the below on the control plane node:")
        print(JOIN_COMMAND)
        print("and execute the output on the worker nodes")
        print()

    printer.print_info(f"Total runtime: {total_runtime}")


def handle_install_failure(error: BaseException, log: Any, printer: Any = None) -> None:
    """
    Report a failed installation and dump the complete run log to stderr.

    Args:
        error: The exception that stopped the run
        log: ScopedLogResource holding the captured output
        printer: PrintManager instance for output formatting
    """
    if isinstance(error, InstallerError):
        printer.print_error(f"Installation failed: {error}")
    else:
        printer.print_error(f"Installation failed with unexpected {type(error).__name__}: {error}")

    print("\n### Log file ###", file=sys.stderr)
    print(log.read(), file=sys.stderr)
    printer.print_error("The host may be partially configured; check the log above before re-running")
