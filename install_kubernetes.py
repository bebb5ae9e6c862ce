#!/usr/bin/env python3
"""
Kubernetes Node Installer

This is the main entry point for installing Kubernetes on an Ubuntu node.

Usage:
    install_kubernetes.py        # worker node
    install_kubernetes.py -c     # control plane node
    install_kubernetes.py -s     # single node cluster
    install_kubernetes.py -v     # print the full log when finished
"""

import signal
import sys

from kube_installer import (
    ArgumentsParser,
    ScopedLogResource,
    printer,
    format_runtime,
    check_root_privileges,
    check_linux_distribution,
    disable_swap,
    remove_packages,
    configure_system,
    configure_containerd,
    install_container_runtime,
    install_kubernetes_packages,
    start_services,
    check_worker_services,
    ClusterBootstrapper,
)
from kube_installer.errors import UsageError
from kube_installer.orchestrator import InstallOrchestrator, handle_successful_completion, handle_install_failure


def handle_sigterm(signum, frame):
    """Turn SIGTERM into SystemExit so the run log directory is still removed"""
    printer.print_error("Installation terminated by SIGTERM")
    raise SystemExit(1)


def main(argv=None):
    """
    Main function to install Kubernetes on this node.

    Runs as a worker by default, as a control plane with '-c' and as a single
    node cluster with '-s'. All command output is captured to a temporary log
    which is dumped if any step fails and removed when the run ends.

    Args:
        argv: Command line arguments (defaults to sys.argv[1:])

    Returns:
        int: Process exit code (0 on success or help, 1 on failure)
    """
    try:
        config = ArgumentsParser.parse_arguments(argv)
    except UsageError as e:
        print(e)
        return 0

    # Prepare dependencies for modules
    dependencies = {
        "printer": printer,
        "format_runtime": format_runtime,
        "check_root_privileges": check_root_privileges,
        "check_linux_distribution": check_linux_distribution,
        "disable_swap": disable_swap,
        "remove_packages": remove_packages,
        "configure_system": configure_system,
        "install_container_runtime": install_container_runtime,
        "configure_containerd": configure_containerd,
        "install_kubernetes_packages": install_kubernetes_packages,
        "start_services": start_services,
        "check_worker_services": check_worker_services,
        "ClusterBootstrapper": ClusterBootstrapper,
        "handle_successful_completion": handle_successful_completion,
    }

    # Create orchestrator with all dependencies
    orchestrator = InstallOrchestrator(**dependencies)

    previous_handler = signal.signal(signal.SIGTERM, handle_sigterm)
    try:
        with ScopedLogResource() as log:
            try:
                orchestrator.process_installation(config, log)
            except Exception as e:
                handle_install_failure(e, log, printer=printer)
                return 1

            # The log is printed after all the commands have run
            if config.verbose:
                print()
                print("### Log file ###")
                print(log.read())
    finally:
        signal.signal(signal.SIGTERM, previous_handler if previous_handler is not None else signal.SIG_DFL)

    return 0


if __name__ == "__main__":
    sys.exit(main())
