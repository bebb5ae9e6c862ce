#!/usr/bin/env python3
"""Service Manager module: systemd services for the container runtime and kubelet."""

from .errors import ServiceNotActiveError
from .print_manager import printer
from .utilities import run_command

CONTAINER_RUNTIME_SERVICE = "containerd"
NODE_AGENT_SERVICE = "kubelet"


def start_services(config, log):
    """Enable the container runtime and kubelet on boot and (re)start them now"""
    run_command(["systemctl", "daemon-reload"], log)
    run_command(["systemctl", "enable", CONTAINER_RUNTIME_SERVICE], log)
    run_command(["systemctl", "restart", CONTAINER_RUNTIME_SERVICE], log)
    run_command(["systemctl", "enable", NODE_AGENT_SERVICE], log)
    run_command(["systemctl", "start", NODE_AGENT_SERVICE], log)


def is_service_active(name, log):
    """Return True if systemd reports the service as active"""
    result = run_command(["systemctl", "is-active", name], log, check=False)
    return result.returncode == 0 and result.stdout.strip() == "active"


def check_worker_services(config, log):
    """
    Confirm the services a worker needs before joining are running.

    Until the node joins a cluster kubelet restarts in a loop, so only the
    container runtime is checked.

    Raises:
        ServiceNotActiveError: If the container runtime is not active
    """
    log.write(f"==> Checking {CONTAINER_RUNTIME_SERVICE}")
    if not is_service_active(CONTAINER_RUNTIME_SERVICE, log):
        raise ServiceNotActiveError(f"Service '{CONTAINER_RUNTIME_SERVICE}' is not active")
    printer.print_success(f"Service '{CONTAINER_RUNTIME_SERVICE}' is active")
