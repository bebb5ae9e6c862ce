#!/usr/bin/env python3
"""System preparation steps: swap, stale packages, kernel settings and containerd configuration."""

import os
import re

from .errors import CommandError
from .print_manager import printer
from .utilities import run_command

FSTAB_PATH = "/etc/fstab"
MODULES_LOAD_PATH = "/etc/modules-load.d/k8s.conf"
SYSCTL_PATH = "/etc/sysctl.d/k8s.conf"
CONTAINERD_CONFIG_PATH = "/etc/containerd/config.toml"

KERNEL_MODULES = ["overlay", "br_netfilter"]
SYSCTL_SETTINGS = {
    "net.bridge.bridge-nf-call-iptables": "1",
    "net.bridge.bridge-nf-call-ip6tables": "1",
    "net.ipv4.ip_forward": "1",
}

KUBE_PACKAGES = ["kubelet", "kubeadm", "kubectl"]

# moby packages ship on some cloud images (e.g. GitHub runners) and conflict with containerd.io
STALE_PACKAGE_COMMANDS = [
    ["apt-mark", "unhold", *KUBE_PACKAGES, "kubernetes-cni"],
    ["apt-get", "remove", "-y", "moby-buildx", "moby-cli", "moby-compose", "moby-containerd", "moby-engine", "moby-runc"],
    ["apt-get", "autoremove", "-y"],
    ["apt-get", "remove", "-y", "docker.io", "containerd", *KUBE_PACKAGES],
    ["apt-get", "autoremove", "-y"],
    ["systemctl", "daemon-reload"],
]

SWAP_ENTRY = re.compile(r"\sswap\s")


def comment_swap_entries(fstab_content):
    """
    Comment out every active swap entry of an fstab file.

    Args:
        fstab_content: Current fstab contents

    Returns:
        str: Contents with swap lines prefixed by '#'
    """
    lines = []
    for line in fstab_content.splitlines(keepends=True):
        if SWAP_ENTRY.search(line) and not line.lstrip().startswith("#"):
            line = "#" + line
        lines.append(line)
    return "".join(lines)


def disable_swap(config, log, fstab_path=FSTAB_PATH):
    """Turn swap off now and keep it off after reboot (kubelet refuses to run with swap)"""
    run_command(["swapoff", "-a"], log)

    with open(fstab_path, "r") as f:
        content = f.read()

    updated = comment_swap_entries(content)
    if updated != content:
        with open(fstab_path, "w") as f:
            f.write(updated)
        log.write(f"Commented out swap entries in {fstab_path}")
        printer.print_info(f"Swap entries disabled in {fstab_path}")


def remove_packages(config, log):
    """
    Remove previously installed container runtime and Kubernetes packages.

    Best-effort: packages that are not installed are not an error, so every
    failure is logged and ignored.
    """
    failures = 0
    for command in STALE_PACKAGE_COMMANDS:
        result = run_command(command, log, check=False)
        if result.returncode != 0:
            failures += 1

    if failures:
        printer.print_info(f"{failures} cleanup command(s) reported errors (usually nothing to remove)")


def configure_system(config, log, modules_load_path=MODULES_LOAD_PATH, sysctl_path=SYSCTL_PATH):
    """Load the kernel modules and sysctls required for pod networking, now and on boot"""
    os.makedirs(os.path.dirname(modules_load_path), exist_ok=True)
    with open(modules_load_path, "w") as f:
        f.write("\n".join(KERNEL_MODULES) + "\n")

    for module in KERNEL_MODULES:
        run_command(["modprobe", module], log)

    os.makedirs(os.path.dirname(sysctl_path), exist_ok=True)
    with open(sysctl_path, "w") as f:
        f.writelines(f"{key} = {value}\n" for key, value in SYSCTL_SETTINGS.items())

    run_command(["sysctl", "--system"], log)


def enable_systemd_cgroup(containerd_config):
    """Switch the runc runtime to the systemd cgroup driver used by kubelet"""
    return re.sub(r"SystemdCgroup\s*=\s*false", "SystemdCgroup = true", containerd_config)


def configure_containerd(config, log, config_path=CONTAINERD_CONFIG_PATH):
    """
    Write a default containerd configuration using the systemd cgroup driver.

    Raises:
        CommandError: If the default configuration cannot be generated
    """
    result = run_command(["containerd", "config", "default"], log)
    if not result.stdout.strip():
        raise CommandError(["containerd", "config", "default"], result.returncode, "empty configuration")

    containerd_config = enable_systemd_cgroup(result.stdout)
    if "SystemdCgroup = true" not in containerd_config:
        printer.print_warning("SystemdCgroup option not found in the default containerd configuration")

    os.makedirs(os.path.dirname(config_path), exist_ok=True)
    with open(config_path, "w") as f:
        f.write(containerd_config)
    log.write(f"Wrote containerd configuration to {config_path}")
