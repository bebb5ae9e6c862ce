#!/usr/bin/env python3
"""Package installation steps: container runtime and Kubernetes tooling."""

import os

from .errors import PackageNotFoundError
from .print_manager import printer
from .system_preparation import KUBE_PACKAGES
from .utilities import run_command

KEYRINGS_DIR = "/etc/apt/keyrings"
SOURCES_DIR = "/etc/apt/sources.list.d"

APT_ENV = {"DEBIAN_FRONTEND": "noninteractive"}

PREREQUISITE_PACKAGES = ["curl", "gnupg2", "software-properties-common", "apt-transport-https", "ca-certificates"]

DOCKER_KEY_URL = "https://download.docker.com/linux/ubuntu/gpg"
DOCKER_REPO_URL = "https://download.docker.com/linux/ubuntu"
KUBERNETES_REPO_URL = "https://pkgs.k8s.io/core:/stable:/{minor}/deb/"

CONTAINER_RUNTIME_PACKAGE = "containerd.io"


def apt_get(arguments, log):
    """Run apt-get non-interactively"""
    return run_command(["apt-get", *arguments], log, env=APT_ENV)


def add_apt_repository(name, key_url, source_line, log, keyrings_dir=KEYRINGS_DIR, sources_dir=SOURCES_DIR):
    """
    Trust a repository signing key and register the repository source.

    The key is downloaded into the run's temporary directory and dearmored
    into the keyrings directory.

    Args:
        name: Short repository name used for the keyring and list file names
        key_url: URL of the ASCII-armored signing key
        source_line: APT source line; '{keyring}' is replaced by the keyring path
        log: ScopedLogResource for the run
        keyrings_dir: Directory receiving the dearmored keyring
        sources_dir: Directory receiving the .list file

    Returns:
        str: Path of the written source list file
    """
    key_download = log.scratch_path(f"{name}.asc")
    keyring = os.path.join(keyrings_dir, f"{name}-apt-keyring.gpg")

    run_command(["curl", "-fsSL", "-o", key_download, key_url], log)
    os.makedirs(keyrings_dir, exist_ok=True)
    run_command(["gpg", "--batch", "--yes", "--dearmor", "-o", keyring, key_download], log)

    source_file = os.path.join(sources_dir, f"{name}.list")
    os.makedirs(sources_dir, exist_ok=True)
    with open(source_file, "w") as f:
        f.write(source_line.format(keyring=keyring) + "\n")
    log.write(f"Added APT source {source_file}")
    return source_file


def parse_madison_versions(madison_output):
    """
    Extract package versions from 'apt-cache madison' output.

    Each line looks like: "   kubeadm | 1.33.0-1.1 | https://pkgs.k8s.io/... Packages"
    """
    versions = []
    for line in madison_output.splitlines():
        fields = [field.strip() for field in line.split("|")]
        if len(fields) >= 2 and fields[1]:
            versions.append(fields[1])
    return versions


def resolve_package_version(package, wanted, log, exact=True):
    """
    Find the repository version of a package matching a pinned version.

    Args:
        package: Package name
        wanted: Exact package version, or upstream version when exact is False
        log: ScopedLogResource for the run
        exact: If False, accept any Debian revision of the upstream version ('<wanted>-...')

    Returns:
        str: Version string to pass to apt-get

    Raises:
        PackageNotFoundError: If no available version matches
    """
    result = run_command(["apt-cache", "madison", package], log, check=False)
    versions = parse_madison_versions(result.stdout)

    for version in versions:
        if version == wanted or (not exact and version.startswith(f"{wanted}-")):
            return version

    available = ", ".join(versions[:5]) if versions else "none"
    raise PackageNotFoundError(f"Version '{wanted}' of '{package}' is not available (found: {available})")


def install_container_runtime(config, log, host_info, keyrings_dir=KEYRINGS_DIR, sources_dir=SOURCES_DIR):
    """Install the pinned containerd.io package from the Docker repository"""
    apt_get(["install", "-y", *PREREQUISITE_PACKAGES], log)

    arch = run_command(["dpkg", "--print-architecture"], log).stdout.strip()
    add_apt_repository(
        "docker",
        DOCKER_KEY_URL,
        f"deb [arch={arch} signed-by={{keyring}}] {DOCKER_REPO_URL} {host_info.codename} stable",
        log,
        keyrings_dir=keyrings_dir,
        sources_dir=sources_dir,
    )
    apt_get(["update"], log)

    version = resolve_package_version(CONTAINER_RUNTIME_PACKAGE, config.containerd_version, log, exact=False)
    apt_get(["install", "-y", f"{CONTAINER_RUNTIME_PACKAGE}={version}"], log)
    printer.print_success(f"Installed {CONTAINER_RUNTIME_PACKAGE} {version}")


def install_kubernetes_packages(config, log, keyrings_dir=KEYRINGS_DIR, sources_dir=SOURCES_DIR):
    """Install kubeadm, kubelet and kubectl pinned to the requested version and hold them"""
    repo_url = KUBERNETES_REPO_URL.format(minor=config.kube_minor_version)
    add_apt_repository(
        "kubernetes",
        f"{repo_url}Release.key",
        f"deb [signed-by={{keyring}}] {repo_url} /",
        log,
        keyrings_dir=keyrings_dir,
        sources_dir=sources_dir,
    )
    apt_get(["update"], log)

    pinned = [
        f"{package}={resolve_package_version(package, config.kube_package_version, log)}"
        for package in KUBE_PACKAGES
    ]
    apt_get(["install", "-y", "--allow-change-held-packages", *pinned], log)
    run_command(["apt-mark", "hold", *KUBE_PACKAGES], log)
    printer.print_success(f"Installed Kubernetes packages {config.kube_package_version}")
