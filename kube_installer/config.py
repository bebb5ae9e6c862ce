#!/usr/bin/env python3
"""Run configuration and fixed version constants for the Kubernetes node installer."""

from dataclasses import dataclass
from enum import Enum

# Supported host release
UBUNTU_VERSION = "24.04"

# Software versions
KUBE_VERSION = "1.33.0"
KUBE_PACKAGE_REVISION = "1.1"
CONTAINERD_VERSION = "2.0.5"
CALICO_VERSION = "3.29.3"
CALICO_MANIFEST_URL = f"https://raw.githubusercontent.com/projectcalico/calico/v{CALICO_VERSION}/manifests/calico.yaml"
METRICS_SERVER_MANIFEST_URL = (
    "https://github.com/kubernetes-sigs/metrics-server/releases/latest/download/components.yaml"
)

# Cluster settings
POD_SUBNET = "192.168.9.0/24"
API_SERVER_PORT = 6443
KUBEADM_CONFIG_PATH = "kubeadm-config.yaml"
ADMIN_KUBECONFIG = "/etc/kubernetes/admin.conf"

# Timeouts (seconds)
NODE_READY_TIMEOUT = 180
POD_READY_TIMEOUT = 180
PODS_RUNNING_TIMEOUT = 300
POLL_INTERVAL = 10
TAINT_GRACE_PERIOD = 10


class Role(Enum):
    """Role the node plays in the cluster"""

    WORKER = "worker"
    CONTROL_PLANE = "control-plane"
    SINGLE_NODE = "single-node"


@dataclass(frozen=True)
class RunConfig:
    """Immutable configuration for a single installer run."""

    role: Role = Role.WORKER
    verbose: bool = False
    ubuntu_version: str = UBUNTU_VERSION
    kube_version: str = KUBE_VERSION
    kube_package_revision: str = KUBE_PACKAGE_REVISION
    containerd_version: str = CONTAINERD_VERSION
    calico_version: str = CALICO_VERSION
    calico_manifest_url: str = CALICO_MANIFEST_URL
    metrics_server_manifest_url: str = METRICS_SERVER_MANIFEST_URL
    pod_subnet: str = POD_SUBNET
    api_server_port: int = API_SERVER_PORT
    kubeadm_config_path: str = KUBEADM_CONFIG_PATH
    admin_kubeconfig: str = ADMIN_KUBECONFIG
    node_ready_timeout: float = NODE_READY_TIMEOUT
    pod_ready_timeout: float = POD_READY_TIMEOUT
    pods_running_timeout: float = PODS_RUNNING_TIMEOUT
    poll_interval: float = POLL_INTERVAL
    taint_grace_period: float = TAINT_GRACE_PERIOD

    @property
    def is_control_plane(self) -> bool:
        """True for roles that bootstrap a control plane (single-node included)"""
        return self.role in (Role.CONTROL_PLANE, Role.SINGLE_NODE)

    @property
    def is_single_node(self) -> bool:
        return self.role is Role.SINGLE_NODE

    @property
    def kube_minor_version(self) -> str:
        """Minor release used in the package repository path, e.g. 'v1.33'"""
        major, minor = self.kube_version.split(".")[:2]
        return f"v{major}.{minor}"

    @property
    def kube_git_version(self) -> str:
        """Version string as reported by 'kubectl version', e.g. 'v1.33.0'"""
        return f"v{self.kube_version}"

    @property
    def kube_package_version(self) -> str:
        """Debian package version of kubeadm/kubelet/kubectl, e.g. '1.33.0-1.1'"""
        return f"{self.kube_version}-{self.kube_package_revision}"
