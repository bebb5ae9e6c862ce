#!/usr/bin/env python3
"""Cluster Bootstrap module: control plane initialization and validation steps."""

import getpass
import os
import pwd
import shutil
import time
from functools import partial

import yaml

from .errors import (
    CommandError,
    NetworkDetectionError,
    ReadinessTimeoutError,
    SmokeTestTimeoutError,
    VersionMismatchError,
)
from .print_manager import printer as default_printer
from .resource_monitor import ReadinessMonitor
from .utilities import execute_kubectl_command, is_valid_ipv4, parse_route_source_ip, run_command

KUBEADM_API_VERSION = "kubeadm.k8s.io/v1beta4"
CONTROL_PLANE_TAINT = "node-role.kubernetes.io/control-plane:NoSchedule-"
SMOKE_TEST_POD = "nginx"
SMOKE_TEST_IMAGE = "nginx"
SMOKE_TEST_NAMESPACE = "default"
METRICS_SERVER_DEPLOYMENT = "deployment/metrics-server"


def detect_primary_ip(log):
    """
    Detect the source address of the node's default outbound route.

    Raises:
        NetworkDetectionError: If the route lookup fails or yields no valid IPv4 address
    """
    try:
        result = run_command(["ip", "route", "get", "1"], log)
    except CommandError as e:
        raise NetworkDetectionError(f"Could not determine main interface IP address: {e}") from e

    address = parse_route_source_ip(result.stdout)
    if not is_valid_ipv4(address):
        raise NetworkDetectionError(f"Could not determine main interface IP address (got '{address}')")
    return address


def render_kubeadm_config(config, control_plane_ip):
    """
    Render the kubeadm ClusterConfiguration for this node.

    Args:
        config: RunConfig
        control_plane_ip: Address the API server is advertised on

    Returns:
        str: YAML document
    """
    cluster_configuration = {
        "apiVersion": KUBEADM_API_VERSION,
        "kind": "ClusterConfiguration",
        "kubernetesVersion": config.kube_git_version,
        "networking": {"podSubnet": config.pod_subnet},
        "controlPlaneEndpoint": f"{control_plane_ip}:{config.api_server_port}",
    }
    return yaml.safe_dump(cluster_configuration, default_flow_style=False, sort_keys=False)


def check_versions(client_version, server_version, requested_version):
    """
    Raise VersionMismatchError unless client == server == requested.

    Args:
        client_version: kubectl gitVersion, e.g. 'v1.33.0'
        server_version: API server gitVersion
        requested_version: Version that was asked for, same format
    """
    if client_version != server_version:
        raise VersionMismatchError(
            f"Client version {client_version} and server version {server_version} differ"
        )
    if server_version != requested_version:
        raise VersionMismatchError(
            f"Requested version {requested_version} does not match the server version {server_version}"
        )


class ClusterBootstrapper:
    """
    Runs the control plane bootstrap sequence for a control-plane or single-node install.

    Each method is one step; failures raise and abort the run unless noted.
    """

    def __init__(self, config, log, printer=None, monitor=None):
        """
        Args:
            config: RunConfig for the run
            log: ScopedLogResource receiving command transcripts
            printer: Printer instance for output (defaults to the global printer)
            monitor: ReadinessMonitor (created from config when omitted)
        """
        self.config = config
        self.log = log
        self.printer = printer or default_printer
        self.kubectl = partial(execute_kubectl_command, log=log, kubeconfig=config.admin_kubeconfig)
        self.monitor = monitor or ReadinessMonitor(
            self.kubectl, check_interval=config.poll_interval, printer=self.printer
        )
        self.control_plane_ip = None

    def kubeadm_init(self):
        """Write the kubeadm configuration and initialize the control plane"""
        self.control_plane_ip = detect_primary_ip(self.log)
        self.printer.print_info(f"Control plane endpoint: {self.control_plane_ip}:{self.config.api_server_port}")

        with open(self.config.kubeadm_config_path, "w") as f:
            f.write(render_kubeadm_config(self.config, self.control_plane_ip))
        self.log.write(f"Wrote kubeadm configuration to {self.config.kubeadm_config_path}")

        run_command(["kubeadm", "init", "--config", self.config.kubeadm_config_path], self.log)

    def configure_kubeconfig(self, user=None):
        """
        Copy the admin kubeconfig into the invoking user's ~/.kube/config.

        Best-effort: a missing user or home directory only prints a warning.

        Args:
            user: Account name (defaults to SUDO_USER, then the current user)

        Returns:
            str or None: Path of the written kubeconfig, None if it was skipped
        """
        try:
            user = user or os.environ.get("SUDO_USER") or getpass.getuser()
            account = pwd.getpwnam(user)
            kube_dir = os.path.join(account.pw_dir, ".kube")
            target = os.path.join(kube_dir, "config")

            os.makedirs(kube_dir, exist_ok=True)
            shutil.copyfile(self.config.admin_kubeconfig, target)
            os.chmod(target, 0o600)
            os.chown(kube_dir, account.pw_uid, account.pw_gid)
            os.chown(target, account.pw_uid, account.pw_gid)
        except (KeyError, OSError) as e:
            self.printer.print_warning(f"Skipping kubeconfig setup for user '{user}': {e}")
            self.log.write(f"kubeconfig setup skipped for '{user}': {e}")
            return None

        self.printer.print_success(f"kubeconfig written to {target}")
        return target

    def install_cni(self):
        """Apply the Calico manifest"""
        self.kubectl(["apply", "-f", self.config.calico_manifest_url])

    def wait_for_nodes(self):
        """
        Raises:
            ReadinessTimeoutError: If not every node is Ready within node_ready_timeout
        """
        timeout = self.config.node_ready_timeout
        if not self.monitor.wait_for_nodes_ready(timeout):
            not_ready = ", ".join(self.monitor.not_ready_nodes) or "no nodes registered"
            raise ReadinessTimeoutError(f"Nodes not Ready after {int(timeout)}s: {not_ready}")
        self.printer.print_success("Nodes are ready")

    def validate_kubernetes_version(self):
        """Check that kubectl and the API server both run the requested version"""
        version_data = self.kubectl(["version"], json_output=True)
        client_version = version_data.get("clientVersion", {}).get("gitVersion")
        server_version = version_data.get("serverVersion", {}).get("gitVersion")

        self.printer.print_info(f"Client version: {client_version}")
        self.printer.print_info(f"Server version: {server_version}")

        check_versions(client_version, server_version, self.config.kube_git_version)
        self.printer.print_success("Requested Kubernetes version matches the server version")

    def install_metrics_server(self):
        """
        Apply the metrics-server manifest and wait for its rollout.

        The rollout wait is non-fatal: metrics-server does not affect scheduling.

        Returns:
            bool: True if the deployment finished rolling out
        """
        self.kubectl(["apply", "-f", self.config.metrics_server_manifest_url])

        rollout = self.kubectl(
            [
                "rollout",
                "status",
                METRICS_SERVER_DEPLOYMENT,
                "--namespace",
                "kube-system",
                f"--timeout={int(self.config.pod_ready_timeout)}s",
            ],
            check=False,
        )
        if rollout is None:
            self.printer.print_warning("metrics-server is not ready yet, continuing")
            return False
        self.printer.print_success("metrics-server is ready")
        return True

    def configure_as_single_node(self):
        """Remove the control plane taint so workloads can run on the only node"""
        self.kubectl(["taint", "nodes", "--all", CONTROL_PLANE_TAINT])
        self.log.write(f"==> Sleeping for {int(self.config.taint_grace_period)} seconds to allow taint to take effect...")
        time.sleep(self.config.taint_grace_period)

    def test_nginx_pod(self):
        """
        Deploy a throwaway pod, wait for it to become Ready, then delete it.

        Raises:
            SmokeTestTimeoutError: If the pod is not Ready within pod_ready_timeout
        """
        self.kubectl(["run", SMOKE_TEST_POD, "--image", SMOKE_TEST_IMAGE, "--namespace", SMOKE_TEST_NAMESPACE])

        timeout = self.config.pod_ready_timeout
        if not self.monitor.wait_for_pod_ready(SMOKE_TEST_POD, SMOKE_TEST_NAMESPACE, timeout):
            raise SmokeTestTimeoutError(f"Test pod '{SMOKE_TEST_POD}' not Ready after {int(timeout)}s")

        self.kubectl(["delete", "pod", SMOKE_TEST_POD, "--namespace", SMOKE_TEST_NAMESPACE])
        self.printer.print_success("Test pod ran successfully")

    def wait_for_pods_running(self):
        """
        Wait for every pod in the cluster to be Running.

        Non-fatal: on timeout the offending pods are reported and False is returned.
        """
        success, not_running = self.monitor.wait_for_pods_running(self.config.pods_running_timeout)
        if success:
            self.printer.print_success("All pods are running!")
            return True

        self.printer.print_warning("Timeout reached. Not all pods are running:")
        for pod in not_running:
            self.printer.print_warning(f"  • {pod}")
        self.kubectl(["get", "pods", "--all-namespaces"], check=False)
        return False

    def get_join_command(self):
        """Create a non-expiring bootstrap token and return the worker join command"""
        result = run_command(["kubeadm", "token", "create", "--print-join-command", "--ttl", "0"], self.log)
        return result.stdout.strip()
