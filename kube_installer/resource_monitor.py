#!/usr/bin/env python3
"""Resource Monitor module: bounded wait-and-poll loops against the cluster."""

import time


def _condition_is_true(resource, condition_type):
    """Return True if the resource status has the condition with status 'True'"""
    for condition in resource.get("status", {}).get("conditions", []):
        if condition.get("type") == condition_type:
            return condition.get("status") == "True"
    return False


class ReadinessMonitor:
    """
    Polls cluster state until a condition holds or a deadline passes.

    Every wait returns within timeout + check_interval: the sleep before the
    next check never extends past the deadline, the last check starts at or
    before it, and each kubectl call is killed after check_interval seconds.
    """

    def __init__(self, execute_kubectl_command, check_interval=10, printer=None):
        """
        Args:
            execute_kubectl_command: kubectl helper bound to the run log and kubeconfig,
                called as execute_kubectl_command(command, json_output=..., check=..., timeout=...)
            check_interval (float): Seconds between status checks
            printer: Printer instance for output
        """
        self.execute_kubectl_command = execute_kubectl_command
        self.check_interval = check_interval
        self.printer = printer

        # Details of the most recent failed check, for reporting
        self.not_ready_nodes = []
        self.not_running_pods = []

    def wait_until(self, check, timeout, description):
        """
        Call check() until it returns True or timeout seconds have elapsed.

        Args:
            check: Zero-argument callable returning bool
            timeout (float): Seconds to wait
            description (str): What is being waited for, for progress output

        Returns:
            bool: True if the condition held before the deadline
        """
        start_time = time.monotonic()
        deadline = start_time + timeout

        while True:
            if check():
                return True

            now = time.monotonic()
            remaining = deadline - now
            if remaining <= 0:
                return False

            if self.printer:
                self.printer.print_info(f"Waiting for {description}... ({int(now - start_time)}s elapsed)")
            time.sleep(min(self.check_interval, remaining))

    def _query(self, command):
        """Run a polling kubectl query, bounded by check_interval; None on failure"""
        return self.execute_kubectl_command(command, json_output=True, check=False, timeout=self.check_interval)

    def _all_nodes_ready(self):
        nodes_data = self._query(["get", "nodes"])
        if nodes_data is None:
            self.not_ready_nodes = ["node list unavailable"]
            return False

        nodes = nodes_data.get("items", [])
        self.not_ready_nodes = [
            node["metadata"]["name"] for node in nodes if not _condition_is_true(node, "Ready")
        ]
        # An empty node list means the node has not registered yet
        return bool(nodes) and not self.not_ready_nodes

    def wait_for_nodes_ready(self, timeout):
        """Wait until at least one node exists and every node reports Ready"""
        return self.wait_until(self._all_nodes_ready, timeout, "nodes to be Ready")

    def wait_for_pod_ready(self, pod_name, namespace, timeout):
        """Wait until the named pod reports the Ready condition"""

        def _pod_ready():
            pod_data = self._query(["get", "pod", pod_name, "--namespace", namespace])
            return bool(pod_data) and _condition_is_true(pod_data, "Ready")

        return self.wait_until(_pod_ready, timeout, f"pod {namespace}/{pod_name} to be Ready")

    def _all_pods_running(self):
        self.not_running_pods = []
        pods_data = self._query(["get", "pods", "--all-namespaces"])
        if pods_data is None:
            self.not_running_pods.append("pod list unavailable")
            return False

        for pod in pods_data.get("items", []):
            phase = pod.get("status", {}).get("phase", "Unknown")
            if phase != "Running":
                metadata = pod.get("metadata", {})
                self.not_running_pods.append(f"{metadata.get('namespace')}/{metadata.get('name')} ({phase})")
        return not self.not_running_pods

    def wait_for_pods_running(self, timeout):
        """
        Wait until no pod in any namespace is in a phase other than Running.

        Returns:
            tuple: (success: bool, not_running_pods: list of "namespace/name (phase)")
        """
        success = self.wait_until(self._all_pods_running, timeout, "all pods to be Running")
        return success, ([] if success else list(self.not_running_pods))
