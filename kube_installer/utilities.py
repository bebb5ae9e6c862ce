#!/usr/bin/env python3
"""Utilities module for the Kubernetes node installer."""

import ipaddress
import json
import os
import subprocess

from .errors import CommandError
from .print_manager import printer


def run_command(command, log, check=True, input_text=None, env=None, timeout=None):
    """
    Execute an external command, capturing its output into the run log.

    Output is never streamed to the console; it is appended to the log so it
    can be shown in full if the run fails.

    Args:
        command: List of command arguments to execute
        log: ScopedLogResource receiving the command transcript
        check: If True, raise CommandError on a non-zero exit code
        input_text: Optional text passed to the command's stdin
        env: Optional variables added to the inherited environment
        timeout: Seconds after which the command is killed and reported as failed

    Returns:
        subprocess.CompletedProcess: Result with text stdout/stderr

    Raises:
        CommandError: If check is True and the command fails or cannot be started
    """
    printer.print_action(f"Executing command: {' '.join(command)}")

    try:
        result = subprocess.run(
            command,
            capture_output=True,
            text=True,
            input=input_text,
            env={**os.environ, **env} if env else None,
            timeout=timeout,
        )
    except FileNotFoundError as e:
        # Same exit status a shell reports for a missing binary
        result = subprocess.CompletedProcess(command, 127, stdout="", stderr=str(e))
    except subprocess.TimeoutExpired as e:
        # Same exit status coreutils timeout reports
        result = subprocess.CompletedProcess(command, 124, stdout="", stderr=f"Timed out after {e.timeout}s")

    log.record_command(command, result)

    if check and result.returncode != 0:
        raise CommandError(command, result.returncode, result.stderr)
    return result


def execute_kubectl_command(command, log, kubeconfig, json_output=False, check=True, timeout=None):
    """
    Execute a kubectl command against the cluster described by kubeconfig.

    Args:
        command: List of command arguments to execute (excluding 'kubectl')
        log: ScopedLogResource receiving the command transcript
        kubeconfig: Path to the kubeconfig file
        json_output: If True, add JSON output flag and parse result as JSON
        check: If True, raise CommandError on a non-zero exit code
        timeout: Seconds after which kubectl is killed and the call treated as failed

    Returns:
        str or dict: Command output as string, or parsed JSON dict if json_output=True.
                     Returns None if check is False and the command failed.
    """
    exec_command = ["kubectl", "--kubeconfig", kubeconfig] + command
    if json_output:
        exec_command += ["-o", "json"]

    result = run_command(exec_command, log, check=check, timeout=timeout)
    if result.returncode != 0:
        return None

    if json_output:
        return json.loads(result.stdout)
    return result.stdout.strip()


def parse_key_value_file(content):
    """
    Parse shell-style KEY=value lines such as /etc/lsb-release.

    Args:
        content: File contents

    Returns:
        dict: Mapping of keys to unquoted values
    """
    values = {}
    for line in content.splitlines():
        line = line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        values[key.strip()] = value.strip().strip("'\"")
    return values


def parse_route_source_ip(route_output):
    """
    Extract the source address from 'ip route get' output.

    Example input: "1.0.0.0 via 10.0.0.1 dev eth0 src 10.0.0.5 uid 0"

    Returns:
        str or None: The address following 'src', or None if absent
    """
    tokens = route_output.split()
    for index, token in enumerate(tokens[:-1]):
        if token == "src":
            return tokens[index + 1]
    return None


def is_valid_ipv4(address):
    """Return True if address is a well-formed dotted-quad IPv4 address"""
    if not address:
        return False
    try:
        ipaddress.IPv4Address(address)
    except ValueError:
        return False
    return True


def format_runtime(start_time, end_time):
    """
    Format runtime duration in a human-readable way.

    Args:
        start_time (float): Start timestamp from time.time()
        end_time (float): End timestamp from time.time()

    Returns:
        str: Formatted runtime string (e.g., "5m 23s", "1h 15m 30s")
    """
    total_seconds = int(end_time - start_time)

    hours = total_seconds // 3600
    minutes = (total_seconds % 3600) // 60
    seconds = total_seconds % 60

    if hours > 0:
        return f"{hours}h {minutes}m {seconds}s"
    elif minutes > 0:
        return f"{minutes}m {seconds}s"
    else:
        return f"{seconds}s"
