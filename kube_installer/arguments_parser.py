#!/usr/bin/env python3
"""Arguments Parser module for the Kubernetes node installer."""

import argparse
import sys

from . import print_manager
from .config import KUBE_VERSION, POD_SUBNET, Role, RunConfig
from .errors import UsageError
from .print_manager import printer

USAGE = """USAGE:
On a control plane node use the '-c' option
{prog} -c
On a worker node, run with no options
{prog}
For a single node, control plane and worker together, run with the '-s' option
{prog} -s
For verbose output, run with the '-v' option
{prog} -v"""

# Single-letter flags understood by the parser
SHORT_FLAGS = "csvh?"


class ArgumentsParser:
    """Handles command-line argument parsing for node installation"""

    @staticmethod
    def build_parser():
        """
        Build the argument parser.

        Help is handled manually so that both '-h' and '-?' raise UsageError
        instead of letting argparse exit the process.

        Returns:
            argparse.ArgumentParser: Configured parser
        """
        parser = argparse.ArgumentParser(
            prog="install-kubernetes",
            description="Install Kubernetes on an Ubuntu node",
            add_help=False,
        )

        parser.add_argument(
            "-h",
            "-?",
            dest="help",
            action="store_true",
            help="Show usage and exit",
        )
        # Both role flags write the same destination, so the last one given wins
        parser.add_argument(
            "-c",
            dest="role",
            action="store_const",
            const=Role.CONTROL_PLANE,
            help="Install a control plane node",
        )
        parser.add_argument(
            "-s",
            dest="role",
            action="store_const",
            const=Role.SINGLE_NODE,
            help="Install a single node cluster (control plane and worker together)",
        )
        parser.add_argument(
            "-v",
            dest="verbose",
            action="store_true",
            help="Print the full installation log when finished",
        )
        parser.add_argument(
            "--kube-version",
            type=str,
            default=KUBE_VERSION,
            help=f"Kubernetes version to install (default: {KUBE_VERSION})",
        )
        parser.add_argument(
            "--pod-subnet",
            type=str,
            default=POD_SUBNET,
            help=f"Pod network CIDR passed to kubeadm (default: {POD_SUBNET})",
        )
        parser.set_defaults(role=Role.WORKER)
        return parser

    @staticmethod
    def usage(prog="install-kubernetes"):
        """Return the usage text shown for '-h'/'-?'"""
        return USAGE.format(prog=prog)

    @staticmethod
    def split_short_flags(argv):
        """
        Expand combined short flags ('-cv' -> '-c', '-v') and drop unknown letters.

        argparse exits the process when a combined flag contains a letter it
        does not know, so unknown letters are separated out beforehand.

        Args:
            argv: Argument list

        Returns:
            tuple: (expanded argument list, list of ignored flags)
        """
        expanded = []
        ignored = []
        for arg in argv:
            if len(arg) > 2 and arg.startswith("-") and not arg.startswith("--"):
                for flag in arg[1:]:
                    if flag in SHORT_FLAGS:
                        expanded.append(f"-{flag}")
                    else:
                        ignored.append(f"-{flag}")
            else:
                expanded.append(arg)
        return expanded, ignored

    @staticmethod
    def parse_arguments(argv=None):
        """
        Parse command-line arguments and return the run configuration

        Args:
            argv: Argument list (defaults to sys.argv[1:])

        Returns:
            RunConfig: Immutable configuration for this run

        Raises:
            UsageError: If help was requested
        """
        if argv is None:
            argv = sys.argv[1:]

        argv, ignored = ArgumentsParser.split_short_flags(argv)
        parser = ArgumentsParser.build_parser()
        args, unknown = parser.parse_known_args(argv)
        unknown = ignored + unknown

        if args.help:
            raise UsageError(ArgumentsParser.usage(parser.prog))

        if unknown:
            printer.print_warning(f"Ignoring unrecognized arguments: {' '.join(unknown)}")

        role_flags = [arg for arg in argv if arg in ("-c", "-s")]
        if len(set(role_flags)) > 1:
            printer.print_warning(f"Both '-c' and '-s' given, using the last one: {role_flags[-1]}")

        # Set global verbose mode
        print_manager.VERBOSE_MODE = args.verbose

        return RunConfig(
            role=args.role,
            verbose=args.verbose,
            kube_version=args.kube_version,
            pod_subnet=args.pod_subnet,
        )
