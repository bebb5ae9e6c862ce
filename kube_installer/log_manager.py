#!/usr/bin/env python3
"""Log Manager module: per-run temporary directory and captured command log."""

import os
import shutil
import tempfile

LOG_FILE_NAME = "install.log"
TMP_DIR_PREFIX = "install-kubernetes-"


class ScopedLogResource:
    """
    Temporary directory holding the run log, removed on every exit path.

    Use as a context manager. All command output of the run is appended to
    the log file so that it can be dumped in full when a step fails.
    """

    def __init__(self, base_dir=None):
        """
        Args:
            base_dir: Parent directory for the temporary directory (defaults to the system temp dir)
        """
        self.base_dir = base_dir
        self.tmp_dir = None
        self.log_file = None

    def __enter__(self):
        self.tmp_dir = tempfile.mkdtemp(prefix=TMP_DIR_PREFIX, dir=self.base_dir)
        self.log_file = os.path.join(self.tmp_dir, LOG_FILE_NAME)
        open(self.log_file, "w").close()
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.cleanup()
        return False

    def cleanup(self):
        """Remove the temporary directory and everything in it"""
        if self.tmp_dir and os.path.isdir(self.tmp_dir):
            shutil.rmtree(self.tmp_dir, ignore_errors=True)

    def write(self, text):
        """Append text to the log file, terminating it with a newline"""
        with open(self.log_file, "a") as f:
            f.write(text if text.endswith("\n") else text + "\n")

    def write_section(self, title):
        """Append a step banner"""
        self.write(f"\n### {title} ###")

    def record_command(self, command, result):
        """
        Append the transcript of an executed command.

        Args:
            command: Command argument list
            result: subprocess.CompletedProcess with text stdout/stderr
        """
        lines = [f"$ {' '.join(command)}"]
        if result.stdout:
            lines.append(result.stdout.rstrip("\n"))
        if result.stderr:
            lines.append(result.stderr.rstrip("\n"))
        lines.append(f"[exit code: {result.returncode}]")
        self.write("\n".join(lines))

    def read(self):
        """Return the full log contents, or an empty string if the log is gone"""
        if not self.log_file or not os.path.exists(self.log_file):
            return ""
        with open(self.log_file, "r") as f:
            return f.read()

    def scratch_path(self, name):
        """Path of a scratch file inside the run's temporary directory"""
        return os.path.join(self.tmp_dir, name)
