"""Thin wrapper around the git command line"""

import logging
import re
import subprocess
from typing import Iterator, List, Optional, Sequence

from ticket_toolbox.config import RunOptions
from ticket_toolbox.errors import SubprocessFailure, ToolboxError

logger = logging.getLogger(__name__)


def repo_name_from_remote(remote_url: str) -> str:
    """Last path segment of a remote URL without the .git suffix"""
    return re.sub(r"\.git$", "", remote_url.strip().rstrip("/")).split("/")[-1]


class GitClient:
    """Runs git in the current (or given) working tree"""

    def __init__(self, options: Optional[RunOptions] = None, cwd: Optional[str] = None):
        self.options = options or RunOptions()
        self.cwd = cwd

    def _command(self, args: Sequence[str]) -> List[str]:
        if self.options.verbose:
            logger.info(f"+ git {' '.join(args)}")
        return ["git", *args]

    def _run(self, *args: str) -> subprocess.CompletedProcess:
        return subprocess.run(
            self._command(args),
            cwd=self.cwd,
            stdout=subprocess.PIPE,
            text=True,
            encoding="utf-8",
            errors="replace",
        )

    def log_lines(self, refs: Sequence[str] = ()) -> Iterator[str]:
        """Yield `git log <refs>` output line by line.

        The exit status is checked only once stdout has been fully read, so
        every line git produced reaches the caller before a failure is raised.
        """
        proc = subprocess.Popen(
            self._command(["log", *refs]),
            cwd=self.cwd,
            stdout=subprocess.PIPE,
            text=True,
            encoding="utf-8",
            errors="replace",
        )
        with proc:
            for line in proc.stdout:
                yield line.rstrip("\r\n")

        if proc.returncode != 0:
            logger.error(f"git log exited with status {proc.returncode}")
            raise SubprocessFailure("git", proc.returncode)

    def get_origin(self) -> str:
        result = self._run("remote", "get-url", "origin")
        lines = result.stdout.splitlines()
        if result.returncode != 0 or not lines or not lines[0].strip():
            raise ToolboxError("can't get 'origin' remote")
        return lines[0].strip()

    def get_config(self, name: str) -> Optional[str]:
        """Value of a git config key, or None when unset"""
        result = self._run("config", name)
        lines = result.stdout.splitlines()
        # `git config` exits with 1 for a missing key.
        if result.returncode == 1 and not lines:
            return None
        if result.returncode != 0:
            raise SubprocessFailure("git", result.returncode)
        if not lines or not lines[0].strip():
            return None
        return lines[0]
