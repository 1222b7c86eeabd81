"""Error taxonomy and process exit codes"""

from typing import Optional

EX_USAGE = 64  # EX_USAGE from sysexits.h
EX_SUBPROCESS = 123  # xargs' convention
EX_FAILURE = 1


class ToolboxError(Exception):
    """Base class for errors that abort a run"""

    exit_code = EX_FAILURE


class UsageError(ToolboxError):
    """Bad command, option, ref or missing configuration"""

    exit_code = EX_USAGE


class SubprocessFailure(ToolboxError):
    """A child process (git, secret command) exited with non-zero status"""

    exit_code = EX_SUBPROCESS

    def __init__(self, command: str, returncode: int):
        super().__init__(f"{command} exited with status {returncode}")
        self.command = command
        self.returncode = returncode


class TransportFailure(ToolboxError):
    """Non-success HTTP response from an issue tracker"""

    def __init__(self, message: str, status_code: int, response_body: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.response_body = response_body
