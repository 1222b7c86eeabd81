"""Secret lookup: environment, then a helper command, then a prompt"""

import getpass
import logging
import os
import subprocess
from typing import Callable, Optional

from ticket_toolbox.config import RunOptions
from ticket_toolbox.console import warn

logger = logging.getLogger(__name__)


def _run_secret_command(command: str, verbose: bool) -> Optional[str]:
    if verbose:
        logger.info(f"+ {command}")

    # shell=True runs through /bin/sh on POSIX and cmd.exe on Windows.
    result = subprocess.run(command, shell=True, stdout=subprocess.PIPE, text=True)
    lines = result.stdout.splitlines()

    if result.returncode != 0:
        warn(f"'{command}' returned non-zero exit code {result.returncode}")
        return None
    if not lines or not lines[0].strip():
        warn(f"'{command}' returned no data")
        return None
    return lines[0]


def get_secret(
    env_name: str,
    friendly_name: str,
    options: Optional[RunOptions] = None,
    prompt: Callable[[str], str] = getpass.getpass,
) -> str:
    """Return a secret from $NAME, the output of $NAME_COMMAND, or an interactive prompt"""
    options = options or RunOptions()

    secret = os.environ.get(env_name)
    if secret and secret.strip():
        return secret

    command = os.environ.get(f"{env_name}_COMMAND")
    if command is not None:
        secret = _run_secret_command(command, options.verbose)
        if secret:
            return secret

    secret = None
    while not secret or not secret.strip():
        secret = prompt(f"{friendly_name}: ")
    return secret
