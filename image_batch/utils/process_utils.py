"""
This module provides the wrapper used to run external encoder processes.

Encoders are black boxes to the converter: it only looks at the exit status
and the captured error stream of the process, never at structured output.
"""

import os
import shlex
import subprocess
from typing import List, Optional, Sequence

from loguru import logger

from ..domain.exceptions import EncoderInvocationException, EncoderTimeoutException


def display_cmd(cmd_list: Sequence[str]) -> str:
    """
    Formats a command list as a single string for logs and error messages.

    Args:
        cmd_list: The command and its arguments.

    Returns:
        The command quoted the way the current platform's shell expects it.
    """
    if os.name == "nt":
        return subprocess.list2cmdline(list(cmd_list))
    return shlex.join(cmd_list)


def run_cmd(
    cmd_list: List[str],
    timeout: Optional[float] = None,
    show_cmd: bool = False,
) -> subprocess.CompletedProcess:
    """
    Executes an external command and captures its output.

    This is a wrapper around `subprocess.run` that adds logging and turns the
    ways a process can fail to start into the converter's own exceptions. A
    process that starts and exits with a non-zero code is *not* an exception
    here; callers inspect `returncode` themselves.

    Args:
        cmd_list: The command to execute as a list of strings. The shell is
                  never involved.
        timeout: Seconds after which the process is killed. `None` waits forever.
        show_cmd: If True, the command is logged at the DEBUG level before execution.

    Returns:
        The `subprocess.CompletedProcess` with decoded stdout and stderr.

    Raises:
        EncoderInvocationException: The executable could not be started.
        EncoderTimeoutException: The process ran longer than `timeout`.
    """
    if not cmd_list:
        raise EncoderInvocationException("Empty command.")

    display_cmd_str = display_cmd(cmd_list)
    if show_cmd:
        logger.debug(f"Executing command: {display_cmd_str}")

    try:
        result = subprocess.run(
            cmd_list,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            shell=False,
            timeout=timeout,
        )
    except FileNotFoundError as e:
        logger.debug(f"Command not found: '{cmd_list[0]}'")
        raise EncoderInvocationException(f"Command not found: {cmd_list[0]}") from e
    except subprocess.TimeoutExpired as e:
        logger.debug(f"Command timed out after {timeout}s: {display_cmd_str}")
        raise EncoderTimeoutException(f"Timed out after {timeout:g}s: {display_cmd_str}") from e
    except OSError as e:
        logger.debug(f"Could not start command '{display_cmd_str}': {e}")
        raise EncoderInvocationException(f"Could not start {cmd_list[0]}: {e}") from e

    if result.stdout and len(result.stdout) > 500:
        logger.trace(f"Command stdout (truncated): {result.stdout[:500]}...")
    elif result.stdout:
        logger.trace(f"Command stdout: {result.stdout}")

    # stderr is only an error when the exit code says so; many tools print
    # warnings there on success.
    if result.stderr and result.returncode != 0:
        logger.debug(f"Command stderr (error, rc={result.returncode}): {result.stderr}")
    elif result.stderr:
        logger.trace(f"Command stderr (non-error, rc={result.returncode}): {result.stderr}")

    return result
