#!/usr/bin/env python3
"""External command execution for au-revoir-svn.

Commands are argument lists handed straight to the OS; no shell is involved,
so branch names, tag messages and URLs never need quoting. The working
directory is passed to the child process and the caller's own working
directory is never changed.
"""

from __future__ import annotations

import os
import shlex
import signal
import subprocess
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple, Union

from config import RunnerConfig
from errors import ExecutionError
from logging_utils import Logger

PathLike = Union[str, "os.PathLike[str]"]

# Conventional shell exit code for "command not found"
EXIT_COMMAND_NOT_FOUND = 127

# Seconds a process group gets to exit after SIGTERM before SIGKILL
TERMINATE_GRACE_S = 5.0


@dataclass(frozen=True)
class CommandResult:
    """Exit code and merged stdout/stderr lines of a finished command."""
    args: List[str]
    exit_code: int
    output: List[str] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return self.exit_code == 0


def format_command(args: Sequence[str]) -> str:
    """Render an argument list the way a user would type it in a shell."""
    return shlex.join(str(a) for a in args)


class ProcessRunner:
    """Runs git, git svn and svn commands with a shared failure policy.

    A command with a deadline runs in its own session so that, on timeout,
    the whole process tree (e.g. the perl git-svn started by `git svn`) is
    terminated, not only the direct child.
    """

    def __init__(self, config: Optional[RunnerConfig] = None) -> None:
        self.config = config or RunnerConfig()
        self._env = os.environ.copy()
        # Prevent command output translation
        self._env["LC_ALL"] = "C"

    @property
    def trust_exit_codes(self) -> bool:
        return self.config.trust_exit_codes

    def execute(
        self, args: Sequence[str], cwd: Optional[PathLike] = None
    ) -> CommandResult:
        """Run a command and capture its output without judging the exit code.

        A timeout or a missing executable still raises ExecutionError since no
        meaningful result exists in those cases.
        """
        argv = [str(a) for a in args]
        exit_code, output = self._run(
            argv, cwd, timeout=self.config.timeout_s, capture=True
        )
        return CommandResult(args=argv, exit_code=exit_code, output=output)

    def run(self, args: Sequence[str], cwd: Optional[PathLike] = None) -> List[str]:
        """Run a command and return its merged stdout/stderr lines.

        Raises ExecutionError on a non-zero exit code when exit codes are trusted.
        """
        result = self.execute(args, cwd)
        if self.trust_exit_codes and not result.succeeded:
            raise ExecutionError(
                format_command(result.args), result.exit_code, result.output
            )
        return result.output

    def run_interactive(
        self, args: Sequence[str], cwd: Optional[PathLike] = None
    ) -> int:
        """Run a command with output streamed live to the terminal.

        Used for long-running operations (clone, fetch, push) so progress is
        visible. These use `interactive_timeout_s`, unlimited by default.
        Returns the exit code.
        """
        argv = [str(a) for a in args]
        exit_code, _ = self._run(
            argv, cwd, timeout=self.config.interactive_timeout_s, capture=False
        )
        if self.trust_exit_codes and exit_code != 0:
            raise ExecutionError(format_command(argv), exit_code)
        return exit_code

    def _run(
        self,
        argv: List[str],
        cwd: Optional[PathLike],
        timeout: Optional[float],
        capture: bool,
    ) -> Tuple[int, List[str]]:
        command = format_command(argv)
        self._echo(command)

        kwargs = {"cwd": cwd, "env": self._env}
        if capture:
            kwargs.update(
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                stdin=subprocess.DEVNULL,
                text=True,
                errors="replace",
            )
        # Without a deadline the child keeps the terminal (and Ctrl-C)
        own_session = timeout is not None
        try:
            proc = subprocess.Popen(argv, start_new_session=own_session, **kwargs)
        except FileNotFoundError as e:
            raise ExecutionError(command, EXIT_COMMAND_NOT_FOUND, [str(e)]) from e

        try:
            output, _ = proc.communicate(timeout=timeout)
        except subprocess.TimeoutExpired as e:
            partial = self._terminate(proc, own_session)
            raise ExecutionError(
                command, -1, _decode_lines(partial), timed_out=True
            ) from e
        except KeyboardInterrupt:
            self._terminate(proc, own_session)
            raise

        return proc.returncode, _decode_lines(output)

    @staticmethod
    def _terminate(
        proc: "subprocess.Popen", own_session: bool
    ) -> Union[str, bytes, None]:
        """Stop a command and everything it started; return unread output."""
        if not own_session:
            proc.terminate()
            try:
                output, _ = proc.communicate(timeout=TERMINATE_GRACE_S)
            except subprocess.TimeoutExpired:
                proc.kill()
                output, _ = proc.communicate()
            return output

        _signal_group(proc.pid, signal.SIGTERM)
        try:
            output, _ = proc.communicate(timeout=TERMINATE_GRACE_S)
        except subprocess.TimeoutExpired:
            output = None
        # Sweep group members that ignored SIGTERM or outlived the leader
        _signal_group(proc.pid, signal.SIGKILL)
        if output is None:
            output, _ = proc.communicate()
        return output

    def _echo(self, command: str) -> None:
        if self.config.echo_commands:
            Logger.command(command)


def _signal_group(pgid: int, sig: int) -> None:
    try:
        os.killpg(pgid, sig)
    except (ProcessLookupError, PermissionError):
        # group already gone
        return


def _decode_lines(output: Union[str, bytes, None]) -> List[str]:
    if not output:
        return []
    if isinstance(output, bytes):
        output = output.decode("utf-8", errors="replace")
    return output.splitlines()
