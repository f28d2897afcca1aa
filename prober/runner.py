"""
Subprocess helpers for the git and aws CLI backed collaborators
"""

import os
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional, Sequence, Tuple


@dataclass(frozen=True)
class CompletedCommand:
    """Normalized command execution result"""
    cmd: Tuple[str, ...]
    returncode: int
    stdout: str = ''
    stderr: str = ''

    @property
    def ok(self) -> bool:
        return self.returncode == 0


class CommandNotFoundError(RuntimeError):
    """Raised when the executable for a command is not on PATH"""


class CommandRunner:
    """Thin subprocess wrapper that always captures output"""

    def require_command(self, command: str) -> str:
        resolved = shutil.which(command)
        if resolved is None:
            raise CommandNotFoundError(f"required command not found: {command}")
        return resolved

    def run(
        self,
        cmd: Sequence[str],
        cwd: Optional[Path] = None,
        env: Optional[Mapping[str, str]] = None,
    ) -> CompletedCommand:
        """
        Run a command to completion

        Args:
            cmd: Command and arguments
            cwd: Working directory (default: current directory)
            env: Extra environment variables layered over os.environ

        Returns:
            CompletedCommand with captured stdout/stderr; a non-zero exit
            code is returned, not raised

        Raises:
            CommandNotFoundError: If the executable is not on PATH
        """
        argv = [str(token) for token in cmd]
        self.require_command(argv[0])

        run_env = os.environ.copy()
        if env:
            run_env.update({str(key): str(value) for key, value in env.items()})

        completed = subprocess.run(
            argv,
            cwd=str(cwd) if cwd else None,
            env=run_env,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            check=False,
            errors='replace',
        )
        return CompletedCommand(
            tuple(argv),
            completed.returncode,
            completed.stdout or '',
            completed.stderr or '',
        )
