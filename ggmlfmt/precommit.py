"""Run the repository's checks before a commit."""

from __future__ import annotations

import os
import subprocess
import sys
from collections.abc import Mapping, Sequence

CHECKS: tuple[tuple[str, tuple[str, ...], dict[str, str]], ...] = (
    ("cargo", ("check",), {}),
    ("cargo", ("test", "--all"), {}),
    ("cargo", ("fmt", "--check", "--all"), {}),
    ("cargo", ("doc", "--workspace", "--exclude", "llm-cli"), {"RUSTDOCFLAGS": "-Dwarnings"}),
    ("cargo", ("clippy", "--workspace", "--", "-Dclippy::all"), {}),
)


class CommandFailed(Exception):
    """A check command exited unsuccessfully."""

    def __init__(self, cmd: str, args: Sequence[str], returncode: int) -> None:
        super().__init__(f"Failed to run command: {cmd} {_show_args(args)}")
        self.cmd = cmd
        self.args_list = list(args)
        self.returncode = returncode


def _show_args(args: Sequence[str]) -> str:
    return "[" + ", ".join(f'"{arg}"' for arg in args) + "]"


def run_command(cmd: str, args: Sequence[str], env: Mapping[str, str]) -> None:
    """Run ``cmd`` with ``args`` and extra environment variables, raising on failure."""
    print(f"=== Running command: {cmd} {_show_args(args)}", flush=True)
    result = subprocess.run([cmd, *args], env={**os.environ, **env}, check=False)
    if result.returncode != 0:
        raise CommandFailed(cmd, args, result.returncode)


def main(argv: Sequence[str] | None = None) -> int:
    """Run every check in order, stopping at the first failure."""
    try:
        for cmd, args, env in CHECKS:
            run_command(cmd, args, env)
    except (CommandFailed, OSError) as exc:
        print(exc, file=sys.stderr)
        return 1
    return 0