"""Read-only queries against the git working tree.

This module wraps the three git invocations the guard needs: locating the
repository root, reading the current commit hash, and listing working-tree
changes in porcelain format. Each query runs synchronously and propagates
failures to the caller.
"""

import logging
import subprocess
from dataclasses import dataclass
from typing import List, Optional

logger = logging.getLogger(__name__)


class GitCommandError(subprocess.CalledProcessError):
    """Raised when a git query exits with a non-zero status."""

    def __str__(self):
        message = super().__str__()
        if self.stderr:
            message += f": {self.stderr.strip()}"
        return message


@dataclass(frozen=True)
class ChangeRecord:
    """A single entry of `git status --porcelain` output."""

    status: str
    path: str

    def __str__(self):
        return f"{self.status} {self.path}"


def _run_git(args: List[str], git: str = "git", cwd: Optional[str] = None) -> List[str]:
    """Runs a git command and returns its standard output split into lines.

    Args:
        args (List[str]): Arguments passed after the git executable.
        git (str): The git executable to invoke. Defaults to "git".
        cwd (Optional[str]): Directory to run the command in. Defaults to the
            current working directory.

    Returns:
        List[str]: The output lines, without line terminators.

    Raises:
        OSError: If the git process cannot be started.
        GitCommandError: If git exits with a non-zero status.
    """
    cmd = [git] + list(args)
    logger.debug("Running git query", extra={"command": cmd, "cwd": cwd})
    result = subprocess.run(cmd, cwd=cwd, capture_output=True, text=True)
    if result.returncode != 0:
        raise GitCommandError(
            result.returncode, cmd, output=result.stdout, stderr=result.stderr
        )
    return result.stdout.splitlines()


def _last_line(lines: List[str]) -> str:
    non_empty = [line for line in lines if line.strip()]
    return non_empty[-1].rstrip("\r") if non_empty else ""


def get_repo_root(git: str = "git", cwd: Optional[str] = None) -> str:
    """Returns the absolute path of the repository root."""
    return _last_line(_run_git(["rev-parse", "--show-toplevel"], git=git, cwd=cwd))


def get_commit_hash(git: str = "git", cwd: Optional[str] = None) -> str:
    """Returns the full hash of the commit checked out at HEAD."""
    return _last_line(_run_git(["rev-parse", "HEAD"], git=git, cwd=cwd))


def parse_status_line(line: str) -> ChangeRecord:
    """Parses one line of porcelain status output.

    The line is expected to read `XY path`: a two-character status code, a
    single separator and the repository-relative path. Rename entries
    (`R  old -> new`) and quoted paths are kept verbatim in `path`.

    Args:
        line (str): A single status line without its terminator.

    Returns:
        ChangeRecord: The parsed record.

    Raises:
        ValueError: If the line is too short to hold a status and a path.
    """
    if len(line) < 4:
        raise ValueError(f"Malformed status line: {line!r}")
    return ChangeRecord(status=line[:2], path=line[3:])


def get_changes(git: str = "git", cwd: Optional[str] = None) -> List[ChangeRecord]:
    """Lists modified, staged and untracked paths in git's output order."""
    lines = _run_git(["status", "--porcelain"], git=git, cwd=cwd)
    changes = [parse_status_line(line) for line in lines if line]
    logger.debug("Working tree status read", extra={"change_count": len(changes)})
    return changes
