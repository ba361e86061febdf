"""Build delegation with commit and timestamp stamping.

The build tool is invoked with a linker-flag argument that sets two string
variables of the target program, so the produced binary can report when and
from which commit it was built.
"""

import logging
import subprocess
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional

from buildguard.core.git import get_commit_hash
from buildguard.utils.log_utils import log_execution_time

logger = logging.getLogger(__name__)

RFC3339_UTC_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


@dataclass(frozen=True)
class BuildStamp:
    build_date: str
    commit_hash: str


def make_build_stamp(commit_hash: str, now: Optional[datetime] = None) -> BuildStamp:
    """Creates a stamp with the given time (default: now) rendered as RFC3339 UTC."""
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is not None:
        now = now.astimezone(timezone.utc)
    return BuildStamp(build_date=now.strftime(RFC3339_UTC_FORMAT), commit_hash=commit_hash)


def format_ldflags(
    stamp: BuildStamp,
    package: str = "main",
    date_var: str = "buildDate",
    hash_var: str = "commitHash",
) -> str:
    """Formats the `-X` linker flags that inject the stamp into `package`."""
    return (
        f"-X {package}.{date_var}={stamp.build_date} "
        f"-X {package}.{hash_var}={stamp.commit_hash}"
    )


def build_command(
    tool: str,
    subcommand: str,
    stamp: BuildStamp,
    build_args: List[str],
    package: str = "main",
    date_var: str = "buildDate",
    hash_var: str = "commitHash",
) -> List[str]:
    """Assembles the build invocation: tool, subcommand, linker flags, passthrough args.

    Args:
        tool (str): The build tool executable (e.g. "go").
        subcommand (str): The build subcommand (e.g. "build").
        stamp (BuildStamp): The values to inject.
        build_args (List[str]): Caller arguments, appended verbatim.
        package (str): Package holding the stamped variables.
        date_var (str): Name of the build date variable.
        hash_var (str): Name of the commit hash variable.

    Returns:
        List[str]: The argument vector to execute.
    """
    ldflags = format_ldflags(stamp, package=package, date_var=date_var, hash_var=hash_var)
    return [tool, subcommand, "-ldflags", ldflags] + list(build_args)


@log_execution_time
def run_build(
    build_args: List[str],
    tool: str = "go",
    subcommand: str = "build",
    package: str = "main",
    date_var: str = "buildDate",
    hash_var: str = "commitHash",
    git: str = "git",
    cwd: Optional[str] = None,
) -> None:
    """Reads the current commit and runs the stamped build.

    The build tool inherits stdout and stderr, so its diagnostics stream to
    the caller as they are produced.

    Raises:
        OSError: If git or the build tool cannot be started.
        subprocess.CalledProcessError: If git or the build exits non-zero.
    """
    stamp = make_build_stamp(get_commit_hash(git=git, cwd=cwd))
    cmd = build_command(
        tool,
        subcommand,
        stamp,
        build_args,
        package=package,
        date_var=date_var,
        hash_var=hash_var,
    )
    logger.info(
        "Starting build",
        extra={
            "command": cmd,
            "build_date": stamp.build_date,
            "commit_hash": stamp.commit_hash,
        },
    )
    subprocess.run(cmd, cwd=cwd, check=True)
    logger.info("Build finished successfully")
