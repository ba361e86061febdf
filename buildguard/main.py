"""Command-line entry point for the pre-build guard.

Usage:
    buildguard [build args...]
    buildguard [-c CONFIG] [--log-level LEVEL] -- [build args...]

Without a `--` separator every argument is handed to the build tool
unchanged. With one, the arguments before it configure the guard itself.
"""

import argparse
import logging
import os
import subprocess
import sys
from typing import Any, Dict, List, Optional, Tuple

from buildguard.core.build import run_build
from buildguard.core.gate import report_changes
from buildguard.core.git import get_changes, get_repo_root
from buildguard.core.scope import filter_changes_in_scope
from buildguard.utils.config_utils import load_config, validate_config
from buildguard.utils.log_utils import setup_logging

logger = logging.getLogger(__name__)

GUARD_SEPARATOR = "--"
GUARD_OPTIONS = ("-c", "--config", "--log-level", "-h", "--help")


def _is_guard_option(arg: str) -> bool:
    return arg.split("=", 1)[0] in GUARD_OPTIONS


def split_argv(argv: List[str]) -> Tuple[List[str], List[str]]:
    """Splits argv into guard options and passthrough build arguments.

    Guard options are only recognised when argv starts with one of them and a
    `--` separator follows; any other argv is passed through unchanged.
    """
    if argv and _is_guard_option(argv[0]) and GUARD_SEPARATOR in argv:
        index = argv.index(GUARD_SEPARATOR)
        return argv[:index], argv[index + 1 :]
    return [], list(argv)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="buildguard",
        description=(
            "Refuse to build while the current directory has uncommitted changes; "
            "otherwise build with the commit hash and build date stamped in."
        ),
        epilog=(
            "Guard options must come first and be followed by '--' and the build "
            "arguments. Without them every argument goes to the build tool."
        ),
    )
    parser.add_argument(
        "-c", "--config", type=str, help="Path to the JSON configuration file."
    )
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Override the configured log level.",
    )
    return parser


def run_guard(
    config: Dict[str, Any], build_args: List[str], cwd: Optional[str] = None
) -> int:
    """Runs the guard pipeline and returns the process exit code.

    Locates the repository, reads its status, and keeps the changes located
    under `cwd`. Any such change blocks the build and yields 2; otherwise the
    stamped build runs and 0 is returned.

    Raises:
        OSError: If git or the build tool cannot be started.
        subprocess.CalledProcessError: If git or the build exits non-zero.
    """
    git = config["git"]["executable"]
    build_config = config["build"]
    cwd = cwd or os.getcwd()

    repo_root = get_repo_root(git=git, cwd=cwd)
    logger.debug("Repository located", extra={"repo_root": repo_root, "cwd": cwd})

    changes = get_changes(git=git, cwd=cwd)
    in_scope = filter_changes_in_scope(
        repo_root, cwd, changes, mode=config["scope"]["mode"]
    )

    if in_scope:
        report_changes(in_scope)
        logger.info(
            "Build blocked by uncommitted changes",
            extra={"paths": [change.path for change in in_scope]},
        )
        return 2

    run_build(
        build_args,
        tool=build_config["tool"],
        subcommand=build_config["subcommand"],
        package=build_config["package"],
        date_var=build_config["date_variable"],
        hash_var=build_config["hash_variable"],
        git=git,
        cwd=cwd,
    )
    return 0


def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point for the buildguard command-line interface."""
    if argv is None:
        argv = sys.argv[1:]

    guard_argv, build_args = split_argv(argv)
    args = build_parser().parse_args(guard_argv)

    config = load_config(args.config)
    validate_config(config)
    if args.log_level:
        config["logging"]["log_level"] = args.log_level

    try:
        setup_logging(config)
    except OSError as e:
        logger.error(
            f"Cannot set up logging in '{config['logging'].get('log_dir')}': {e}"
        )
        sys.exit(2)

    try:
        exit_code = run_guard(config, build_args)
    except (OSError, subprocess.CalledProcessError, ValueError) as e:
        logger.error("Build guard failed", exc_info=True, extra={"exception": str(e)})
        sys.exit(2)

    if exit_code != 0:
        sys.exit(exit_code)


if __name__ == "__main__":
    main()
