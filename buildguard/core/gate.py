"""Reporting of the uncommitted changes that stop a build."""

import sys
from typing import List, Optional, TextIO

from buildguard.core.git import ChangeRecord

GATE_HEADER = "The following changes must be committed prior to build:"


def report_changes(changes: List[ChangeRecord], stream: Optional[TextIO] = None) -> None:
    """Prints the header, one `<status> <path>` line per change and a blank line."""
    stream = stream or sys.stdout
    print(GATE_HEADER, file=stream)
    print("", file=stream)
    for change in changes:
        print(f"{change.status} {change.path}", file=stream)
    print("", file=stream)
