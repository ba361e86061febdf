import io

from buildguard.core.gate import GATE_HEADER, report_changes
from buildguard.core.git import ChangeRecord


def test_report_changes_layout():
    """Tests the header, one line per change in order, and the trailing blank line."""
    stream = io.StringIO()
    changes = [ChangeRecord("M ", "sub/a.go"), ChangeRecord("??", "sub/new.go")]

    report_changes(changes, stream=stream)

    assert stream.getvalue().split("\n") == [
        GATE_HEADER,
        "",
        "M  sub/a.go",
        "?? sub/new.go",
        "",
        "",
    ]


def test_report_changes_defaults_to_stdout(capsys):
    report_changes([ChangeRecord(" D", "gone.go")])

    out = capsys.readouterr().out
    assert out.startswith(GATE_HEADER)
    assert " D gone.go\n" in out
