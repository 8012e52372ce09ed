from __future__ import annotations

import json
import re
from pathlib import Path

from schedule_import.cli.__main__ import main

SUMMARY_RE = re.compile(
    r"^SUMMARY source=(\S+) type=(csv|google_sheets) total=(\d+) success=(\d+) failed=(\d+) elapsed_sec=([0-9.]+)$",
    re.MULTILINE,
)


def test_cli_prints_result_json_and_summary(write_config, temp_workdir: Path, capsys):
    path = temp_workdir / "data" / "week.csv"
    path.write_text(
        "Course,Specialty,Group,Day,Start Time,End Time,Subject,Teacher,Room\n"
        "1,ИС,ИС-101,Понедельник,09:00,10:30,Математика,Иванов И.И.,305\n"
        "1,ИС,ИС-101,Вторник,25:00,10:30,Физика,Петров П.П.,210\n",
        encoding="utf-8",
    )
    code = main(["csv", str(path)])
    out = capsys.readouterr().out
    assert code == 2
    m = SUMMARY_RE.search(out)
    assert m is not None
    assert m.groups()[:5] == ("week.csv", "csv", "2", "1", "1")
    # JSON 結果は stdout にそのまま出力される
    start = out.index("{")
    end = out.rindex("}") + 1
    assert json.loads(out[start:end])["errors"] == [
        {"row": 3, "error": "invalid time format for Start Time: 25:00"}
    ]


def test_error_log_written_for_row_errors(write_config, temp_workdir: Path):
    path = temp_workdir / "data" / "week.csv"
    path.write_text(
        "Course,Specialty,Group,Day,Start Time,End Time,Subject,Teacher,Room\n"
        "1,ИС,ИС-101,Funday,09:00,10:30,Математика,Иванов И.И.,305\n",
        encoding="utf-8",
    )
    main(["--output", "r.json", "csv", str(path)])
    logs = list((temp_workdir / "logs").glob("errors-*.log"))
    assert len(logs) == 1
    record = json.loads(logs[0].read_text(encoding="utf-8").strip())
    assert record["source"] == "week.csv"
    assert record["row"] == 2
    assert record["error_type"] == "UNRECOGNIZED_WEEKDAY"


def test_template_command(temp_workdir: Path, capsys):
    assert main(["template"]) == 0
    out = capsys.readouterr().out.splitlines()
    assert out[0] == "Course,Specialty,Group,Day,Start Time,End Time,Subject,Teacher,Room"
    assert len(out) == 3
