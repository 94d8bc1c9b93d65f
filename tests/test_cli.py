import json

from class_roster_export.cli import main

SAMPLE_EXPORT = "\n".join([
    "IT413 Social and Professional Issues",
    "Class Section,,BSIT-4D,,,",
    "Subject Title,,Social and Professional Issues,,,",
    'Faculty,,"HABAGAT, MARITES",,,',
    "Schedule(s),,,M 1:00 PM - 2:30 PM (Makeshift-06),,",
    "#,Student No,Full Name",
    ',1.,,2022310039,"ABUTON, Harold Y",',
    ',2.,,2022310040,"BALANE, MARIA C",',
])


def _write_export(tmp_path, text=SAMPLE_EXPORT):
    path = tmp_path / "class_list.csv"
    path.write_text(text, encoding="utf-8")
    return path


def test_json_export(tmp_path, capsys):
    path = _write_export(tmp_path)
    out = tmp_path / "roster"
    assert main([str(path), "-o", str(out)]) == 0

    data = json.loads((tmp_path / "roster.json").read_text(encoding="utf-8"))
    assert data["section"] == "BSIT4D"
    assert len(data["students"]) == 2
    assert "Exported IT413 BSIT4D" in capsys.readouterr().out


def test_list_students(tmp_path, capsys):
    path = _write_export(tmp_path)
    assert main([str(path), "--list-students", "-o", str(tmp_path / "roster")]) == 0

    stdout = capsys.readouterr().out
    assert "ABUTON, Harold Y" in stdout
    assert "BALANE, MARIA C" in stdout
    assert not (tmp_path / "roster.json").exists()


def test_unparseable_file(tmp_path, capsys):
    path = _write_export(tmp_path, "Page 1 of 1\nnothing useful here")
    assert main([str(path), "-o", str(tmp_path / "roster")]) == 1
    assert "could not read a class list" in capsys.readouterr().err


def test_missing_file(tmp_path, capsys):
    assert main([str(tmp_path / "nope.csv")]) == 1
    assert "not found" in capsys.readouterr().err


def test_ics_without_term_dates(tmp_path, capsys):
    path = _write_export(tmp_path)
    assert main([str(path), "-f", "ics", "-o", str(tmp_path / "roster")]) == 1
    assert "term-start" in capsys.readouterr().err
