import io
from contextlib import contextmanager

import pytest

from lorebook import main as cli


@pytest.fixture
def run_cli(db, monkeypatch):
    @contextmanager
    def _session_scope():
        yield db

    monkeypatch.setattr(cli, "session_scope", _session_scope)
    monkeypatch.setattr(cli, "setup_logging", lambda level=None: None)

    def _run(*argv):
        out = io.StringIO()
        code = cli.main(list(argv), out=out)
        return code, out.getvalue()

    return _run


def test_import_command_reports_each_row(run_cli, tmp_path, character_service):
    csv_path = tmp_path / "characters.csv"
    csv_path.write_text(
        "name,description,father\n"
        "Tywin,Lord of Casterly Rock,\n"
        "Tyrion,The Imp,Tywin\n"
        "Nobody,,\n",
        encoding="utf-8",
    )

    code, output = run_cli("import", str(csv_path))

    assert code == 0
    assert "line 2: imported Tywin" in output
    assert "line 4: rejected Nobody: Description can't be blank" in output
    assert "2 imported, 1 rejected." in output
    assert character_service.get_by_name("Tyrion").father.name == "Tywin"


def test_import_command_fails_for_missing_file(run_cli, tmp_path):
    code, _ = run_cli("import", str(tmp_path / "missing.csv"))

    assert code == 1


def test_reconcile_command_prints_diagnoses(run_cli, make_character):
    make_character(name="Arya", father_name="Eddard")
    make_character(name="Eddard")

    code, output = run_cli("reconcile")

    assert code == 0
    assert "[found] " in output
    assert "[no_name] " in output


def test_show_command_prints_family(run_cli, make_character):
    make_character(name="Eddard")
    make_character(name="Arya", father_name="Eddard")

    code, output = run_cli("show", "Eddard")

    assert code == 0
    assert "Children: Arya" in output
    assert "Father: Unknown" in output


def test_show_command_fails_for_unknown_character(run_cli):
    code, _ = run_cli("show", "Nobody")

    assert code == 1


def test_import_command_fails_for_invalid_encoding(run_cli, tmp_path, character_service):
    csv_path = tmp_path / "broken.csv"
    csv_path.write_bytes(
        b"name,description\n"
        b"Davos,The Onion Knight\n"
        b"Stannis," + b"x" * 20000 + b"\n"
        b"Shireen,\xff\n"
    )

    code, _ = run_cli("import", str(csv_path))

    assert code == 1
    assert character_service.get_by_name("Davos") is not None


def test_import_command_fails_for_invalid_header_encoding(run_cli, tmp_path):
    csv_path = tmp_path / "broken_header.csv"
    csv_path.write_bytes(b"n\xffme,description\nDavos,The Onion Knight\n")

    code, _ = run_cli("import", str(csv_path))

    assert code == 1


def test_show_command_looks_up_by_id(run_cli, make_character):
    eddard = make_character(name="Eddard")

    code, output = run_cli("show", "--id", str(eddard.id))

    assert code == 0
    assert "Name: Eddard" in output


def test_show_command_fails_for_unknown_id(run_cli):
    assert run_cli("show", "--id", "999")[0] == 1
    assert run_cli("show", "--id", "not-a-number")[0] == 1
