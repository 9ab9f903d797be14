import json
import re
from pathlib import Path

from notesync.journal.logger import FlushJournal
from notesync.utils.error_logger import ErrorLogger
from notesync.utils.errors import SectionNotFoundError
from notesync.utils import paths
from notesync.utils.paths import DATA_ROOT, JOURNAL_DIR, error_log_path, journal_path


def test_journal_path_format():
    p = journal_path()
    assert p.parent == JOURNAL_DIR
    assert re.match(r"^\d{4}-\d{2}-\d{2}-\d{4}\.jsonl$", p.name)


def test_error_log_path_uses_given_directory(tmp_path: Path):
    p = error_log_path(tmp_path)
    assert p.parent == tmp_path
    assert p.suffix == ".jsonl"


def test_journal_writes_lines(tmp_path: Path):
    journal = FlushJournal(directory=tmp_path / "journal")
    journal.log("n1", "toc", "# A\n")
    journal.log("n1", "section", "body\n", section="A")
    rows = journal.read_all()
    assert [r["op"] for r in rows] == ["toc", "section"]
    assert rows[1]["section"] == "A"
    assert rows[1]["chars"] == 5
    # содержимое заметки в журнал не пишется
    assert "body" not in json.dumps(rows)


def test_error_logger_records_code_and_context(tmp_path: Path):
    err_logger = ErrorLogger(directory=tmp_path)
    err_logger.log("replace_content", SectionNotFoundError("n1", "Year", note_name="Books"))
    err_logger.log("startup", "plain warning", extra={"k": 1})
    lines = []
    for f in tmp_path.glob("*.jsonl"):
        lines.extend(json.loads(line) for line in f.read_text(encoding="utf-8").splitlines())
    by_route = {rec["route"]: rec for rec in lines}
    rec = by_route["replace_content"]
    assert rec["code"] == "section_not_found"
    assert rec["extra"] == {"uuid": "n1", "heading": "Year", "note_name": "Books"}
    assert "Year" in rec["message"]
    assert by_route["startup"]["code"] is None
    assert by_route["startup"]["extra"] == {"k": 1}


def test_loggers_create_directories_on_first_write(tmp_path: Path):
    journal_dir = tmp_path / "journal"
    errors_dir = tmp_path / "errors"
    journal = FlushJournal(directory=journal_dir)
    err_logger = ErrorLogger(directory=errors_dir)
    assert not journal_dir.exists()
    assert not errors_dir.exists()
    assert journal.read_all() == []

    journal.log("n1", "toc", "# A\n")
    err_logger.log("flush_local_notes", "boom")
    assert journal_dir.is_dir()
    assert errors_dir.is_dir()


def test_data_root_is_outside_the_package():
    package_dir = Path(paths.__file__).resolve().parent.parent
    assert package_dir not in DATA_ROOT.resolve().parents
