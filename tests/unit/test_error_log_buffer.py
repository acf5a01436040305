from __future__ import annotations
import json
import re
from pathlib import Path
from crm_validator.logging.error_log import ErrorLogBuffer, ErrorRecord


def test_error_log_buffer_flush(temp_workdir: Path):
    buf = ErrorLogBuffer()
    buf.append(ErrorRecord.create("f1.xlsx", "", 2, "ROW_PROCESSING_ERROR", "boom"))
    buf.append(ErrorRecord.create("f2.csv", "", -1, "FILE_READ_ERROR", "bad file"))
    path = buf.flush()
    assert path is not None and path.exists()
    assert path.parent.resolve() == (temp_workdir / "logs").resolve()
    assert re.fullmatch(r"errors-\d{8}-\d{6}\.log", path.name)
    lines = path.read_text(encoding="utf-8").strip().splitlines()
    assert len(lines) == 2
    for raw in lines:
        assert set(json.loads(raw)) == {"timestamp", "file", "sheet", "row", "error_type", "message"}
    assert len(buf) == 0


def test_error_log_buffer_multiple_flushes_same_file(temp_workdir: Path):
    buf = ErrorLogBuffer()
    buf.append(ErrorRecord.create("f.xlsx", "", 2, "ROW_PROCESSING_ERROR", "a"))
    path = buf.flush()
    size1 = path.stat().st_size
    buf.append(ErrorRecord.create("f.xlsx", "", 3, "ROW_PROCESSING_ERROR", "b"))
    path2 = buf.flush()
    assert path == path2
    assert path2.stat().st_size > size1


def test_empty_flush_writes_nothing(tmp_path: Path):
    buf = ErrorLogBuffer(logs_dir=tmp_path / "logs")
    assert buf.flush() is None
    assert not (tmp_path / "logs").exists()
