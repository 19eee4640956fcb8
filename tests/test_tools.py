from __future__ import annotations

import os
import stat
import sys
from pathlib import Path

import pytest

from core.converthub.converters import ffmpeg, libreoffice
from core.converthub.converters.base import ToolError, run_tool, timeout_from
from core.converthub.models import SUCCESS_MARKER

FAKE_SOFFICE = """#!/bin/sh
fmt=""; outdir=""; input=""
while [ $# -gt 0 ]; do
  case "$1" in
    --convert-to) fmt="$2"; shift 2;;
    --outdir) outdir="$2"; shift 2;;
    *) input="$1"; shift;;
  esac
done
name=$(basename "$input")
cp "$input" "$outdir/${name%.*}.$fmt"
"""


def test_run_tool_returns_stdout() -> None:
    assert run_tool([sys.executable, "-c", "print('ok')"], timeout_s=30).strip() == "ok"


def test_run_tool_reports_exit_status() -> None:
    with pytest.raises(ToolError, match="exited with status 3: bad input"):
        run_tool([sys.executable, "-c", "import sys; sys.stderr.write('bad input'); sys.exit(3)"], timeout_s=30)


def test_run_tool_kills_on_timeout() -> None:
    with pytest.raises(ToolError, match="timed out"):
        run_tool([sys.executable, "-c", "import time; time.sleep(10)"], timeout_s=0.2)


def test_run_tool_missing_executable() -> None:
    with pytest.raises(ToolError, match="not installed"):
        run_tool(["definitely-not-a-converter"], timeout_s=1)


def test_timeout_from_defaults() -> None:
    assert timeout_from({}) == 300.0
    assert timeout_from({"timeout_s": 5}) == 5.0


@pytest.mark.skipif(sys.platform == "win32", reason="uses a POSIX shell script")
def test_libreoffice_moves_generated_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    bin_dir = tmp_path / "bin"
    bin_dir.mkdir()
    script = bin_dir / "soffice"
    script.write_text(FAKE_SOFFICE, encoding="utf-8")
    script.chmod(script.stat().st_mode | stat.S_IEXEC)
    monkeypatch.setenv("PATH", f"{bin_dir}{os.pathsep}{os.environ.get('PATH', '')}")

    source = tmp_path / "report.docx"
    source.write_bytes(b"document")
    out_dir = tmp_path / "out"
    out_dir.mkdir()
    target = out_dir / "abc_report.pdf"

    assert libreoffice.is_available()
    assert libreoffice.convert(str(source), "docx", "pdf", str(target), {"timeout_s": 30}) == SUCCESS_MARKER
    assert target.read_bytes() == b"document"
    assert sorted(path.name for path in out_dir.iterdir()) == ["abc_report.pdf"]


def test_ffmpeg_builds_fixed_command(monkeypatch: pytest.MonkeyPatch) -> None:
    captured: list[list[str]] = []

    def fake_run_tool(args: list[str], *, timeout_s: float, cwd: Path | None = None) -> str:
        captured.append(list(args))
        return ""

    monkeypatch.setattr(ffmpeg, "_executable", lambda: "/usr/bin/ffmpeg")
    monkeypatch.setattr(ffmpeg, "run_tool", fake_run_tool)

    options = {"timeout_s": 5, "ffmpeg_args": ["-f", "mp3", "/tmp/elsewhere.mp3"]}
    assert ffmpeg.convert("in.mp4", "mp4", "mp3", "out.mp3", options) == SUCCESS_MARKER
    assert captured == [["/usr/bin/ffmpeg", "-y", "-hide_banner", "-loglevel", "error", "-i", "in.mp4", "out.mp3"]]
