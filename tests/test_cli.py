from __future__ import annotations

import zipfile
from pathlib import Path

from typer.testing import CliRunner

from core.converthub.cli import app

runner = CliRunner()


def write_config(tmp_path: Path) -> Path:
    path = tmp_path / "config.toml"
    path.write_text(
        f"""
[runtime]
uploads_dir = "{(tmp_path / 'uploads').as_posix()}"
output_dir = "{(tmp_path / 'output').as_posix()}"
database_url = "sqlite:///{(tmp_path / 'cli.db').as_posix()}"

[converters]
enabled = ["archive"]
""",
        encoding="utf-8",
    )
    return path


def test_formats_for_extension(tmp_path: Path) -> None:
    config = write_config(tmp_path)
    result = runner.invoke(app, ["formats", "zip", "--config", str(config)])
    assert result.exit_code == 0
    assert "archive" in result.stdout

    missing = runner.invoke(app, ["formats", "xyz", "--config", str(config)])
    assert missing.exit_code == 1


def test_convert_and_inspect_job(tmp_path: Path) -> None:
    config = write_config(tmp_path)
    source = tmp_path / "bundle.zip"
    with zipfile.ZipFile(source, "w") as handle:
        handle.writestr("a.txt", "a")

    result = runner.invoke(app, ["convert", str(source), "--to", "tar", "--config", str(config)])
    assert result.exit_code == 0, result.stdout
    assert "1 of 1 files converted" in result.stdout

    job = runner.invoke(app, ["job", "1", "--config", str(config)])
    assert job.exit_code == 0
    assert "bundle.zip" in job.stdout


def test_add_user_rejects_duplicates(tmp_path: Path) -> None:
    config = write_config(tmp_path)
    args = ["add-user", "cli@example.com", "--password", "pw", "--config", str(config)]
    assert runner.invoke(app, args).exit_code == 0
    assert runner.invoke(app, args).exit_code == 1
