from __future__ import annotations

import shutil
from pathlib import Path
from typing import Any, Mapping

import pytest

from core.converthub.config import AppConfig, RuntimeConfig
from core.converthub.models import SUCCESS_MARKER
from core.converthub.registry import ConverterDescriptor, ConverterRegistry


def copy_convert(
    input_path: str,
    input_format: str,
    output_format: str,
    output_path: str,
    options: Mapping[str, Any],
) -> str:
    shutil.copyfile(input_path, output_path)
    return SUCCESS_MARKER


def reject_convert(
    input_path: str,
    input_format: str,
    output_format: str,
    output_path: str,
    options: Mapping[str, Any],
) -> str:
    return "Converter rejected the file"


def make_descriptor(name: str, inputs: set[str], outputs: set[str], convert=copy_convert, **kwargs: Any) -> ConverterDescriptor:
    return ConverterDescriptor(
        name=name,
        inputs=frozenset(inputs),
        outputs=frozenset(outputs),
        convert=convert,
        **kwargs,
    )


def build_config(tmp_path: Path) -> AppConfig:
    runtime = RuntimeConfig(
        uploads_dir=tmp_path / "uploads",
        output_dir=tmp_path / "output",
        database_url=f"sqlite:///{tmp_path / 'converthub.db'}",
        enable_local_api=True,
    )
    return AppConfig(runtime=runtime)


@pytest.fixture
def config(tmp_path: Path) -> AppConfig:
    return build_config(tmp_path)


@pytest.fixture
def registry() -> ConverterRegistry:
    return ConverterRegistry(
        [
            make_descriptor("docs", {"docx", "odt", "txt"}, {"pdf", "txt"}),
            make_descriptor("text", {"txt", "markdown", "html"}, {"html", "markdown", "pdf"}),
            make_descriptor("broken", {"csv"}, {"json"}, convert=reject_convert),
        ]
    )
