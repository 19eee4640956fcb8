"""Extension normalization shared by the registry, dispatcher and job manager."""

from __future__ import annotations


INPUT_SYNONYMS: dict[str, str] = {
    "jpg": "jpeg",
    "jpe": "jpeg",
    "jfif": "jpeg",
    "htm": "html",
    "xhtml": "html",
    "tex": "latex",
    "md": "markdown",
    "mdown": "markdown",
    "markdown_strict": "markdown",
    "markdown_phpextra": "markdown",
    "markdown_mmd": "markdown",
    "tif": "tiff",
    "yml": "yaml",
    "m4v": "mp4",
    "mpeg4": "mp4",
}

OUTPUT_EXTENSIONS: dict[str, str] = {
    "jpeg": "jpg",
    "latex": "tex",
    "markdown": "md",
}


def _clean(raw: str) -> str:
    return str(raw).strip().lstrip(".").strip().lower()


def normalize_input(raw: str) -> str:
    """Map an extension onto the canonical token used for format equality."""
    token = _clean(raw)
    return INPUT_SYNONYMS.get(token, token)


def normalize_output(raw: str) -> str:
    """Map an extension onto the file extension written for converted artifacts."""
    token = normalize_input(raw)
    return OUTPUT_EXTENSIONS.get(token, token)


def extension_of(file_name: str) -> str:
    _, dot, extension = file_name.rpartition(".")
    if not dot:
        return ""
    return extension


def same_format(left: str, right: str) -> bool:
    return normalize_input(left) == normalize_input(right)


__all__ = [
    "INPUT_SYNONYMS",
    "OUTPUT_EXTENSIONS",
    "extension_of",
    "normalize_input",
    "normalize_output",
    "same_format",
]
