from __future__ import annotations

import json
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Mapping


CONFIG_FILE = Path("config.toml")


@dataclass(slots=True)
class RuntimeConfig:
    uploads_dir: Path = Path("data/uploads")
    output_dir: Path = Path("data/output")
    database_url: str = "sqlite:///data/converthub.db"
    log_file: str = "log.jsonl"
    max_file_size_mb: int = 100
    convert_timeout_s: int = 300
    fetch_timeout_s: int = 60
    unique_output_names: bool = True
    enable_local_api: bool = False


@dataclass(slots=True)
class ConvertersConfig:
    enabled: tuple[str, ...] = ()
    priority: tuple[str, ...] = ()
    require_available: bool = True


@dataclass(slots=True)
class APIConfig:
    host: str = "127.0.0.1"
    port: int = 3000
    public_base_url: str | None = None


@dataclass(slots=True)
class AppConfig:
    runtime: RuntimeConfig = field(default_factory=RuntimeConfig)
    converters: ConvertersConfig = field(default_factory=ConvertersConfig)
    api: APIConfig = field(default_factory=APIConfig)


def _read_toml(path: Path) -> Mapping[str, object]:
    if not path.exists():
        return {}
    with path.open("rb") as handle:
        return tomllib.load(handle)


def _build_runtime(data: Mapping[str, object] | None) -> RuntimeConfig:
    if not data:
        return RuntimeConfig()
    defaults = RuntimeConfig()
    return RuntimeConfig(
        uploads_dir=Path(str(data.get("uploads_dir", defaults.uploads_dir))),
        output_dir=Path(str(data.get("output_dir", defaults.output_dir))),
        database_url=str(data.get("database_url", defaults.database_url)),
        log_file=str(data.get("log_file", defaults.log_file)),
        max_file_size_mb=int(data.get("max_file_size_mb", defaults.max_file_size_mb)),
        convert_timeout_s=int(data.get("convert_timeout_s", defaults.convert_timeout_s)),
        fetch_timeout_s=int(data.get("fetch_timeout_s", defaults.fetch_timeout_s)),
        unique_output_names=bool(data.get("unique_output_names", defaults.unique_output_names)),
        enable_local_api=bool(data.get("enable_local_api", defaults.enable_local_api)),
    )


def _build_converters(data: Mapping[str, object] | None) -> ConvertersConfig:
    if not data:
        return ConvertersConfig()
    return ConvertersConfig(
        enabled=_tuple_of_strings(data.get("enabled"), ()),
        priority=_tuple_of_strings(data.get("priority"), ()),
        require_available=bool(data.get("require_available", True)),
    )


def _build_api(data: Mapping[str, object] | None) -> APIConfig:
    if not data:
        return APIConfig()
    base_url = data.get("public_base_url")
    return APIConfig(
        host=str(data.get("host", "127.0.0.1")),
        port=int(data.get("port", 3000)),
        public_base_url=str(base_url).rstrip("/") if base_url else None,
    )


def _tuple_of_strings(value: object | None, default: Iterable[str]) -> tuple[str, ...]:
    if not value:
        return tuple(default)
    if isinstance(value, str):
        return (value,)
    if isinstance(value, Iterable):
        return tuple(str(item) for item in value)
    raise TypeError(f"Unsupported converters configuration: {value!r}")


def _section(raw: Mapping[str, object], name: str) -> Mapping[str, object] | None:
    value = raw.get(name) if isinstance(raw, Mapping) else None
    return value if isinstance(value, Mapping) else None


def load_config(path: Path | None = None) -> AppConfig:
    path = path or CONFIG_FILE
    raw = _read_toml(path)
    return AppConfig(
        runtime=_build_runtime(_section(raw, "runtime")),
        converters=_build_converters(_section(raw, "converters")),
        api=_build_api(_section(raw, "api")),
    )


def dump_config(config: AppConfig) -> str:
    payload = {
        "runtime": {
            "uploads_dir": str(config.runtime.uploads_dir),
            "output_dir": str(config.runtime.output_dir),
            "database_url": config.runtime.database_url,
            "log_file": config.runtime.log_file,
            "max_file_size_mb": config.runtime.max_file_size_mb,
            "convert_timeout_s": config.runtime.convert_timeout_s,
            "fetch_timeout_s": config.runtime.fetch_timeout_s,
            "unique_output_names": config.runtime.unique_output_names,
            "enable_local_api": config.runtime.enable_local_api,
        },
        "converters": {
            "enabled": list(config.converters.enabled),
            "priority": list(config.converters.priority),
            "require_available": config.converters.require_available,
        },
        "api": {
            "host": config.api.host,
            "port": config.api.port,
            "public_base_url": config.api.public_base_url,
        },
    }
    return json.dumps(payload, indent=2)
