from pathlib import Path

from core.converthub.config import dump_config, load_config


def test_missing_file_yields_defaults(tmp_path: Path) -> None:
    config = load_config(tmp_path / "absent.toml")
    assert config.runtime.max_file_size_mb == 100
    assert config.runtime.unique_output_names is True
    assert config.api.port == 3000
    assert config.converters.enabled == ()


def test_values_are_read_from_toml(tmp_path: Path) -> None:
    path = tmp_path / "config.toml"
    path.write_text(
        """
[runtime]
uploads_dir = "u"
convert_timeout_s = 12
unique_output_names = false

[converters]
enabled = ["pandoc", "archive"]
priority = "archive"

[api]
port = 8080
public_base_url = "https://convert.example/"
""",
        encoding="utf-8",
    )
    config = load_config(path)
    assert config.runtime.uploads_dir == Path("u")
    assert config.runtime.convert_timeout_s == 12
    assert config.runtime.unique_output_names is False
    assert config.converters.enabled == ("pandoc", "archive")
    assert config.converters.priority == ("archive",)
    assert config.api.port == 8080
    assert config.api.public_base_url == "https://convert.example"
    assert '"convert_timeout_s": 12' in dump_config(config)
