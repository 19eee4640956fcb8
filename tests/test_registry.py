import pytest

from core.converthub.converters import default_descriptors
from core.converthub.registry import (
    ConverterDescriptor,
    ConverterRegistry,
    UnsupportedFormatError,
    order_descriptors,
)

from conftest import copy_convert, make_descriptor


def test_supported_inputs_are_union_of_descriptors(registry: ConverterRegistry) -> None:
    expected = sorted({ext for d in registry.all_backends() for ext in d.inputs})
    assert registry.supported_inputs() == expected
    for ext, names in registry.inputs_by_converter().items():
        for name in names:
            descriptor = registry.get(name)
            assert descriptor is not None
            assert ext in descriptor.inputs


def test_outputs_by_converter_lists_every_producer(registry: ConverterRegistry) -> None:
    outputs = registry.outputs_by_converter()
    assert outputs["pdf"] == ["docs", "text"]
    assert outputs["json"] == ["broken"]


def test_backends_supporting_pair(registry: ConverterRegistry) -> None:
    assert registry.backends_supporting_pair("txt", "pdf") == {"docs", "text"}
    assert registry.backends_supporting_pair("md", "html") == {"text"}
    assert registry.backends_supporting_pair("txt", "xyz") == set()


def test_targets_for_known_extension(registry: ConverterRegistry) -> None:
    payload = registry.targets_for("md")
    assert payload["from"] == "md"
    assert payload["converterTargets"] == {"text": ["html", "markdown", "pdf"]}
    assert payload["availableTargets"] == ["html", "markdown", "pdf"]


def test_targets_for_unknown_extension(registry: ConverterRegistry) -> None:
    with pytest.raises(UnsupportedFormatError, match="No converters support the format: xyz"):
        registry.targets_for("xyz")


def test_capability_matrix_keys(registry: ConverterRegistry) -> None:
    matrix = registry.capability_matrix()
    assert set(matrix) == {
        "converters",
        "supportedInputs",
        "supportedOutputs",
        "inputsByConverter",
        "outputsByConverter",
    }
    assert matrix["converters"]["docs"]["outputs"] == ["pdf", "txt"]


def test_duplicate_names_rejected() -> None:
    first = make_descriptor("dup", {"txt"}, {"pdf"})
    with pytest.raises(ValueError, match="Duplicate"):
        ConverterRegistry([first, first])


def test_descriptor_validation() -> None:
    with pytest.raises(ValueError):
        ConverterDescriptor(name="empty", inputs=frozenset(), outputs=frozenset({"pdf"}), convert=copy_convert)
    with pytest.raises(ValueError):
        make_descriptor("bad", {"txt"}, {"pdf"}, max_parallel=0)


def test_order_descriptors_applies_priority_and_enabled() -> None:
    descriptors = [
        make_descriptor("a", {"txt"}, {"pdf"}),
        make_descriptor("b", {"txt"}, {"pdf"}),
        make_descriptor("c", {"txt"}, {"pdf"}),
    ]
    ordered = order_descriptors(descriptors, enabled=("a", "c"), priority=("c",))
    assert [d.name for d in ordered] == ["c", "a"]
    with pytest.raises(ValueError, match="Unknown converters"):
        order_descriptors(descriptors, priority=("missing",))


def test_default_descriptors_are_normalized() -> None:
    descriptors = {d.name: d for d in default_descriptors()}
    assert list(descriptors) == ["libreoffice", "pandoc", "markitdown", "imagemagick", "ffmpeg", "archive"]
    assert descriptors["libreoffice"].max_parallel == 1
    for descriptor in descriptors.values():
        assert "jpg" not in descriptor.inputs
        assert "md" not in descriptor.outputs
