from core.converthub.formats import extension_of, normalize_input, normalize_output, same_format


def test_normalize_input_maps_synonyms() -> None:
    assert normalize_input("jpg") == "jpeg"
    assert normalize_input(".JPG ") == "jpeg"
    assert normalize_input("htm") == "html"
    assert normalize_input("md") == "markdown"
    assert normalize_input("tex") == "latex"


def test_normalize_input_passes_unknown_tokens_through() -> None:
    assert normalize_input("docx") == "docx"
    assert normalize_input("") == ""


def test_normalize_output_returns_file_extension() -> None:
    assert normalize_output("jpeg") == "jpg"
    assert normalize_output("jpg") == "jpg"
    assert normalize_output("markdown") == "md"
    assert normalize_output("pdf") == "pdf"


def test_extension_of_uses_last_dot() -> None:
    assert extension_of("archive.tar.gz") == "gz"
    assert extension_of("report.docx") == "docx"
    assert extension_of("README") == ""


def test_same_format_ignores_synonyms() -> None:
    assert same_format("jpg", "jpeg")
    assert not same_format("png", "jpeg")


def test_normalizers_accept_arbitrary_strings() -> None:
    for raw in ["", ".", "...", " PDF ", "ünïcode", "a.b.c", "\x00"]:
        assert isinstance(normalize_input(raw), str)
        assert isinstance(normalize_output(raw), str)
