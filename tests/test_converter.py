import pytest

from mdsite.core import (
    ConversionConfig,
    ConversionError,
    Document,
    convert,
    convert_document,
    convert_file,
    html_path,
)

BOILERPLATE = (
    "*View this file [with results and syntax highlighting]"
    "(https://mlochbaum.github.io/BQN/{}).*"
)


class TestHtmlPath:
    """Output file names."""

    def test_markdown(self):
        assert html_path("doc/a.md") == "doc/a.html"

    def test_readme_becomes_index(self):
        assert html_path("README.md") == "index.html"
        assert html_path("doc/README.md") == "doc/index.html"


class TestPreconditions:
    """Extended-mode checks."""

    def test_wrong_extension(self):
        with pytest.raises(ConversionError, match=r"\.md"):
            convert(["# T"], "a.txt")

    def test_boilerplate_accepted_and_dropped(self):
        lines = [BOILERPLATE.format("doc/a.html"), "", "# T"]
        html = convert(lines, "doc/a.md")
        assert "View this file" not in html
        assert html.startswith('<h1 id="t">')

    def test_readme_boilerplate_points_to_index(self):
        lines = [BOILERPLATE.format("doc/index.html"), "# T"]
        assert '<h1 id="t">' in convert(lines, "doc/README.md")

    def test_missing_boilerplate(self):
        with pytest.raises(ConversionError, match="boilerplate"):
            convert(["# T"], "a.md")

    def test_empty_document_has_no_boilerplate(self):
        with pytest.raises(ConversionError):
            convert([], "a.md")

    def test_boilerplate_with_wrong_url(self):
        with pytest.raises(ConversionError):
            convert([BOILERPLATE.format("other.html"), "# T"], "a.md")

    def test_custom_site_url(self):
        config = ConversionConfig(site_url="https://example.org/")
        line = "*View this file [with results and syntax highlighting](https://example.org/a.html).*"
        assert "<h1" in convert([line, "# T"], "a.md", config)

    def test_boilerplate_check_disabled(self):
        config = ConversionConfig(require_boilerplate=False)
        assert "<h1" in convert(["# T"], "a.md", config)

    @pytest.mark.parametrize("lines", [
        ["# A", "# B"],
        ["## Only a subheading"],
        ["text"],
    ])
    def test_needs_exactly_one_title(self, lines):
        config = ConversionConfig(require_boilerplate=False)
        with pytest.raises(ConversionError, match="top-level heading"):
            convert(lines, "a.md", config)

    def test_simplified_mode_skips_checks(self):
        assert convert(["# A", "# B"]) == "<h1>A</h1>\n<h1>B</h1>\n"

    def test_document_mode(self):
        assert not Document(("x",)).extended
        assert Document(("x",), "a.md").extended
        assert convert_document(Document(("x",))) == "<p>x</p>\n"


class TestConvertFile:
    """Reading documents from disk."""

    def test_extended(self, tmp_path):
        doc = tmp_path / "doc"
        doc.mkdir()
        source = doc / "a.md"
        source.write_text("# Title\n\nSee [b](b.md).\n", encoding="utf-8")
        config = ConversionConfig(require_boilerplate=False)
        html = convert_file(source, tmp_path, config=config)
        assert '<h1 id="title">' in html
        assert '<a href="b.html">b</a>' in html

    def test_simple(self, tmp_path):
        source = tmp_path / "a.md"
        source.write_text("# Title\n", encoding="utf-8")
        assert convert_file(source, tmp_path, simple=True) == "<h1>Title</h1>\n"

    def test_invalid_utf8_is_a_conversion_error(self, tmp_path):
        source = tmp_path / "a.md"
        source.write_bytes(b"\xff\xfe# T\n")
        with pytest.raises(ConversionError, match="UTF-8"):
            convert_file(source, tmp_path, simple=True)

    def test_generation_reads_relative_to_document(self, tmp_path):
        doc = tmp_path / "doc"
        doc.mkdir()
        (doc / "data.txt").write_text("one\ntwo\n", encoding="utf-8")
        source = doc / "a.md"
        source.write_text("# T\n\n<!--GEN data.txt-->\n", encoding="utf-8")

        class Echo:
            def generate(self, body, location):
                return f"<pre>{body}|{location}</pre>"

        config = ConversionConfig(require_boilerplate=False)
        html = convert_file(source, tmp_path, config=config, generator=Echo())
        assert "<pre>one\ntwo|doc/a.md</pre>" in html
