from mdsite.filters import MarkdownFilter


def touch(path, text="# T\n"):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


class TestMarkdownFilter:
    """Source discovery."""

    def test_collects_markdown_only(self, tmp_path):
        touch(tmp_path / "a.md")
        touch(tmp_path / "notes.txt")
        touch(tmp_path / "sub" / "b.md")
        assert MarkdownFilter(tmp_path).collect() == [tmp_path / "a.md", tmp_path / "sub" / "b.md"]

    def test_default_patterns(self, tmp_path):
        touch(tmp_path / "a.md")
        touch(tmp_path / "build" / "c.md")
        touch(tmp_path / "node_modules" / "pkg" / "README.md")
        assert MarkdownFilter(tmp_path).collect() == [tmp_path / "a.md"]

    def test_root_gitignore(self, tmp_path):
        touch(tmp_path / "a.md")
        touch(tmp_path / "draft.md")
        touch(tmp_path / ".gitignore", "draft.md\n")
        assert MarkdownFilter(tmp_path).collect() == [tmp_path / "a.md"]

    def test_nested_gitignore(self, tmp_path):
        touch(tmp_path / "skip.md")
        touch(tmp_path / "sub" / "skip.md")
        touch(tmp_path / "sub" / ".gitignore", "skip.md\n")
        assert MarkdownFilter(tmp_path).collect() == [tmp_path / "skip.md"]

    def test_extra_patterns(self, tmp_path):
        touch(tmp_path / "a.md")
        touch(tmp_path / "private" / "b.md")
        assert MarkdownFilter(tmp_path, ["private/"]).collect() == [tmp_path / "a.md"]
