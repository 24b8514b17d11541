from mdsite.core.blocks import (
    BlockType,
    assemble,
    classify_line,
    has_unescaped_bar,
    is_delimiter_row,
    split_row,
)


def kinds(blocks):
    return [b.kind for b in blocks]


class TestClassifyLine:
    """Line classification."""

    def test_blank(self):
        assert classify_line("") == (BlockType.BLANK, 0)

    def test_heading_levels(self):
        assert classify_line("## Title") == (BlockType.HEADING, 2)
        assert classify_line("#") == (BlockType.HEADING, 1)

    def test_heading_needs_space(self):
        assert classify_line("#Title")[0] is BlockType.PARAGRAPH
        assert classify_line("####### seven")[0] is BlockType.PARAGRAPH

    def test_list_marker_width(self):
        assert classify_line("- item") == (BlockType.LIST, 2)
        assert classify_line("*   item") == (BlockType.LIST, 4)

    def test_not_a_list(self):
        assert classify_line("-      too far")[0] is BlockType.PARAGRAPH
        assert classify_line("*emph*")[0] is BlockType.PARAGRAPH
        assert classify_line("-")[0] is BlockType.PARAGRAPH

    def test_html(self):
        assert classify_line("<div>") == (BlockType.HTML, 0)
        assert classify_line("<!-- note") == (BlockType.HTML, 1)


class TestTableRows:
    """Table row helpers."""

    def test_split_row_drops_outer_bars(self):
        assert split_row("| a | b |") == ["a", "b"]

    def test_split_row_keeps_escaped_bar(self):
        assert split_row("a \\| b | c") == ["a \\| b", "c"]

    def test_has_unescaped_bar(self):
        assert has_unescaped_bar("a | b")
        assert has_unescaped_bar("1|")
        assert not has_unescaped_bar("a \\| b")

    def test_delimiter_row(self):
        assert is_delimiter_row("---|:-:", 2)
        assert not is_delimiter_row("---|---", 3)
        assert not is_delimiter_row("a|b", 2)


class TestAssemble:
    """Block assembly."""

    def test_mixed_document(self):
        blocks = assemble(["# T", "para one", "para two", "", "    code", "", "    more"])
        assert kinds(blocks) == [BlockType.HEADING, BlockType.PARAGRAPH, BlockType.CODE]
        assert blocks[1].text_lines == ["para one", "para two"]
        assert blocks[2].lines == (("code", 4), ("", 0), ("more", 4))

    def test_code_drops_trailing_blank_lines(self):
        blocks = assemble(["    a", "", "b"])
        assert kinds(blocks) == [BlockType.CODE, BlockType.PARAGRAPH]
        assert blocks[0].text_lines == ["a"]

    def test_code_keeps_extra_indentation(self):
        blocks = assemble(["        live"])
        assert blocks[0].lines == (("    live", 8),)

    def test_paragraph_swallows_indented_lines(self):
        blocks = assemble(["text", "    indented"])
        assert kinds(blocks) == [BlockType.PARAGRAPH]
        assert blocks[0].text_lines == ["text", "indented"]

    def test_heading_interrupts_paragraph(self):
        blocks = assemble(["text", "## H"])
        assert kinds(blocks) == [BlockType.PARAGRAPH, BlockType.HEADING]
        assert blocks[1].lines == (("## H", 2),)

    def test_table(self):
        blocks = assemble(["A | B", "---|---", "1 | 2", "after"])
        assert kinds(blocks) == [BlockType.TABLE, BlockType.PARAGRAPH]
        assert blocks[0].text_lines == ["A | B", "---|---", "1 | 2"]
        assert blocks[1].text_lines == ["after"]

    def test_table_after_paragraph_text(self):
        blocks = assemble(["intro", "A | B", "--- | ---", "1 | 2"])
        assert kinds(blocks) == [BlockType.PARAGRAPH, BlockType.TABLE]

    def test_mismatched_delimiter_is_paragraph(self):
        blocks = assemble(["A | B | C", "---|---"])
        assert kinds(blocks) == [BlockType.PARAGRAPH]

    def test_nested_list_is_one_block(self):
        blocks = assemble(["- a", "  - b", "- c"])
        assert kinds(blocks) == [BlockType.LIST]
        assert blocks[0].text_lines == ["- a", "  - b", "- c"]

    def test_blank_line_ends_list(self):
        blocks = assemble(["- a", "", "- b"])
        assert kinds(blocks) == [BlockType.LIST, BlockType.LIST]

    def test_unindented_text_ends_list(self):
        blocks = assemble(["- a", "text"])
        assert kinds(blocks) == [BlockType.LIST, BlockType.PARAGRAPH]

    def test_comment_absorbs_lines(self):
        blocks = assemble(["<!--GEN", "# not heading", "", "-->", "after"])
        assert kinds(blocks) == [BlockType.HTML, BlockType.PARAGRAPH]
        assert len(blocks[0].lines) == 4

    def test_single_line_comment(self):
        blocks = assemble(["<!-- x -->", "text"])
        assert kinds(blocks) == [BlockType.HTML, BlockType.PARAGRAPH]

    def test_unclosed_comment_runs_to_end(self):
        blocks = assemble(["<!--", "a", "", "# b"])
        assert kinds(blocks) == [BlockType.HTML]

    def test_html_runs_until_blank(self):
        blocks = assemble(["<div>", "x", "", "y"])
        assert kinds(blocks) == [BlockType.HTML, BlockType.PARAGRAPH]
        assert blocks[0].text_lines == ["<div>", "x"]

    def test_block_start_lines(self):
        blocks = assemble(["", "# T", "", "text"])
        assert [b.start for b in blocks] == [1, 3]
