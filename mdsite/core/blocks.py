"""
块解析模块 - 行分类与块组装

文档先逐行分类，然后按延续规则组装为块：
1. 标题永远单独成块
2. 缩进 4 个空格以上的行组成代码块
3. 段落后接分隔行时识别为表格
4. 列表项及其缩进的延续行组成列表块
5. HTML 注释块一直延伸到结束标记
"""

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Sequence

logger = logging.getLogger(__name__)


class BlockType(Enum):
    """块类型"""
    BLANK = "blank"
    PARAGRAPH = "paragraph"
    HEADING = "heading"
    LIST = "list"
    HTML = "html"
    CODE = "code"
    TABLE = "table"


COMMENT_OPEN = "<!--"
COMMENT_CLOSE = "-->"

CODE_INDENT = 4

HEADING_RE = re.compile(r"(#{1,6})(?: |$)")
LIST_ITEM_RE = re.compile(r"[-+*]( {1,4})(?=\S)")
DELIMITER_CELL_RE = re.compile(r" *:?-+:? *")


@dataclass(frozen=True)
class Block:
    """
    文档块

    Attributes:
        kind: 块类型
        lines: ``(line, data)`` 元组，行已去除该类型应去除的缩进
        start: 块首行在文档中的行号（从 0 开始）
    """
    kind: BlockType
    lines: tuple[tuple[str, int], ...]
    start: int

    @property
    def text_lines(self) -> list[str]:
        return [line for line, _ in self.lines]


# ============================================================
# 行分类
# ============================================================

def leading_blanks(line: str) -> int:
    """Number of leading spaces in ``line``."""
    return len(line) - len(line.lstrip(" "))


def classify_line(text: str) -> tuple[BlockType, int]:
    """
    对一行进行分类

    Args:
        text: 去除前导空格后的行内容（缩进由调用方另行记录）

    Returns:
        ``(块类型, 附加数据)``；数据为标题级别、列表标记宽度或注释标志
    """
    if not text:
        return BlockType.BLANK, 0

    m = HEADING_RE.match(text)
    if m:
        return BlockType.HEADING, len(m.group(1))

    m = LIST_ITEM_RE.match(text)
    if m:
        return BlockType.LIST, 1 + len(m.group(1))

    if text.startswith("<"):
        return BlockType.HTML, int(text.startswith(COMMENT_OPEN))

    return BlockType.PARAGRAPH, 0


# ============================================================
# 表格行
# ============================================================

def split_row(row: str) -> list[str]:
    """
    按未转义的 ``|`` 切分表格行

    Optional leading and trailing bars are dropped. Cells are returned
    without surrounding spaces; escaped bars stay escaped.
    """
    row = row.strip()
    cells: list[str] = []
    current: list[str] = []
    backslashes = 0
    for ch in row:
        if ch == "|" and backslashes % 2 == 0:
            cells.append("".join(current))
            current = []
        else:
            current.append(ch)
        backslashes = backslashes + 1 if ch == "\\" else 0
    cells.append("".join(current))

    if len(cells) > 1 and not cells[0].strip():
        cells = cells[1:]
    if len(cells) > 1 and not cells[-1].strip():
        cells = cells[:-1]
    return [cell.strip() for cell in cells]


def has_unescaped_bar(line: str) -> bool:
    return len(split_row("x" + line + "x")) > 1


def is_delimiter_row(line: str, columns: int) -> bool:
    """判断是否为表格分隔行，且列数与表头一致"""
    if not line.strip() or set(line.strip()) - set("-:| "):
        return False
    cells = split_row(line)
    return len(cells) == columns and all(
        DELIMITER_CELL_RE.fullmatch(cell) for cell in cells
    )


# ============================================================
# 块组装
# ============================================================

class _Line:
    __slots__ = ("raw", "text", "indent", "kind", "data")

    def __init__(self, raw: str):
        self.raw = raw
        self.indent = leading_blanks(raw)
        self.text = raw[self.indent:]
        self.kind, self.data = classify_line(self.text)

    @property
    def blank(self) -> bool:
        return self.kind is BlockType.BLANK


def assemble(lines: Sequence[str]) -> list[Block]:
    """
    将行组装为块

    Args:
        lines: 文档的行（不含换行符）

    Returns:
        按文档顺序排列的块列表；空行不产生块
    """
    info = [_Line(line) for line in lines]
    blocks: list[Block] = []
    n = len(info)
    i = 0
    while i < n:
        line = info[i]

        if line.blank:
            i += 1
            continue

        if line.indent >= CODE_INDENT:
            j = _code_end(info, i)
            blocks.append(Block(
                kind=BlockType.CODE,
                lines=tuple(
                    (info[k].raw[CODE_INDENT:], info[k].indent) for k in range(i, j)
                ),
                start=i,
            ))
        elif line.kind is BlockType.HTML and line.data:
            j = _comment_end(info, i)
            blocks.append(Block(
                kind=BlockType.HTML,
                lines=tuple((info[k].raw, 1) for k in range(i, j)),
                start=i,
            ))
        elif line.kind is BlockType.HEADING:
            j = i + 1
            blocks.append(Block(BlockType.HEADING, ((line.text, line.data),), i))
        elif line.kind is BlockType.LIST:
            j = _list_end(info, i)
            blocks.append(Block(
                kind=BlockType.LIST,
                lines=tuple(
                    (info[k].raw[line.indent:], info[k].data) for k in range(i, j)
                ),
                start=i,
            ))
        elif line.kind is BlockType.HTML:
            j = i + 1
            while j < n and not info[j].blank:
                j += 1
            blocks.append(Block(
                kind=BlockType.HTML,
                lines=tuple((info[k].raw, 0) for k in range(i, j)),
                start=i,
            ))
        else:
            j = _paragraph_end(info, i)
            blocks.extend(_split_tables(info, i, j))

        logger.debug("Block %s at lines %d-%d", blocks[-1].kind.value, i, j - 1)
        i = j

    return blocks


def _comment_end(info: list["_Line"], i: int) -> int:
    """Index after the line holding the comment's closing token."""
    first = info[i].raw
    offset = first.find(COMMENT_OPEN) + len(COMMENT_OPEN)
    if COMMENT_CLOSE in first[offset:]:
        return i + 1
    for j in range(i + 1, len(info)):
        if COMMENT_CLOSE in info[j].raw:
            return j + 1
    return len(info)


def _code_end(info: list["_Line"], i: int) -> int:
    """Code runs may hold blank lines only between two code lines."""
    j = i
    last_code = i
    while j < len(info) and (info[j].blank or info[j].indent >= CODE_INDENT):
        if not info[j].blank:
            last_code = j
        j += 1
    return last_code + 1


def _list_end(info: list["_Line"], i: int) -> int:
    indent = info[i].indent
    width = info[i].data
    j = i + 1
    while j < len(info):
        line = info[j]
        if line.blank:
            break
        sibling = line.kind is BlockType.LIST and line.indent == indent
        if not sibling and line.indent < indent + width:
            break
        j += 1
    return j


def _paragraph_end(info: list["_Line"], i: int) -> int:
    """A paragraph swallows indented lines, so code never touches it."""
    j = i + 1
    while j < len(info):
        line = info[j]
        if line.blank:
            break
        if line.indent < CODE_INDENT and line.kind is not BlockType.PARAGRAPH:
            break
        j += 1
    return j


def _split_tables(info: list["_Line"], i: int, j: int) -> list[Block]:
    """
    在段落中识别表格

    A row followed by a matching delimiter row starts a table, which then
    takes every following line with an unescaped bar.
    """
    blocks: list[Block] = []
    start = i
    k = i
    while k + 1 < j:
        header = info[k].text
        columns = len(split_row(header))
        if has_unescaped_bar(header) and is_delimiter_row(info[k + 1].text, columns):
            if k > start:
                blocks.append(_paragraph(info, start, k))
            end = k + 2
            while end < j and has_unescaped_bar(info[end].text):
                end += 1
            blocks.append(Block(
                kind=BlockType.TABLE,
                lines=tuple((info[m].text, m - k) for m in range(k, end)),
                start=k,
            ))
            start = k = end
            continue
        k += 1
    if start < j:
        blocks.append(_paragraph(info, start, j))
    return blocks


def _paragraph(info: list["_Line"], i: int, j: int) -> Block:
    return Block(
        kind=BlockType.PARAGRAPH,
        lines=tuple((info[k].text, 0) for k in range(i, j)),
        start=i,
    )
