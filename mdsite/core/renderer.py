"""
块渲染模块 - 每种块类型对应一个转换函数

The renderer is created once per document. Extended mode (a document path
is known) adds heading anchors, syntax highlighting, link rewriting, live
code execution and generation comments.
"""

import base64
import html
import logging
import posixpath
import re
import textwrap
from typing import Callable, Optional, Protocol
from urllib.parse import quote

from mdsite.core.blocks import (
    COMMENT_CLOSE,
    COMMENT_OPEN,
    LIST_ITEM_RE,
    Block,
    BlockType,
    assemble,
    leading_blanks,
    split_row,
)
from mdsite.core.config import ConversionConfig
from mdsite.core.highlight import (
    GLYPH_CLASSES,
    SYSTEM_MARKER,
    bracket_depths,
    classify,
    escape_html_literal,
    highlight,
    identifier_runs,
)
from mdsite.core.inline import InlineProcessor, escape_html
from mdsite.sandbox.executor import CodeExecutor, ExecutionError
from mdsite.sandbox.generator import GenerationError, PageGenerator

logger = logging.getLogger(__name__)


LIVE_INDENT = 8
GENERATION_PREFIX = "GEN"

CLOSING_HASHES_RE = re.compile(r"(?:^| +)#+$")
SLUG_CHARS = set("abcdefghijklmnopqrstuvwxyz0123456789-")
CODE_TAG_RE = re.compile(r"<code>(.*?)</code>", re.DOTALL)


class FileAccess(Protocol):
    """文件读取协议"""

    def read_lines(self, path: str) -> list[str]:
        """Return the lines of ``path`` without terminators."""
        ...


def heading_slug(text: str) -> str:
    """
    生成标题锚点

    规则：转换为小写，空格变为连字符，只保留 ASCII 字母、数字和连字符。
    重复的锚点不做区分。

    Args:
        text: 标题文本

    Returns:
        锚点 ID
    """
    return "".join(ch for ch in text.lower().replace(" ", "-") if ch in SLUG_CHARS)


def _alignment(cell: str) -> Optional[str]:
    left, right = cell.startswith(":"), cell.endswith(":")
    if left and right:
        return "center"
    if right:
        return "right"
    if left:
        return "left"
    return None


def _normalize_name(name: str) -> str:
    """Names match regardless of case and underscores."""
    return name.replace("_", "").lower()


class BlockRenderer:
    """块渲染器"""

    def __init__(
        self,
        extended: bool = False,
        doc_path: Optional[str] = None,
        config: Optional[ConversionConfig] = None,
        executor: Optional[CodeExecutor] = None,
        generator: Optional[PageGenerator] = None,
        file_access: Optional[FileAccess] = None,
    ):
        """
        初始化渲染器

        Args:
            extended: 是否启用扩展模式
            doc_path: 文档相对于站点根目录的路径
            config: 转换配置
            executor: 实时代码块的执行器
            generator: 生成注释的 HTML 生成器
            file_access: 读取生成注释引用的文件
        """
        self.extended = extended
        self.doc_path = doc_path
        self.config = config or ConversionConfig()
        self.executor = executor
        self.generator = generator
        self.file_access = file_access
        self.inline = InlineProcessor(extended, doc_path, self.config)

        self._handlers: dict[BlockType, Callable[[Block], str]] = {
            BlockType.PARAGRAPH: self.render_paragraph,
            BlockType.HEADING: self.render_heading,
            BlockType.CODE: self.render_code,
            BlockType.LIST: self.render_list,
            BlockType.TABLE: self.render_table,
            BlockType.HTML: self.render_html,
        }

    def render_blocks(self, blocks: list[Block]) -> str:
        """渲染所有块，每个块后跟一个换行"""
        return "".join(self.render(block) + "\n" for block in blocks)

    def render(self, block: Block) -> str:
        return self._handlers[block.kind](block)

    # ------------------------------------------------------------
    # 段落与标题
    # ------------------------------------------------------------

    def render_paragraph(self, block: Block) -> str:
        text = "\n".join(line.rstrip(" ") for line in block.text_lines)
        return f"<p>{self.inline.render(text)}</p>"

    def render_heading(self, block: Block) -> str:
        line, level = block.lines[0]
        text = CLOSING_HASHES_RE.sub("", line[level:].strip(" ")).strip(" ")
        content = self.inline.render(text)
        if not self.extended:
            return f"<h{level}>{content}</h{level}>"
        slug = heading_slug(text)
        return (
            f'<h{level} id="{slug}">'
            f'<a class="header" href="#{slug}">{content}</a>'
            f"</h{level}>"
        )

    # ------------------------------------------------------------
    # 代码块
    # ------------------------------------------------------------

    def render_code(self, block: Block) -> str:
        code = "\n".join(block.text_lines)
        if not self.extended:
            return f"<pre><code>{escape_html_literal(code)}</code></pre>"

        live = all(indent >= LIVE_INDENT for line, indent in block.lines if line.strip())
        if live and self.executor is not None:
            return f"<pre>{self._render_live(code)}</pre>"
        if live:
            logger.debug("No executor configured, showing live block at line %d as code", block.start)
        return f"<pre>{highlight(code)}</pre>"

    def _render_live(self, code: str) -> str:
        """
        执行实时代码块

        Statements are the top-level lines of the block (a newline inside
        brackets or a string continues the statement). Each statement's REPL link and
        executor input carry the earlier statements defining names it uses.
        """
        classes = classify(code)
        depths = bracket_depths(code, classes)

        bounds: list[tuple[int, int]] = []
        start = 0
        for i, ch in enumerate(code):
            if ch == "\n" and depths[i] <= 0 and classes[i] != "String":
                bounds.append((start, i))
                start = i + 1
        bounds.append((start, len(code)))

        sources = [code[s:e] for s, e in bounds]
        defined: dict[str, int] = {}
        needs: list[set[int]] = []
        parts: list[str] = []

        for index, source in enumerate(sources):
            used, assigned, executable = self._scan_statement(source)
            deps: set[int] = set()
            for name in used:
                if name in defined:
                    deps.add(defined[name])
                    deps |= needs[defined[name]]
            needs.append(deps)
            for name in assigned:
                defined[name] = index

            if not executable:
                parts.append(highlight(source))
                continue

            program = "\n".join(
                textwrap.dedent(sources[j]).strip("\n") for j in [*sorted(deps), index]
            )
            parts.append(self._repl_link(program) + highlight(source) + self._result(program))

        return "\n".join(parts)

    def _scan_statement(self, source: str) -> tuple[set[str], list[str], bool]:
        """Names used, names assigned, and whether anything is left to run."""
        classes = classify(source)
        used: set[str] = set()
        assigned: list[str] = []
        for run in identifier_runs(source, classes):
            text = source[run.start:run.end]
            if text.startswith(SYSTEM_MARKER):
                continue
            rest = source[run.end:].lstrip(" ")
            if rest[:1] and rest[0] in GLYPH_CLASSES["Gets"]:
                assigned.append(_normalize_name(text))
            else:
                used.add(_normalize_name(text))
        executable = any(
            not ch.isspace() and cls != "Comment" for ch, cls in zip(source, classes)
        )
        return used, assigned, executable

    def _repl_link(self, program: str) -> str:
        encoded = quote(base64.b64encode(program.encode("utf-8")).decode("ascii"), safe="")
        href = f"{self.config.repl_page}#code={encoded}"
        return (
            f'<a class="replLink" title="Open in the REPL" target="_blank" '
            f'href="{escape_html(href)}">↗️</a>'
        )

    def _result(self, program: str) -> str:
        try:
            result = self.executor.execute(program)
        except ExecutionError as e:
            logger.warning("Statement failed: %s", e)
            return f'\n<span class="Error">Error: {escape_html_literal(str(e))}</span>'
        if not result:
            return ""
        return "\n" + escape_html_literal(result)

    # ------------------------------------------------------------
    # 列表
    # ------------------------------------------------------------

    def render_list(self, block: Block) -> str:
        items: list[tuple[str, int, list[str]]] = []
        for line, data in block.lines:
            if leading_blanks(line) == 0 and LIST_ITEM_RE.match(line):
                items.append((line, data, []))
            else:
                items[-1][2].append(line)

        out = ["<ul>"]
        for first, width, rest in items:
            out.append(f"<li>{self._render_item(first, width, rest)}</li>")
        out.append("</ul>")
        return "\n".join(out)

    def _render_item(self, first: str, width: int, rest: list[str]) -> str:
        """
        渲染一个列表项

        Continuation lines lose the item's marker width. Once one of them is
        itself a list marker, it and everything after it are assembled again
        and rendered as nested blocks after the item's own text.
        """
        body = [first[width:]]
        body.extend(line[min(width, leading_blanks(line)):] for line in rest)

        split = len(body)
        for k in range(1, len(body)):
            if leading_blanks(body[k]) < 4 and LIST_ITEM_RE.match(body[k].lstrip(" ")):
                split = k
                break

        text = "\n".join(line.strip(" ") for line in body[:split])
        content = self.inline.render(text)
        if split < len(body):
            nested = assemble(body[split:])
            content += "\n" + "\n".join(self.render(b) for b in nested)
        return content

    # ------------------------------------------------------------
    # 表格
    # ------------------------------------------------------------

    def render_table(self, block: Block) -> str:
        rows = [split_row(line) for line in block.text_lines]
        header, delimiter, body = rows[0], rows[1], rows[2:]
        aligns = [_alignment(cell) for cell in delimiter]
        columns = len(header)

        out = ["<table>", "<thead>", self._row("th", header, aligns), "</thead>"]
        if body:
            out.append("<tbody>")
            for row in body:
                cells = (row + [""] * columns)[:columns]
                out.append(self._row("td", cells, aligns))
            out.append("</tbody>")
        out.append("</table>")
        return "\n".join(out)

    def _row(self, tag: str, cells: list[str], aligns: list[Optional[str]]) -> str:
        out = ["<tr>"]
        for cell, align in zip(cells, aligns):
            attr = f' align="{align}"' if align else ""
            out.append(f"<{tag}{attr}>{self.inline.render(cell)}</{tag}>")
        out.append("</tr>")
        return "\n".join(out)

    # ------------------------------------------------------------
    # HTML 块
    # ------------------------------------------------------------

    def render_html(self, block: Block) -> str:
        text = "\n".join(block.text_lines)
        if not self.extended:
            return text

        if block.lines[0][1]:
            start = text.find(COMMENT_OPEN) + len(COMMENT_OPEN)
            end = text.find(COMMENT_CLOSE, start)
            body = text[start:] if end == -1 else text[start:end]
            if body.startswith(GENERATION_PREFIX):
                return self._generate(body[len(GENERATION_PREFIX):], text)
            return text

        return CODE_TAG_RE.sub(
            lambda m: "<code>" + highlight(html.unescape(m.group(1))) + "</code>",
            text,
        )

    def _generate(self, directive: str, original: str) -> str:
        """
        处理生成注释

        The rest of the directive's first line, when present, names a file
        relative to the document whose lines go in front of the remaining
        body.
        """
        if self.generator is None:
            logger.warning("No generator configured, keeping generation comment in %s", self.doc_path)
            return original

        first, _, remainder = directive.partition("\n")
        lines = remainder.split("\n") if remainder else []
        reference = first.strip()
        if reference:
            if self.file_access is None:
                raise GenerationError(f"Cannot read {reference}: no file access configured")
            target = posixpath.join(posixpath.dirname(self.doc_path or ""), reference)
            try:
                lines = self.file_access.read_lines(target) + lines
            except (OSError, UnicodeDecodeError) as e:
                raise GenerationError(f"Cannot read {reference}: {e}") from e

        return self.generator.generate("\n".join(lines), self.doc_path or "")
