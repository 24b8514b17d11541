"""
行内解析模块 - 代码片段、链接、强调与实体转义

处理顺序固定：
1. 代码片段（内部内容不再参与后续规则）
2. 链接（链接文本递归处理强调）
3. 强调 / 加粗（相同长度的标记就近配对，不检查词边界）
4. 去除转义反斜杠，转义 HTML 实体

所有替换最终按偏移量合并回原文，同一偏移按类型优先级排序。
"""

import re
from collections import defaultdict
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from mdsite.core.config import ConversionConfig
from mdsite.core.highlight import HTML_ESCAPES, escape_html_literal, highlight
from mdsite.core.links import rewrite_link
from mdsite.core.spans import match_brackets, match_spans


class SpanKind(Enum):
    """行内片段类型"""
    CODE = "code"
    LINK = "link"
    EMPHASIS = "em"
    STRONG = "strong"
    ENTITY = "entity"


PRIORITY = {
    SpanKind.CODE: 0,
    SpanKind.LINK: 1,
    SpanKind.EMPHASIS: 2,
    SpanKind.STRONG: 2,
    SpanKind.ENTITY: 3,
}

# 可以被反斜杠转义的标点
ESCAPABLE = set("\\`*_{}[]()#+-.!|<>")

ENTITY_REF_RE = re.compile(r"&(?:#[0-9]+|#[xX][0-9a-fA-F]+|[A-Za-z][A-Za-z0-9]*);")

EMPHASIS_CHARS = "*_"


@dataclass(frozen=True)
class InlineSpan:
    """
    行内片段

    Attributes:
        kind: 片段类型
        start: 起始偏移
        end: 结束偏移（不包含）
        payload: 代码片段和实体为替换文本，链接为 href
        inner: 链接与强调的内部文本范围
    """
    kind: SpanKind
    start: int
    end: int
    payload: str = ""
    inner: tuple[int, int] = (0, 0)


def escape_mask(text: str) -> list[bool]:
    """A character is escaped when an odd run of backslashes precedes it."""
    mask = [False] * len(text)
    run = 0
    for i, ch in enumerate(text):
        mask[i] = run % 2 == 1
        run = run + 1 if ch == "\\" else 0
    return mask


def escape_html(text: str) -> str:
    """
    转义 ``"&<>``，保留已有的实体引用

    Applying it twice gives the same result as applying it once.
    """
    out: list[str] = []
    i = 0
    while i < len(text):
        ch = text[i]
        if ch == "&":
            m = ENTITY_REF_RE.match(text, i)
            if m:
                out.append(m.group(0))
                i = m.end()
                continue
        out.append(HTML_ESCAPES.get(ch, ch))
        i += 1
    return "".join(out)


class InlineProcessor:
    """行内处理器"""

    def __init__(
        self,
        extended: bool = False,
        doc_path: Optional[str] = None,
        config: Optional[ConversionConfig] = None,
    ):
        """
        初始化行内处理器

        Args:
            extended: 是否启用扩展模式（高亮代码片段、改写链接）
            doc_path: 当前文档路径，用于改写相对链接
            config: 转换配置
        """
        self.extended = extended
        self.doc_path = doc_path
        self.config = config or ConversionConfig()

    # ------------------------------------------------------------
    # 解析
    # ------------------------------------------------------------

    def resolve(self, text: str) -> list[InlineSpan]:
        """
        解析行内片段

        Args:
            text: 一个块展开后的文本，行之间以换行符连接

        Returns:
            按起点排序的片段列表
        """
        escaped = escape_mask(text)
        spans = self._code_spans(text, escaped)

        consumed = [False] * len(text)
        for span in spans:
            for k in range(span.start, span.end):
                consumed[k] = True

        links = self._links(text, escaped, consumed)
        spans.extend(links)

        literal = [not c for c in consumed]
        top_level = list(literal)
        for link in links:
            for k in range(link.start, link.end):
                top_level[k] = False
        spans.extend(self._emphasis(text, escaped, top_level))
        # link texts are disjoint, each is scanned on its own
        for link in links:
            spans.extend(self._emphasis(text, escaped, literal, *link.inner))

        for span in spans:
            for k in range(span.start, span.inner[0]):
                consumed[k] = True
            for k in range(span.inner[1], span.end):
                consumed[k] = True
        spans.extend(self._entities(text, escaped, consumed))

        spans.sort(key=lambda s: (s.start, PRIORITY[s.kind]))
        return spans

    def _code_spans(self, text: str, escaped: list[bool]) -> list[InlineSpan]:
        """
        代码片段：相同长度的反引号串两两配对，再做贪心选择

        A run whose first backtick is escaped cannot open a span but can
        still close one, since backslashes are literal inside code.
        """
        runs: dict[int, int] = {}
        i = 0
        while i < len(text):
            if text[i] == "`":
                j = i
                while j < len(text) and text[j] == "`":
                    j += 1
                runs[i] = j - i
                i = j
            else:
                i += 1

        by_length: dict[int, list[int]] = defaultdict(list)
        for start, length in runs.items():
            by_length[length].append(start)

        candidates: list[tuple[int, int]] = []
        for length, starts in by_length.items():
            for a, b in zip(starts, starts[1:]):
                if not escaped[a]:
                    candidates.append((a, b + length - 1))
        candidates.sort()

        accepted = match_spans(
            [a for a, _ in candidates],
            [b for _, b in candidates],
        )

        spans: list[InlineSpan] = []
        for start, last in accepted:
            length = runs[start]
            content = text[start + length:last + 1 - length].replace("\n", " ")
            if len(content) > 1 and content[0] == " " and content[-1] == " " and content.strip():
                content = content[1:-1]
            inner = highlight(content) if self.extended else escape_html_literal(content)
            spans.append(InlineSpan(
                kind=SpanKind.CODE,
                start=start,
                end=last + 1,
                payload=f"<code>{inner}</code>",
                inner=(last + 1, last + 1),
            ))
        return spans

    def _links(self, text: str, escaped: list[bool], consumed: list[bool]) -> list[InlineSpan]:
        """链接：``[文本]`` 紧跟 ``(目标)``，两类括号分别配对"""
        families: dict[str, tuple[list[int], list[bool]]] = {
            "[]": ([], []),
            "()": ([], []),
        }
        for i, ch in enumerate(text):
            if escaped[i] or consumed[i]:
                continue
            for pair, (positions, opening) in families.items():
                if ch in pair:
                    positions.append(i)
                    opening.append(ch == pair[0])

        square = match_brackets(*families["[]"])
        paren_close = dict(match_brackets(*families["()"]))

        links: list[InlineSpan] = []
        last_end = -1
        for open_pos, close_pos in square:
            if open_pos < last_end or close_pos + 1 not in paren_close:
                continue
            end = paren_close[close_pos + 1] + 1
            target = text[close_pos + 2:end - 1].strip()
            if self.extended:
                target = rewrite_link(target, self.doc_path, self.config)
            links.append(InlineSpan(
                kind=SpanKind.LINK,
                start=open_pos,
                end=end,
                payload=target,
                inner=(open_pos + 1, close_pos),
            ))
            last_end = end
        return links

    def _emphasis(
        self,
        text: str,
        escaped: list[bool],
        allowed: list[bool],
        lo: int = 0,
        hi: Optional[int] = None,
    ) -> list[InlineSpan]:
        """
        强调：同字符、同长度的标记串依次两两配对，交叉的配对被丢弃

        Only ``text[lo:hi]`` is scanned. Pairs are visited by start, so the
        accepted pairs still open at a start form a stack, and a pair crosses
        an accepted one exactly when it ends after the top of that stack.
        """
        hi = len(text) if hi is None else hi
        runs: dict[tuple[str, int], list[int]] = defaultdict(list)
        i = lo
        while i < hi:
            ch = text[i]
            if ch in EMPHASIS_CHARS and allowed[i] and not escaped[i]:
                j = i
                while j < hi and text[j] == ch and allowed[j]:
                    j += 1
                if j - i <= 2:
                    runs[(ch, j - i)].append(i)
                i = j
            else:
                i += 1

        pairs: list[tuple[int, int, int]] = []
        for (_, length), starts in runs.items():
            for k in range(0, len(starts) - 1, 2):
                pairs.append((starts[k], starts[k + 1], length))
        pairs.sort()

        accepted: list[tuple[int, int, int]] = []
        open_ends: list[int] = []
        for open_pos, close_pos, length in pairs:
            end = close_pos + length
            while open_ends and open_ends[-1] <= open_pos:
                open_ends.pop()
            if open_ends and end > open_ends[-1]:
                continue
            accepted.append((open_pos, close_pos, length))
            open_ends.append(end)

        return [
            InlineSpan(
                kind=SpanKind.STRONG if length == 2 else SpanKind.EMPHASIS,
                start=open_pos,
                end=close_pos + length,
                inner=(open_pos + length, close_pos),
            )
            for open_pos, close_pos, length in accepted
        ]

    def _entities(self, text: str, escaped: list[bool], consumed: list[bool]) -> list[InlineSpan]:
        """剩余字面文本：去除转义用的反斜杠，转义实体"""
        spans: list[InlineSpan] = []
        for i, ch in enumerate(text):
            if consumed[i]:
                continue
            if ch == "\\" and not escaped[i] and i + 1 < len(text) and text[i + 1] in ESCAPABLE:
                spans.append(InlineSpan(SpanKind.ENTITY, i, i + 1, ""))
            elif ch in HTML_ESCAPES and not (ch == "&" and ENTITY_REF_RE.match(text, i)):
                spans.append(InlineSpan(SpanKind.ENTITY, i, i + 1, HTML_ESCAPES[ch]))
        return spans

    # ------------------------------------------------------------
    # 输出
    # ------------------------------------------------------------

    def render(self, text: str) -> str:
        """
        将行内片段合并回原文，生成 HTML

        Args:
            text: 一个块展开后的文本

        Returns:
            HTML 片段
        """
        insertions: dict[int, list[tuple[int, str]]] = defaultdict(list)
        dropped = [False] * len(text)

        def replace(start: int, end: int, priority: int, html: str) -> None:
            insertions[start].append((priority, html))
            for k in range(start, end):
                dropped[k] = True

        for span in self.resolve(text):
            priority = PRIORITY[span.kind]
            if span.kind in (SpanKind.CODE, SpanKind.ENTITY):
                replace(span.start, span.end, priority, span.payload)
            elif span.kind is SpanKind.LINK:
                href = escape_html(span.payload)
                replace(span.start, span.inner[0], priority, f'<a href="{href}">')
                replace(span.inner[1], span.end, priority, "</a>")
            else:
                tag = span.kind.value
                replace(span.start, span.inner[0], priority, f"<{tag}>")
                replace(span.inner[1], span.end, priority, f"</{tag}>")

        out: list[str] = []
        for i, ch in enumerate(text):
            for _, html in sorted(insertions.get(i, ()), key=lambda p: p[0]):
                out.append(html)
            if not dropped[i]:
                out.append(ch)
        return "".join(out)
