"""
语法高亮模块 - 将代码字符串切分为带类别的片段

The highlighter never fails: characters it does not know are left
unclassified and come out as plain escaped text.
"""

from dataclasses import dataclass
from typing import Optional

from mdsite.core.spans import match_spans


# ============================================================
# 字符表
# ============================================================

GLYPH_CLASSES: dict[str, str] = {
    "Function": "+-×÷⋆√⌊⌈|¬∧∨<>≠=≤≥≡≢⊣⊢⥊∾≍⋈↑↓↕«»⌽⍉/⍋⍒⊏⊑⊐⊒∊⍷⊔!",
    "Modifier": "˙˜˘¨⌜⁼´˝`",
    "Modifier2": "∘○⊸⟜⌾⊘◶⎉⚇⍟⎊",
    "Gets": "←⇐↩",
    "Paren": "()",
    "Bracket": "⟨⟩[]",
    "Brace": "{}",
    "Ligature": "‿",
    "Nothing": "·",
    "Separator": "⋄,",
}

CHAR_CLASS: dict[str, str] = {
    ch: cls for cls, chars in GLYPH_CLASSES.items() for ch in chars
}

# 标识符与数字字符
NUMBER_START = set("0123456789¯π∞")
IDENTIFIER_CHARS = (
    set("abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ_•.")
    | NUMBER_START
)
SYSTEM_MARKER = "•"
MODIFIER_MARKER = "_"

# 特殊的单字符名称
SPECIAL_NAMES: dict[str, str] = {
    "𝕨": "Value", "𝕩": "Value", "𝕗": "Value", "𝕘": "Value", "𝕤": "Value",
    "𝕎": "Function", "𝕏": "Function", "𝔽": "Function", "𝔾": "Function",
    "𝕊": "Function",
    "𝕣": "Modifier2",
    "@": "String",
}

COMMENT_MARKER = "#"
STRING_QUOTE = '"'
CHAR_QUOTE = "'"

OPEN_BRACKETS = set("([{⟨")
CLOSE_BRACKETS = set(")]}⟩")

HTML_ESCAPES = {"&": "&amp;", "<": "&lt;", ">": "&gt;", '"': "&quot;"}


@dataclass(frozen=True)
class HighlightToken:
    """
    高亮片段

    Attributes:
        cls: 类别名称，``None`` 表示未分类
        start: 起始偏移
        end: 结束偏移（不包含）
    """
    cls: Optional[str]
    start: int
    end: int


def escape_html_literal(text: str) -> str:
    """转义所有 ``"&<>``，不保留实体引用"""
    return "".join(HTML_ESCAPES.get(ch, ch) for ch in text)


def _literal_extents(code: str) -> list[tuple[int, int, str]]:
    """Find comment and string extents, resolving overlaps greedily."""
    starts: list[int] = []
    ends: list[int] = []
    kinds: dict[int, str] = {}
    n = len(code)

    for i, ch in enumerate(code):
        if ch == COMMENT_MARKER:
            end = code.find("\n", i)
            end = (n if end == -1 else end) - 1
            kind = "Comment"
        elif ch == STRING_QUOTE:
            end = code.find(STRING_QUOTE, i + 1)
            if end == -1:
                end = n - 1
            kind = "String"
        elif ch == CHAR_QUOTE:
            # exactly one character between the quotes, which may be a quote
            if i + 2 >= n or code[i + 2] != CHAR_QUOTE:
                continue
            end = i + 2
            kind = "String"
        else:
            continue
        starts.append(i)
        ends.append(max(end, i))
        kinds[i] = kind

    return [(s, e + 1, kinds[s]) for s, e in match_spans(starts, ends)]


def _name_class(run: str) -> Optional[str]:
    """Class of one identifier or number run, decided by its first character."""
    if run in SPECIAL_NAMES:
        return SPECIAL_NAMES[run]
    if run[0] in NUMBER_START:
        return "Number"
    body = run[1:] if run[0] == SYSTEM_MARKER else run
    if not body:
        return "Value"
    if body[0] == MODIFIER_MARKER:
        if len(body) > 1 and body[-1] == MODIFIER_MARKER:
            return "Modifier2"
        return "Modifier"
    if body[0] == ".":
        return None
    if body[0].isupper():
        return "Function"
    return "Value"


def classify(code: str) -> list[Optional[str]]:
    """
    为每个字符计算类别

    Args:
        code: 代码文本

    Returns:
        与 ``code`` 等长的类别列表
    """
    classes: list[Optional[str]] = [CHAR_CLASS.get(ch) for ch in code]
    literal = [False] * len(code)

    for start, end, kind in _literal_extents(code):
        for k in range(start, end):
            classes[k] = kind
            literal[k] = True

    i = 0
    n = len(code)
    while i < n:
        ch = code[i]
        if literal[i]:
            i += 1
            continue
        if ch in SPECIAL_NAMES:
            classes[i] = SPECIAL_NAMES[ch]
            i += 1
            continue
        if ch not in IDENTIFIER_CHARS:
            i += 1
            continue
        j = i
        while j < n and not literal[j] and code[j] in IDENTIFIER_CHARS:
            j += 1
        cls = _name_class(code[i:j])
        for k in range(i, j):
            classes[k] = cls
        i = j

    return classes


def tokenize(code: str) -> list[HighlightToken]:
    """
    将代码切分为互不重叠、覆盖全文的片段

    Adjacent characters of the same class form one token, unclassified text
    included.
    """
    classes = classify(code)
    tokens: list[HighlightToken] = []
    start = 0
    for i in range(1, len(code) + 1):
        if i == len(code) or classes[i] != classes[start]:
            tokens.append(HighlightToken(classes[start], start, i))
            start = i
    return tokens


def highlight(code: str) -> str:
    """
    生成高亮 HTML

    Args:
        code: 代码文本

    Returns:
        转义后的 HTML，已分类的片段包在 ``<span class="...">`` 中
    """
    parts: list[str] = []
    for token in tokenize(code):
        text = escape_html_literal(code[token.start:token.end])
        if token.cls is None:
            parts.append(text)
        else:
            parts.append(f'<span class="{token.cls}">{text}</span>')
    return "".join(parts)


def bracket_depths(code: str, classes: Optional[list[Optional[str]]] = None) -> list[int]:
    """
    每个字符处的括号嵌套深度

    Brackets inside strings and comments do not count. The depth at a
    closing bracket is the depth after it closes.
    """
    if classes is None:
        classes = classify(code)
    depths: list[int] = []
    depth = 0
    for ch, cls in zip(code, classes):
        if cls not in ("String", "Comment"):
            if ch in OPEN_BRACKETS:
                depth += 1
            elif ch in CLOSE_BRACKETS:
                depth -= 1
        depths.append(depth)
    return depths


def identifier_runs(code: str, classes: Optional[list[Optional[str]]] = None) -> list[HighlightToken]:
    """
    代码中的名称

    Returns one token per identifier run outside strings and comments,
    numbers excluded.
    """
    if classes is None:
        classes = classify(code)
    runs: list[HighlightToken] = []
    i = 0
    n = len(code)
    while i < n:
        if code[i] not in IDENTIFIER_CHARS or classes[i] in ("String", "Comment"):
            i += 1
            continue
        j = i
        while j < n and code[j] in IDENTIFIER_CHARS and classes[j] not in ("String", "Comment"):
            j += 1
        if classes[i] not in (None, "Number"):
            runs.append(HighlightToken(classes[i], i, j))
        i = j
    return runs
