"""
Core Layer - 核心层

包含区间匹配、语法高亮、块解析、行内解析、块渲染和文档转换。
"""

from mdsite.core.spans import match_spans, match_brackets
from mdsite.core.highlight import HighlightToken, classify, tokenize, highlight
from mdsite.core.blocks import Block, BlockType, assemble, classify_line
from mdsite.core.inline import InlineProcessor, InlineSpan, SpanKind, escape_html
from mdsite.core.links import rewrite_link
from mdsite.core.config import ConversionConfig
from mdsite.core.renderer import BlockRenderer, FileAccess, heading_slug
from mdsite.core.converter import (
    ConversionError,
    Document,
    LocalFileAccess,
    convert,
    convert_document,
    convert_file,
    html_path,
)

__all__ = [
    # spans
    "match_spans",
    "match_brackets",
    # highlight
    "HighlightToken",
    "classify",
    "tokenize",
    "highlight",
    # blocks
    "Block",
    "BlockType",
    "assemble",
    "classify_line",
    # inline
    "InlineProcessor",
    "InlineSpan",
    "SpanKind",
    "escape_html",
    "rewrite_link",
    # render
    "ConversionConfig",
    "BlockRenderer",
    "FileAccess",
    "heading_slug",
    # converter
    "ConversionError",
    "Document",
    "LocalFileAccess",
    "convert",
    "convert_document",
    "convert_file",
    "html_path",
]
