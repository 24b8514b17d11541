"""
文档转换模块 - 检查前置条件并将一个 Markdown 文档转换为 HTML 片段

Without a path the document is converted in simplified mode. With a path
(relative to the site root) extended mode is on, and the document must pass
three checks before anything is rendered:
1. The file name ends in ``.md``
2. The first line is the boilerplate link to the rendered page
3. There is exactly one level-1 heading
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence

from mdsite.core.blocks import BlockType, assemble
from mdsite.core.config import ConversionConfig
from mdsite.core.renderer import BlockRenderer, FileAccess
from mdsite.sandbox.executor import CodeExecutor
from mdsite.sandbox.generator import GenerationError, PageGenerator

logger = logging.getLogger(__name__)


class ConversionError(ValueError):
    """A document failed a precondition and was not converted."""


@dataclass(frozen=True)
class Document:
    """
    待转换文档

    Attributes:
        lines: 文档的行（不含换行符）
        path: 相对于站点根目录的路径；为 None 时使用简化模式
    """
    lines: tuple[str, ...]
    path: Optional[str] = None

    @property
    def extended(self) -> bool:
        return self.path is not None


class LocalFileAccess:
    """Read files below a root directory."""

    def __init__(self, root: Path):
        self.root = root

    def read_lines(self, path: str) -> list[str]:
        return (self.root / path).read_text(encoding="utf-8").splitlines()


def html_path(path: str) -> str:
    """
    输出文件的路径

    ``README.md`` becomes ``index.html``; any other ``.md`` file keeps its
    name with an ``.html`` extension.
    """
    directory, _, name = path.rpartition("/")
    prefix = directory + "/" if directory else ""
    if name == "README.md":
        return prefix + "index.html"
    stem = name[:-len(".md")] if name.endswith(".md") else name
    return prefix + stem + ".html"


def _check_document(document: Document, config: ConversionConfig) -> list[str]:
    """Validate an extended-mode document and return the lines to render."""
    path = document.path or ""
    lines = list(document.lines)

    if not path.endswith(".md"):
        raise ConversionError(f"Expected a .md file, got {path}")

    if config.require_boilerplate:
        expected = config.boilerplate.format(url=config.site_url + html_path(path))
        if not lines:
            raise ConversionError(f"{path}: missing boilerplate line, expected {expected!r}")
        if lines[0] != expected:
            raise ConversionError(
                f"{path}: malformed boilerplate line {lines[0]!r}, expected {expected!r}"
            )
        lines = lines[1:]

    return lines


def convert_document(
    document: Document,
    config: Optional[ConversionConfig] = None,
    executor: Optional[CodeExecutor] = None,
    generator: Optional[PageGenerator] = None,
    file_access: Optional[FileAccess] = None,
) -> str:
    """
    转换文档

    Args:
        document: 待转换文档
        config: 转换配置
        executor: 实时代码块执行器（仅扩展模式）
        generator: 生成注释的生成器（仅扩展模式）
        file_access: 读取生成注释引用的文件

    Returns:
        HTML 片段

    Raises:
        ConversionError: 文档不满足前置条件，或生成注释失败
    """
    config = config or ConversionConfig()
    lines = list(document.lines)
    if document.extended:
        lines = _check_document(document, config)

    blocks = assemble(lines)

    if document.extended and config.check_headings:
        titles = sum(
            1 for block in blocks
            if block.kind is BlockType.HEADING and block.lines[0][1] == 1
        )
        if titles != 1:
            raise ConversionError(
                f"{document.path}: expected exactly one top-level heading, found {titles}"
            )

    logger.debug("Rendering %d blocks from %s", len(blocks), document.path or "<text>")
    renderer = BlockRenderer(
        extended=document.extended,
        doc_path=document.path,
        config=config,
        executor=executor,
        generator=generator,
        file_access=file_access,
    )
    try:
        return renderer.render_blocks(blocks)
    except GenerationError as e:
        raise ConversionError(f"{document.path}: generation failed: {e}") from e


def convert(
    lines: Sequence[str],
    path: Optional[str] = None,
    config: Optional[ConversionConfig] = None,
    executor: Optional[CodeExecutor] = None,
    generator: Optional[PageGenerator] = None,
    file_access: Optional[FileAccess] = None,
) -> str:
    """Convert lines of markdown; see ``convert_document``."""
    return convert_document(
        Document(tuple(lines), path),
        config=config,
        executor=executor,
        generator=generator,
        file_access=file_access,
    )


def convert_file(
    source: Path,
    root: Path,
    config: Optional[ConversionConfig] = None,
    executor: Optional[CodeExecutor] = None,
    generator: Optional[PageGenerator] = None,
    simple: bool = False,
) -> str:
    """
    读取并转换一个文件

    Args:
        source: 文件路径
        root: 站点根目录，文档路径相对于它计算
        config: 转换配置
        executor: 实时代码块执行器
        generator: 生成注释的生成器
        simple: 使用简化模式

    Returns:
        HTML 片段

    Raises:
        ConversionError: 文件不是有效的 UTF-8，或文档不满足前置条件
        OSError: 文件无法读取
    """
    try:
        lines = source.read_text(encoding="utf-8").splitlines()
    except UnicodeDecodeError as e:
        raise ConversionError(f"{source}: not valid UTF-8: {e}") from e
    path = None if simple else source.resolve().relative_to(root.resolve()).as_posix()
    return convert(
        lines,
        path,
        config=config,
        executor=executor,
        generator=generator,
        file_access=LocalFileAccess(root),
    )
