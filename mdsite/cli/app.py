"""
CLI 入口模块 - 使用 Typer 构建命令行界面

转换流程：
1. 收集 Markdown 文件（单个文件或目录）
2. 逐个转换为 HTML 片段
3. 写入输出目录
4. 生成报告
"""

import logging
import shlex
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from mdsite.core import ConversionConfig, ConversionError, convert_file, html_path
from mdsite.core.config import DEFAULT_REPO_URL, DEFAULT_SITE_URL
from mdsite.core.highlight import highlight as highlight_code
from mdsite.filters import MarkdownFilter
from mdsite.reporters import ConversionResult, JsonReporter, RichReporter
from mdsite.sandbox import (
    CommandExecutor,
    CommandGenerator,
    ExecutorConfig,
    GeneratorConfig,
)

# 创建 Typer 应用实例
app = typer.Typer(
    name="mdsite",
    help="mdsite: Markdown documentation to highlighted HTML.",
    add_completion=False,
)

# Rich Console 用于输出
console = Console()


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )


def collect_sources(source: Path) -> tuple[Path, list[Path]]:
    """查找要转换的文件，返回 (站点根目录, 文件列表)"""
    if source.is_dir():
        return source, MarkdownFilter(source).collect()
    return source.parent, [source]


@app.command()
def convert(
    source: str = typer.Argument(
        ".",
        help="Markdown file or directory to convert",
    ),
    out: Optional[str] = typer.Option(
        None,
        "--out",
        "-o",
        help="Output directory (default: next to the sources)",
    ),
    simple: bool = typer.Option(
        False,
        "--simple",
        help="Simplified mode: no highlighting, link rewriting or live code",
    ),
    exec_command: Optional[str] = typer.Option(
        None,
        "--exec",
        help="Interpreter command for live code blocks, e.g. 'bqn -p'",
    ),
    gen_command: Optional[str] = typer.Option(
        None,
        "--gen",
        help="Generator command for generation comments",
    ),
    site_url: str = typer.Option(
        DEFAULT_SITE_URL,
        "--site-url",
        help="Base URL of the published site",
    ),
    repo_url: str = typer.Option(
        DEFAULT_REPO_URL,
        "--repo-url",
        help="Base URL for links to repository files",
    ),
    no_boilerplate: bool = typer.Option(
        False,
        "--no-boilerplate",
        help="Do not require the boilerplate first line",
    ),
    format: str = typer.Option(
        "rich",
        "--format",
        "-f",
        help="Output format: rich (default) or json",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Show detailed output",
    ),
) -> None:
    """
    Convert markdown documents to HTML fragments.

    Examples:
        mdsite convert doc/
        mdsite convert README.md --no-boilerplate
        mdsite convert doc/ --exec "bqn -p" --out site/
    """
    _setup_logging(verbose)

    source_path = Path(source).resolve()
    if not source_path.exists():
        console.print(f"[red]Error:[/red] Path does not exist: {source}")
        raise typer.Exit(1)

    root, files = collect_sources(source_path)
    if not files:
        console.print("[yellow]Warning:[/yellow] No markdown files found")
        raise typer.Exit(0)

    out_dir = Path(out).resolve() if out else root

    config = ConversionConfig(
        site_url=site_url,
        repo_url=repo_url,
        require_boilerplate=not no_boilerplate,
    )
    executor = CommandExecutor(ExecutorConfig(command=shlex.split(exec_command))) if exec_command else None
    generator = CommandGenerator(GeneratorConfig(command=shlex.split(gen_command))) if gen_command else None

    results: list[ConversionResult] = []
    for file in files:
        relative = file.relative_to(root).as_posix()
        if verbose:
            console.print(f"[dim]Converting {relative}[/dim]")
        try:
            fragment = convert_file(
                file,
                root,
                config=config,
                executor=executor,
                generator=generator,
                simple=simple,
            )
        except (ConversionError, OSError) as e:
            results.append(ConversionResult(relative, None, "failed", str(e)))
            continue

        target = out_dir / html_path(relative)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(fragment, encoding="utf-8")
        results.append(ConversionResult(relative, str(target), "converted"))

    # 生成报告
    if format == "json":
        reporter = JsonReporter()
    else:
        reporter = RichReporter(console)
    reporter.report(results, source)

    # 设置退出码
    if any(not r.ok for r in results):
        raise typer.Exit(1)
    raise typer.Exit(0)


@app.command()
def highlight(
    code: str = typer.Argument(..., help="Code to highlight"),
) -> None:
    """Print highlighted HTML for a piece of code."""
    print(highlight_code(code))


@app.command()
def version() -> None:
    """Show the version of mdsite."""
    from mdsite import __version__
    console.print(f"[bold]mdsite[/bold] v{__version__}")


if __name__ == "__main__":
    app()
