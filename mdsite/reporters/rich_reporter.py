"""
Rich 终端报告器 - 使用 Rich 库输出转换结果表格
"""

from rich.console import Console
from rich.table import Table

from mdsite.reporters.base import ConversionResult


class RichReporter:
    """Rich 终端报告器"""

    def __init__(self, console: Console | None = None):
        self.console = console or Console()

    def report(self, results: list[ConversionResult], target: str) -> None:
        """生成 Rich 格式报告"""
        table = Table(title=f"📄 {target}", show_lines=False)
        table.add_column("Source", style="cyan")
        table.add_column("Status")
        table.add_column("Output / Error", overflow="fold")

        for result in results:
            if result.ok:
                table.add_row(result.source, "[green]✓ converted[/green]", result.output or "")
            else:
                table.add_row(result.source, "[red]✗ failed[/red]", result.message or "")

        self.console.print(table)
        self._print_conclusion(results)

    def _print_conclusion(self, results: list[ConversionResult]) -> None:
        """打印总结"""
        failed = sum(1 for r in results if not r.ok)
        converted = len(results) - failed
        if failed:
            self.console.print(
                f"[yellow]{converted} converted, [red]{failed} failed[/red][/yellow]"
            )
        else:
            self.console.print(f"[green]All {converted} documents converted[/green]")
