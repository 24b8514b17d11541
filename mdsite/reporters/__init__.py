"""
Reporters Layer - 报告层

包含 Rich 终端报告器和 JSON 报告器。
"""

from mdsite.reporters.base import ConversionResult, Reporter
from mdsite.reporters.rich_reporter import RichReporter
from mdsite.reporters.json_reporter import JsonReporter

__all__ = [
    "ConversionResult",
    "Reporter",
    "RichReporter",
    "JsonReporter",
]
