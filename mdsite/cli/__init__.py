"""
CLI Layer - 命令行接口层

提供命令行入口。
"""

from mdsite.cli.app import app, convert, highlight, version

__all__ = [
    "app",
    "convert",
    "highlight",
    "version",
]
