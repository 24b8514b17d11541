"""
mdsite - 将 Markdown 文档转换为带语法高亮的 HTML 片段
"""

__version__ = "0.1.0"

from mdsite.core import ConversionConfig, ConversionError, convert, convert_file

__all__ = [
    "__version__",
    "ConversionConfig",
    "ConversionError",
    "convert",
    "convert_file",
]
