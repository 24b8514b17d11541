"""
报告器基类 - 定义转换结果与报告器接口
"""

from dataclasses import dataclass
from typing import Literal, Optional, Protocol


@dataclass
class ConversionResult:
    """
    单个文档的转换结果

    Attributes:
        source: 源文件路径
        output: 输出文件路径（失败时为 None）
        status: 转换状态
        message: 错误信息
    """
    source: str
    output: Optional[str]
    status: Literal["converted", "failed"]
    message: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status == "converted"


class Reporter(Protocol):
    """报告器协议"""

    def report(self, results: list[ConversionResult], target: str) -> None:
        """生成报告"""
        ...
