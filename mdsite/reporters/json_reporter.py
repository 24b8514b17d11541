"""
JSON 报告器 - 输出 JSON 格式报告
"""

import json
import sys
from typing import TextIO

from mdsite.reporters.base import ConversionResult


class JsonReporter:
    """JSON 报告器"""

    def __init__(self, output: TextIO | None = None):
        self.output = output or sys.stdout

    def report(self, results: list[ConversionResult], target: str) -> None:
        """生成 JSON 格式报告"""
        failed = sum(1 for r in results if not r.ok)
        report_data = {
            "target": target,
            "documents": [
                {
                    "source": r.source,
                    "output": r.output,
                    "status": r.status,
                    "message": r.message,
                }
                for r in results
            ],
            "summary": {
                "total": len(results),
                "converted": len(results) - failed,
                "failed": failed,
                "passed": failed == 0,
            },
        }

        json_str = json.dumps(report_data, indent=2, ensure_ascii=False)
        print(json_str, file=self.output)
