"""报告生成工具。"""

from __future__ import annotations

import csv
from pathlib import Path

from image_resizer.core.models import BatchReport

HEADER = ["task_id", "source_path", "output_path", "status", "message"]


def write_csv_report(report: BatchReport, output_dir: Path, filename: str) -> Path:
    """将处理结果按派发顺序写入 CSV 报告。"""

    report_path = output_dir / filename
    with report_path.open("w", newline="", encoding="utf-8") as handle:
        writer = csv.writer(handle)
        writer.writerow(HEADER)
        for record in report:
            writer.writerow(
                [
                    record.task_id,
                    str(record.source_path),
                    str(record.output_path) if record.output_path else "",
                    record.status.value,
                    record.message or "",
                ]
            )
    return report_path
