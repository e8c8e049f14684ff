"""进度更新的数据模型。"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from image_resizer.core.models import TaskOutcome


@dataclass(slots=True)
class ProgressUpdate:
    """某个任务进入终态后发出的进度信息。

    ``outcome`` 为刚结束的任务结果；批次开始或结束时的汇总更新为 None。
    """

    total: int
    completed: int
    message: Optional[str] = None
    outcome: Optional[TaskOutcome] = None
