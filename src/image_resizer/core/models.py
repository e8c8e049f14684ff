"""核心数据模型定义。"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Iterator, Optional


class TaskStatus(str, Enum):
    """单个缩放任务的状态。"""

    # 非终态：PENDING 为派发后尚未开始，RUNNING 见 worker 的开始日志
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES


TERMINAL_STATUSES = frozenset({TaskStatus.COMPLETED, TaskStatus.CANCELLED, TaskStatus.FAILED})


@dataclass(slots=True)
class TaskOutcome:
    """记录单个任务的终态结果（用于报告/日志）。"""

    task_id: int
    source_path: Path
    status: TaskStatus
    output_path: Optional[Path] = None
    message: Optional[str] = None
    label: str = ""

    def __post_init__(self) -> None:
        if not self.status.is_terminal:
            raise ValueError(f"任务结果必须为终态: {self.status.value}")

    @property
    def display_name(self) -> str:
        return self.label or self.source_path.name

    def status_line(self) -> str:
        """生成一行便于日志输出的诊断信息。"""

        line = f"[{self.task_id:03d}] {self.display_name} -> {self.status.value.upper()}"
        if self.message:
            line += f" ({self.message})"
        return line


@dataclass(slots=True)
class BatchReport:
    """按派发顺序汇总的批处理结果。"""

    outcomes: list[TaskOutcome] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.outcomes)

    def __iter__(self) -> Iterator[TaskOutcome]:
        return iter(self.outcomes)

    @property
    def completed(self) -> list[TaskOutcome]:
        return self._with_status(TaskStatus.COMPLETED)

    @property
    def cancelled(self) -> list[TaskOutcome]:
        return self._with_status(TaskStatus.CANCELLED)

    @property
    def failed(self) -> list[TaskOutcome]:
        return self._with_status(TaskStatus.FAILED)

    @property
    def all_completed(self) -> bool:
        """所有任务均成功完成时返回 True；空批次同样视为完成。"""

        return all(outcome.status is TaskStatus.COMPLETED for outcome in self.outcomes)

    def outcome_for(self, source_path: Path) -> TaskOutcome:
        """按源文件路径查找对应的任务结果。"""

        for outcome in self.outcomes:
            if outcome.source_path == source_path:
                return outcome
        raise KeyError(source_path)

    def status_lines(self) -> list[str]:
        return [outcome.status_line() for outcome in self.outcomes]

    def _with_status(self, status: TaskStatus) -> list[TaskOutcome]:
        return [outcome for outcome in self.outcomes if outcome.status is status]
