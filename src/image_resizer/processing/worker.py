"""并发处理的工作单元。"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from PIL import Image

from image_resizer.core.config import DEFAULT_QUALITY
from image_resizer.core.exceptions import ProcessingAborted
from image_resizer.core.models import TaskOutcome, TaskStatus
from image_resizer.core.output_manager import save_image_file
from image_resizer.processing.image_loader import load_image
from image_resizer.processing.transform import scale_image

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class TransformTask:
    """描述单个图片缩放任务，派发后不再修改。"""

    task_id: int
    source_path: Path
    dest_path: Path
    scale: float
    quality: int = DEFAULT_QUALITY
    label: str = ""

    @property
    def display_name(self) -> str:
        return self.label or self.source_path.name


def transform_image(task: TransformTask, cancel_event: Optional[threading.Event] = None) -> Path:
    """解码、缩放、编码并写入单张图片，失败时直接抛出异常。

    取消信号只在开始解码前检查一次，已经开始的任务会运行到结束。
    """

    if cancel_event is not None and cancel_event.is_set():
        raise ProcessingAborted(f"任务已取消: {task.display_name}")

    LOGGER.debug(
        "[%03d] %s -> %s | 线程 %s",
        task.task_id,
        task.display_name,
        TaskStatus.RUNNING.value.upper(),
        threading.current_thread().name,
    )

    image: Optional[Image.Image] = None
    scaled: Optional[Image.Image] = None
    try:
        image = load_image(task.source_path)
        scaled = scale_image(image, task.scale)
        save_image_file(scaled, task.dest_path, quality=task.quality)
    finally:
        _close_if_needed(image, scaled)

    return task.dest_path


def run_task(task: TransformTask, cancel_event: Optional[threading.Event] = None) -> TaskOutcome:
    """执行单个任务并把任何异常转换为终态结果，不向外抛出。"""

    try:
        output_path = transform_image(task, cancel_event)
    except ProcessingAborted as exc:
        return TaskOutcome(
            task_id=task.task_id,
            source_path=task.source_path,
            status=TaskStatus.CANCELLED,
            message=str(exc),
            label=task.label,
        )
    except Exception as exc:  # noqa: BLE001
        LOGGER.debug("[%03d] 任务失败", task.task_id, exc_info=True)
        return TaskOutcome(
            task_id=task.task_id,
            source_path=task.source_path,
            status=TaskStatus.FAILED,
            message=str(exc),
            label=task.label,
        )

    return TaskOutcome(
        task_id=task.task_id,
        source_path=task.source_path,
        status=TaskStatus.COMPLETED,
        output_path=output_path,
        label=task.label,
    )


def _close_if_needed(*images: Optional[Image.Image]) -> None:
    for img in images:
        if img is not None:
            img.close()
