"""处理流水线：扫描、顺序或并发缩放、结果汇总。"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import CancelledError, Future, ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import Callable, Optional

from image_resizer.core.cleaner import clean_directory
from image_resizer.core.config import DEFAULT_QUALITY, JobConfig, OutputConfig, validate_scale
from image_resizer.core.models import BatchReport, TaskOutcome, TaskStatus
from image_resizer.core.output_manager import OutputManager
from image_resizer.core.progress import ProgressUpdate
from image_resizer.core.report import write_csv_report
from image_resizer.core.scanner import find_images
from image_resizer.processing.worker import TransformTask, run_task, transform_image

LOGGER = logging.getLogger(__name__)


ProgressCallback = Optional[Callable[[ProgressUpdate], None]]


def resize_all(
    source_root: Path,
    dest_root: Path,
    scale: float,
    *,
    quality: int = DEFAULT_QUALITY,
    conflict_strategy: str = "overwrite",
    progress_callback: ProgressCallback = None,
    cancel_event: Optional[threading.Event] = None,
) -> list[Path]:
    """顺序缩放源目录下的全部图片。

    任意一张图片失败都会立即抛出异常并中止剩余文件的处理；
    取消信号在每张图片开始前检查，置位后抛出 ProcessingAborted。
    返回已写入的输出文件路径。
    """

    report = _resize_sequentially(
        Path(source_root),
        Path(dest_root),
        scale,
        quality=quality,
        conflict_strategy=conflict_strategy,
        progress_callback=progress_callback,
        cancel_event=cancel_event,
    )
    return [outcome.output_path for outcome in report]


def resize_all_concurrently(
    source_root: Path,
    dest_root: Path,
    scale: float,
    cancel_event: Optional[threading.Event] = None,
    *,
    quality: int = DEFAULT_QUALITY,
    max_workers: Optional[int] = None,
    conflict_strategy: str = "overwrite",
    progress_callback: ProgressCallback = None,
) -> BatchReport:
    """并发缩放源目录下的全部图片，并按派发顺序汇总每个任务的结果。

    所有任务先全部提交到线程池，再统一等待完成。单个任务的失败只会
    记录为 FAILED，不会影响其他任务，也不会向调用者抛出。
    ``max_workers`` 为 None 时为每个任务分配一个线程。
    """

    scale = validate_scale(scale)
    output_manager = OutputManager(OutputConfig(output_dir=Path(dest_root), conflict_strategy=conflict_strategy))
    tasks = _build_tasks(Path(source_root), output_manager, scale, quality)
    total = len(tasks)
    LOGGER.info("并发模式：发现 %d 个图片文件", total)

    if total == 0:
        _emit_progress(progress_callback, 0, 0, "没有需要处理的图片")
        return BatchReport()

    workers = max_workers or total
    outcomes: dict[int, TaskOutcome] = {}
    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="resize") as executor:
        future_map = {executor.submit(run_task, task, cancel_event): task for task in tasks}
        for future in as_completed(future_map):
            task = future_map[future]
            outcome = _collect_outcome(future, task)
            outcomes[task.task_id] = outcome
            _emit_progress(progress_callback, len(outcomes), total, f"完成 {task.display_name}", outcome)

    report = BatchReport(outcomes=[outcomes[task.task_id] for task in tasks])
    _log_report(report)
    return report


def process_batch(
    config: JobConfig,
    progress_callback: ProgressCallback = None,
    cancel_event: Optional[threading.Event] = None,
) -> BatchReport:
    """批量处理入口：按配置清理输出目录、选择执行模式并写出报告。

    顺序模式下第一个错误仍会直接抛出。
    """

    config.validate()
    if config.output.clean_before_run:
        clean_directory(config.output.output_dir)

    if config.concurrent:
        report = resize_all_concurrently(
            config.source_dir,
            config.output.output_dir,
            config.resize.scale,
            cancel_event,
            quality=config.resize.quality,
            max_workers=config.max_workers,
            conflict_strategy=config.output.conflict_strategy,
            progress_callback=progress_callback,
        )
    else:
        report = _resize_sequentially(
            config.source_dir,
            config.output.output_dir,
            config.resize.scale,
            quality=config.resize.quality,
            conflict_strategy=config.output.conflict_strategy,
            progress_callback=progress_callback,
            cancel_event=cancel_event,
        )

    if config.report_filename:
        _write_report(config, report)

    _emit_progress(progress_callback, len(report), len(report), "处理完成")
    return report


def _resize_sequentially(
    source_root: Path,
    dest_root: Path,
    scale: float,
    *,
    quality: int,
    conflict_strategy: str,
    progress_callback: ProgressCallback,
    cancel_event: Optional[threading.Event] = None,
) -> BatchReport:
    scale = validate_scale(scale)
    output_manager = OutputManager(OutputConfig(output_dir=dest_root, conflict_strategy=conflict_strategy))
    tasks = _build_tasks(source_root, output_manager, scale, quality)
    total = len(tasks)
    LOGGER.info("顺序模式：发现 %d 个图片文件", total)

    report = BatchReport()
    for task in tasks:
        output_path = transform_image(task, cancel_event)
        outcome = TaskOutcome(
            task_id=task.task_id,
            source_path=task.source_path,
            status=TaskStatus.COMPLETED,
            output_path=output_path,
            label=task.label,
        )
        report.outcomes.append(outcome)
        _emit_progress(progress_callback, len(report), total, f"完成 {task.display_name}", outcome)

    LOGGER.info("顺序模式处理完成：%d 个文件", len(report))
    return report


def _build_tasks(
    source_root: Path,
    output_manager: OutputManager,
    scale: float,
    quality: int,
) -> list[TransformTask]:
    """扫描源目录并为每张图片生成独立的任务描述。"""

    sources = find_images(source_root)
    tasks: list[TransformTask] = []
    for task_id, source in enumerate(sources):
        tasks.append(
            TransformTask(
                task_id=task_id,
                source_path=source,
                dest_path=output_manager.decide_destination(source),
                scale=scale,
                quality=quality,
                label=source.relative_to(source_root).as_posix(),
            )
        )
    return tasks


def _collect_outcome(future: Future, task: TransformTask) -> TaskOutcome:
    """读取已结束 future 的结果；run_task 本身不会抛出，这里兜底。"""

    try:
        return future.result()
    except CancelledError:
        return TaskOutcome(
            task_id=task.task_id,
            source_path=task.source_path,
            status=TaskStatus.CANCELLED,
            label=task.label,
        )
    except Exception as exc:  # noqa: BLE001
        LOGGER.exception("任务执行异常：%s", exc)
        return TaskOutcome(
            task_id=task.task_id,
            source_path=task.source_path,
            status=TaskStatus.FAILED,
            message=str(exc),
            label=task.label,
        )


def _log_report(report: BatchReport) -> None:
    if not report.all_completed:
        LOGGER.warning(
            "部分任务未完成：成功 %d，取消 %d，失败 %d",
            len(report.completed),
            len(report.cancelled),
            len(report.failed),
        )

    for outcome in report:
        level = logging.WARNING if outcome.status is TaskStatus.FAILED else logging.INFO
        LOGGER.log(level, "%s", outcome.status_line())

    LOGGER.info("并发模式处理完成：共 %d 个任务", len(report))


def _emit_progress(
    callback: ProgressCallback,
    completed: int,
    total: int,
    message: Optional[str] = None,
    outcome: Optional[TaskOutcome] = None,
) -> None:
    if not callback:
        return
    callback(ProgressUpdate(total=total, completed=completed, message=message, outcome=outcome))


def _write_report(config: JobConfig, report: BatchReport) -> None:
    try:
        write_csv_report(report, config.output.output_dir, config.report_filename)
    except OSError as exc:
        LOGGER.error("写入报告失败：%s", exc)
