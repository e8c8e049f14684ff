"""命令行入口。"""

from __future__ import annotations

import logging
import signal
import threading
from pathlib import Path
from typing import Optional

import typer
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeElapsedColumn,
    TimeRemainingColumn,
)

from image_resizer.core.cleaner import clean_directory
from image_resizer.core.config import CONFLICT_STRATEGIES, JobConfig, OutputConfig, ResizeConfig
from image_resizer.core.exceptions import ImageResizerError
from image_resizer.core.models import TaskStatus
from image_resizer.core.progress import ProgressUpdate
from image_resizer.processing.pipeline import process_batch
from image_resizer.utils.logging import setup_logging

app = typer.Typer(help="批量缩放 PNG/JPEG 图片并输出为 JPEG。")


def _build_progress_callback(progress: Progress):
    task_id: Optional[int] = None

    def callback(update: ProgressUpdate) -> None:
        nonlocal task_id
        if update.total == 0:
            return
        if task_id is None:
            task_id = progress.add_task("缩放图片", total=update.total)
        progress.update(task_id, completed=update.completed)
        if update.outcome is not None and update.outcome.status is not TaskStatus.COMPLETED:
            progress.log(update.outcome.status_line())

    return callback


def _install_interrupt_handler(cancel_event: threading.Event):
    """Ctrl-C 时设置取消信号，尚未开始的任务将记录为已取消。"""

    def handle_sigint(signum, frame):  # noqa: ARG001
        if cancel_event.is_set():
            raise KeyboardInterrupt
        cancel_event.set()
        logging.getLogger(__name__).warning("收到中断信号，正在取消尚未开始的任务...")

    return signal.signal(signal.SIGINT, handle_sigint)


@app.command("resize")
def resize_cli(  # noqa: PLR0913
    source: Path = typer.Argument(..., help="源图片目录（递归扫描）"),
    output: Path = typer.Option(..., "--output", "-o", help="输出目录"),
    scale: float = typer.Option(..., "--scale", "-s", help="缩放比例，必须大于 0"),
    sequential: bool = typer.Option(False, "--sequential", help="顺序处理，遇到第一个错误即中止"),
    max_workers: Optional[int] = typer.Option(None, "--workers", "-w", help="并发线程数量，默认每张图片一个线程"),
    clean: bool = typer.Option(False, "--clean", help="处理前清空输出目录中的文件"),
    conflict_strategy: str = typer.Option("overwrite", "--on-conflict", help="文件名冲突策略 overwrite/rename"),
    report_filename: Optional[str] = typer.Option(None, "--report", help="在输出目录写入 CSV 报告"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="输出调试日志"),
) -> None:
    """执行批量缩放。"""

    setup_logging(logging.DEBUG if verbose else logging.INFO)
    logging.getLogger(__name__).debug("CLI 参数解析完成")

    if conflict_strategy not in CONFLICT_STRATEGIES:
        raise typer.BadParameter(f"冲突策略必须为 {'/'.join(CONFLICT_STRATEGIES)}")

    output_dir = output.expanduser().resolve()
    job = JobConfig(
        source_dir=source.expanduser().resolve(),
        output=OutputConfig(
            output_dir=output_dir,
            conflict_strategy=conflict_strategy,
            clean_before_run=clean,
        ),
        resize=ResizeConfig(scale=scale),
        concurrent=not sequential,
        max_workers=max_workers,
        report_filename=report_filename,
    )

    progress = Progress(
        SpinnerColumn(),
        TextColumn("[bold blue]{task.description}"),
        BarColumn(),
        TimeElapsedColumn(),
        TimeRemainingColumn(),
    )

    cancel_event = threading.Event()
    previous_handler = _install_interrupt_handler(cancel_event)
    try:
        with progress:
            report = process_batch(
                job,
                progress_callback=_build_progress_callback(progress),
                cancel_event=cancel_event,
            )
    except ImageResizerError as exc:
        typer.secho(f"处理失败：{exc}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1) from exc
    finally:
        signal.signal(signal.SIGINT, previous_handler)

    typer.echo(
        f"处理完成：成功 {len(report.completed)} 张，取消 {len(report.cancelled)} 张，失败 {len(report.failed)} 张。"
    )
    for outcome in report.failed:
        typer.echo(outcome.status_line())
    if report_filename:
        typer.echo(f"报告文件：{output_dir / report_filename}")

    if not report.all_completed:
        raise typer.Exit(code=1)


@app.command("clean")
def clean_cli(
    output: Path = typer.Argument(..., help="需要清空的输出目录"),
) -> None:
    """删除输出目录下的全部文件，保留子目录。"""

    setup_logging()
    try:
        deleted = clean_directory(output.expanduser().resolve())
    except ImageResizerError as exc:
        typer.secho(f"清理失败：{exc}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1) from exc

    typer.echo(f"已删除 {deleted} 个文件：{output}")


if __name__ == "__main__":
    app()
