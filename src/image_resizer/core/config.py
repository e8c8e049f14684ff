"""缩放任务的配置模型。"""

from __future__ import annotations

import math
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from image_resizer.core.exceptions import InvalidConfigurationError

DEFAULT_QUALITY = 100
CONFLICT_STRATEGIES = ("overwrite", "rename")


def validate_scale(scale: float) -> float:
    """校验缩放比例，必须为有限的正数。"""

    try:
        value = float(scale)
    except (TypeError, ValueError) as exc:
        raise InvalidConfigurationError(f"缩放比例必须为数字: {scale!r}") from exc

    if not math.isfinite(value) or value <= 0:
        raise InvalidConfigurationError(f"缩放比例必须大于 0: {scale!r}")
    return value


@dataclass(slots=True)
class ResizeConfig:
    """缩放与编码参数。"""

    scale: float
    quality: int = DEFAULT_QUALITY

    def validate(self) -> None:
        self.scale = validate_scale(self.scale)
        if not 1 <= self.quality <= 100:
            raise InvalidConfigurationError(f"JPEG 质量必须位于 1~100: {self.quality}")


@dataclass(slots=True)
class OutputConfig:
    """输出目录与冲突策略配置。"""

    output_dir: Path
    conflict_strategy: str = "overwrite"  # overwrite | rename
    clean_before_run: bool = False

    def validate(self) -> None:
        if self.conflict_strategy not in CONFLICT_STRATEGIES:
            raise InvalidConfigurationError(f"未知的冲突策略: {self.conflict_strategy}")


@dataclass(slots=True)
class JobConfig:
    """单次批处理任务的配置集合。"""

    source_dir: Path
    output: OutputConfig
    resize: ResizeConfig
    concurrent: bool = True
    max_workers: Optional[int] = None  # None 表示每个任务一个线程
    report_filename: Optional[str] = None

    def validate(self) -> None:
        """检查整个任务配置，发现问题时抛出 InvalidConfigurationError。"""

        self.resize.validate()
        self.output.validate()
        if self.max_workers is not None and self.max_workers < 1:
            raise InvalidConfigurationError(f"并发数量必须大于 0: {self.max_workers}")
