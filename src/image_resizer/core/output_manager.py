"""输出写入与冲突处理模块。"""

from __future__ import annotations

import logging
from itertools import count
from pathlib import Path
from typing import Optional, Set

from PIL import Image

from image_resizer.core.config import DEFAULT_QUALITY, OutputConfig
from image_resizer.core.exceptions import DestinationError, ImageResizerError, InvalidConfigurationError

LOGGER = logging.getLogger(__name__)

OUTPUT_SUFFIX = ".jpg"


class ImageWriteError(ImageResizerError):
    """输出写入失败。"""


def ensure_output_dir(output_dir: Path) -> Path:
    """确保输出目录存在，返回解析后的绝对路径。"""

    resolved = Path(output_dir).resolve()
    try:
        resolved.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise DestinationError(f"无法创建输出目录: {resolved}") from exc
    return resolved


class OutputManager:
    """负责处理输出目录、文件命名冲突与图像写入。"""

    def __init__(self, config: OutputConfig) -> None:
        config.validate()
        self.config = config
        self.output_dir = ensure_output_dir(config.output_dir)
        self._reserved: Set[Path] = set()

    def decide_destination(self, source_path: Path) -> Path:
        """为源文件确定输出路径：``<stem>.jpg``。

        同一批次中映射到同一文件名的源文件会得到 ``_1``、``_2`` 等后缀，
        保证每个任务写入互不相同的文件。
        """

        destination = self.output_dir / f"{source_path.stem}{OUTPUT_SUFFIX}"
        if self._is_taken(destination):
            renamed = self._generate_renamed_path(destination)
            LOGGER.info("输出文件名冲突：%s -> %s", destination.name, renamed.name)
            destination = renamed

        self._reserved.add(destination)
        return destination

    def _is_taken(self, destination: Path) -> bool:
        if destination in self._reserved:
            return True
        return self.config.conflict_strategy == "rename" and destination.exists()

    def _generate_renamed_path(self, destination: Path) -> Path:
        """生成第一个未被占用的带序号文件名。"""

        stem = destination.stem
        suffix = destination.suffix

        for idx in count(1):
            candidate = destination.with_name(f"{stem}_{idx}{suffix}")
            if not self._is_taken(candidate):
                return candidate

        # 理论上不会执行到此处
        return destination


def save_image_file(image: Image.Image, destination: Path, quality: int = DEFAULT_QUALITY) -> None:
    """将 PIL Image 以 JPEG 格式保存到磁盘。

    写入失败时删除可能残留的不完整文件。
    """

    image_to_save: Optional[Image.Image] = None
    if image.mode != "RGB":
        image_to_save = image.convert("RGB")

    target = image_to_save if image_to_save is not None else image
    try:
        target.save(destination, format="JPEG", quality=quality)
    except OSError as exc:
        _discard_partial(destination)
        raise ImageWriteError(f"写入文件失败: {destination}") from exc
    finally:
        if image_to_save is not None:
            image_to_save.close()


def _discard_partial(destination: Path) -> None:
    if not destination.is_file():
        return
    try:
        destination.unlink()
    except OSError as exc:
        LOGGER.warning("无法删除不完整的输出文件 %s: %s", destination, exc)
