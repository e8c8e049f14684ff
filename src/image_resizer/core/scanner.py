"""文件扫描与筛选逻辑。"""

from __future__ import annotations

from pathlib import Path
from typing import Iterator

from image_resizer.core.exceptions import SourceNotFoundError

IMAGE_EXTENSIONS = frozenset({".png", ".jpg", ".jpeg"})


def _iter_candidate_files(root: Path) -> Iterator[Path]:
    """递归遍历目录下的所有文件。"""

    for candidate in root.rglob("*"):
        if candidate.is_file():
            yield candidate


def find_images(source_root: Path) -> list[Path]:
    """扫描源目录，返回所有扩展名匹配的图片路径。

    扩展名匹配不区分大小写。返回完整的列表而非生成器，
    以便在派发任务前确定批次大小。
    """

    root = Path(source_root)
    if not root.exists():
        raise SourceNotFoundError(f"源目录不存在: {root}")
    if not root.is_dir():
        raise SourceNotFoundError(f"源路径不是目录: {root}")

    collected = [
        candidate
        for candidate in _iter_candidate_files(root)
        if candidate.suffix.lower() in IMAGE_EXTENSIONS
    ]
    collected.sort(key=lambda x: str(x).lower())
    return collected
