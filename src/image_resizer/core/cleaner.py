"""输出目录清理。"""

from __future__ import annotations

import logging
from pathlib import Path

from image_resizer.core.exceptions import CleanupError

LOGGER = logging.getLogger(__name__)


def clean_directory(dest_root: Path) -> int:
    """删除目标目录下的所有文件，保留子目录结构。

    目录不存在时直接创建。遇到第一个无法删除的文件即中止，
    此时目录处于部分清理状态。返回删除的文件数量。
    """

    root = Path(dest_root)
    if not root.exists():
        try:
            root.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise CleanupError(f"无法创建目录: {root}") from exc
        LOGGER.info("目标目录不存在，已创建：%s", root)
        return 0
    if not root.is_dir():
        raise CleanupError(f"目标路径不是目录: {root}")

    deleted = 0
    # 先收集再删除，避免遍历过程中修改目录
    for candidate in list(root.rglob("*")):
        if not candidate.is_file():
            continue
        try:
            candidate.unlink()
        except OSError as exc:
            raise CleanupError(f"无法删除文件: {candidate}") from exc
        deleted += 1

    LOGGER.info("已清理 %d 个文件：%s", deleted, root)
    return deleted
