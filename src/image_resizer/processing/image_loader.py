"""图片解码实现。"""

from __future__ import annotations

import logging
from pathlib import Path

from PIL import Image, UnidentifiedImageError

from image_resizer.core.exceptions import ImageResizerError

LOGGER = logging.getLogger(__name__)


WIDE_GRAYSCALE_MODES = frozenset({"I", "I;16", "I;16B", "I;16L", "I;16N"})


class ImageLoadingError(ImageResizerError):
    """图片解码失败。"""


def load_image(path: Path) -> Image.Image:
    """完整解码单张图片并归一化为 RGB。

    返回值为新的 Image 对象，调用者负责关闭。
    """

    try:
        with Image.open(path) as img:
            img.load()
            if img.mode != "RGB":
                return _convert_to_rgb(img)
            return img.copy()
    except (UnidentifiedImageError, OSError) as exc:
        LOGGER.debug("无法识别图像文件 %s: %s", path, exc)
        raise ImageLoadingError(f"无法加载图像: {path}") from exc


def _convert_to_rgb(img: Image.Image) -> Image.Image:
    """将任意模式图像转换为 RGB，JPEG 不支持透明通道。"""

    if img.mode in WIDE_GRAYSCALE_MODES:
        # 16 位灰度直接转换会被截断为纯白，先线性缩放到 8 位
        wide = img.convert("I")
        narrowed = wide.point(lambda v: v * (1 / 256))
        gray = narrowed.convert("L")
        wide.close()
        narrowed.close()
        rgb = gray.convert("RGB")
        gray.close()
        return rgb

    if img.mode in {"RGBA", "LA"} or (img.mode == "P" and "transparency" in img.info):
        # 透明区域以白色背景合成
        rgba = img.convert("RGBA")
        background = Image.new("RGB", img.size, (255, 255, 255))
        background.paste(rgba, mask=rgba.split()[-1])
        rgba.close()
        return background

    return img.convert("RGB")
