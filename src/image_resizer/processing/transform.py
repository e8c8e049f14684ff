"""尺寸计算与高质量缩放。"""

from __future__ import annotations

from PIL import Image

from image_resizer.core.exceptions import ImageResizerError

_RESAMPLING = getattr(Image, "Resampling", Image)


class ImageResizeError(ImageResizerError):
    """缩放后的尺寸无效。"""


def compute_target_size(size: tuple[int, int], scale: float) -> tuple[int, int]:
    """按比例计算目标宽高，截断取整而非四舍五入。"""

    width, height = size
    return int(width * scale), int(height * scale)


def scale_image(image: Image.Image, scale: float) -> Image.Image:
    """使用 LANCZOS 滤波按比例缩放图片，返回新的 Image 对象。"""

    target_w, target_h = compute_target_size(image.size, scale)
    if target_w < 1 or target_h < 1:
        raise ImageResizeError(
            f"缩放后尺寸无效: {image.width}x{image.height} * {scale} -> {target_w}x{target_h}"
        )
    return image.resize((target_w, target_h), _RESAMPLING.LANCZOS)
