"""项目内使用的自定义异常定义。"""


class ImageResizerError(Exception):
    """基础异常类型。"""


class InvalidConfigurationError(ImageResizerError):
    """配置不合法时抛出。"""


class SourceNotFoundError(ImageResizerError):
    """源目录不存在时抛出。"""


class DestinationError(ImageResizerError):
    """输出目录无法创建或访问时抛出。"""


class CleanupError(DestinationError):
    """清理输出目录失败。"""


class ProcessingAborted(ImageResizerError):
    """任务在开始前观察到取消信号时抛出。"""
