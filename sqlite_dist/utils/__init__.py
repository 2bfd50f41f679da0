"""通用工具模块"""

from .logging import (
    configure_logging,
    LogStage,
    OutputLevel,
)

from .paths import (
    ensure_directory,
    create_target_directory,
    clear_directory,
    write_bytes,
    format_size,
)

__all__ = [
    # 日志相关
    "configure_logging",
    "LogStage",
    "OutputLevel",

    # 路径相关
    "ensure_directory",
    "create_target_directory",
    "clear_directory",
    "write_bytes",
    "format_size",
]
