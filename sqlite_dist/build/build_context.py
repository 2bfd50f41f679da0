"""
构建上下文模块

定义构建过程中的共享数据结构和异常类。
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from ..config.schema import PackageSpec
from .archive import current_build_time
from .assets import AssetRegistry
from .platform import PlatformDirectory
from .version import SemanticVersion

# 进度回调类型
ProgressCallback = Callable[[str, int, int, str], None]


@dataclass
class BuildContext:
    """构建上下文，包含构建过程中的共享数据"""
    spec: PackageSpec
    version: SemanticVersion
    spec_directory: Path
    input_dir: Path
    output_dir: Path
    progress_callback: Optional[ProgressCallback] = None

    # 构建过程中生成的数据
    platform_directories: List[PlatformDirectory] = field(default_factory=list)
    registry: AssetRegistry = field(default_factory=AssetRegistry)
    build_time: int = field(default_factory=current_build_time)

    # 统计信息
    build_stats: Dict[str, Any] = None  # type: ignore

    def __post_init__(self):
        if self.build_stats is None:
            self.build_stats = {
                'start_time': 0,
                'end_time': 0,
                'platforms': 0,
                'loadable_files': 0,
                'total_size': 0,
                'artifacts': 0,
            }

    def report(self, message: str, percent: int, detail: str = "") -> None:
        """上报进度（未设置回调时忽略）"""
        if self.progress_callback:
            self.progress_callback(message, percent, 100, detail)


class BuildError(Exception):
    """构建错误"""
    pass
