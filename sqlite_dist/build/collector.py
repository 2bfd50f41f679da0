"""
平台目录收集器

扫描输入根目录下的 {os}-{cpu} 子目录，生成分类后的平台目录列表。
"""

from pathlib import Path
from typing import Dict, List, Union

from ..utils.logging import warning, LogStage
from .platform import PlatformDirectory, PlatformDirectoryError


class PlatformCollector:
    """平台目录收集器"""

    def __init__(self):
        self.collected: List[PlatformDirectory] = []

    def collect(self, input_dir: Union[str, Path]) -> List[PlatformDirectory]:
        """收集平台目录

        Args:
            input_dir: 输入根目录

        Returns:
            List[PlatformDirectory]: 按目录名排序的平台目录列表

        Raises:
            FileNotFoundError: 输入目录不存在
            PlatformDirectoryError: 存在无法识别的条目
        """
        input_path = Path(input_dir)
        self.collected = []

        if not input_path.exists():
            raise FileNotFoundError(f"输入目录不存在: {input_path}")
        if not input_path.is_dir():
            raise PlatformDirectoryError(f"输入路径不是目录: {input_path}")

        for entry in sorted(input_path.iterdir(), key=lambda p: p.name):
            if not entry.is_dir():
                raise PlatformDirectoryError(f"输入目录中只能包含平台目录: {entry}")

            directory = PlatformDirectory.from_path(entry)
            for name in directory.skipped:
                warning(f"跳过未知类型的文件: {directory.label}/{name}", stage=LogStage.COLLECT)
            self.collected.append(directory)

        return self.collected

    def get_statistics(self) -> Dict[str, int]:
        """获取收集统计信息"""
        return {
            'platforms': len(self.collected),
            'loadable_files': sum(len(d.loadable) for d in self.collected),
            'static_files': sum(len(d.static) for d in self.collected),
            'header_files': sum(len(d.headers) for d in self.collected),
            'total_size': sum(
                sum(f.file.size for f in d.loadable)
                + sum(f.size for f in d.static)
                + sum(f.size for f in d.headers)
                for d in self.collected
            ),
        }


def collect_platform_directories(input_dir: Union[str, Path]) -> List[PlatformDirectory]:
    """便捷函数：收集平台目录"""
    return PlatformCollector().collect(input_dir)
