"""
平台收集步骤模块

负责扫描输入目录并分类平台文件。
"""

from ...utils import format_size
from ...utils.logging import info, success, debug, error, LogStage
from ..build_context import BuildContext, BuildError
from ..collector import PlatformCollector
from .build_step import BuildStep


class PlatformCollectionStep(BuildStep):
    """平台收集步骤"""

    def __init__(self):
        super().__init__("collect", "收集平台目录")
        self.collector = PlatformCollector()

    def get_progress_range(self) -> tuple[int, int]:
        return (0, 10)

    def execute(self, context: BuildContext) -> None:
        """收集平台目录"""
        info(f"扫描输入目录: {context.input_dir}", stage=LogStage.COLLECT)

        try:
            context.report("收集平台", 0, f"扫描: {context.input_dir}")
            context.platform_directories = self.collector.collect(context.input_dir)

            stats = self.collector.get_statistics()
            context.build_stats['platforms'] = stats['platforms']
            context.build_stats['loadable_files'] = stats['loadable_files']
            context.build_stats['total_size'] = stats['total_size']

            _, progress_end = self.get_progress_range()
            context.report("收集平台", progress_end, f"找到 {stats['platforms']} 个平台")

            success("平台收集完成", stage=LogStage.COLLECT)
            info(f"  平台数量: {stats['platforms']}")
            info(f"  可加载文件: {stats['loadable_files']}")
            info(f"  总大小: {format_size(stats['total_size'])}")

            for directory in context.platform_directories:
                debug(
                    f"{directory.label}: loadable={len(directory.loadable)} "
                    f"static={len(directory.static)} headers={len(directory.headers)}",
                    stage=LogStage.COLLECT,
                )

        except Exception as e:
            error(f"平台收集失败: {e}", stage=LogStage.COLLECT)
            raise BuildError(f"平台收集失败: {e}") from e
