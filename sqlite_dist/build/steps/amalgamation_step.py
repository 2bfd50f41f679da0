"""
源码合并包步骤模块
"""

from ...utils.logging import info, success, error, LogStage
from ..amalgamation import write_amalgamation
from ..build_context import BuildContext, BuildError
from .build_step import BuildStep


class AmalgamationStep(BuildStep):
    """源码合并包步骤"""

    def __init__(self):
        super().__init__("amalgamation", "生成源码合并包")

    def get_progress_range(self) -> tuple[int, int]:
        return (30, 35)

    def is_enabled(self, context: BuildContext) -> bool:
        return context.spec.targets.amalgamation is not None

    def execute(self, context: BuildContext) -> None:
        info("打包源码文件", stage=LogStage.AMALGAMATION)
        try:
            path = self.target_directory(context, "amalgamation")
            assets = write_amalgamation(
                context.spec,
                context.version,
                context.spec_directory,
                path,
                context.build_time,
            )
            context.registry.extend(assets)

            _, progress_end = self.get_progress_range()
            context.report("源码合并包", progress_end, "完成")
            success(f"已生成 {', '.join(asset.name for asset in assets)}", stage=LogStage.AMALGAMATION)

        except Exception as e:
            error(f"源码合并包生成失败: {e}", stage=LogStage.AMALGAMATION)
            raise BuildError(f"源码合并包生成失败: {e}") from e
