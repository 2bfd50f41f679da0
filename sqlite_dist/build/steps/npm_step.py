"""
npm 步骤模块
"""

from ...utils.logging import info, success, error, LogStage
from ..build_context import BuildContext, BuildError
from ..npm import write_npm_packages
from .build_step import BuildStep


class NpmStep(BuildStep):
    """npm tarball 步骤"""

    def __init__(self):
        super().__init__("npm", "生成 npm 包")

    def get_progress_range(self) -> tuple[int, int]:
        return (60, 75)

    def is_enabled(self, context: BuildContext) -> bool:
        return context.spec.targets.npm is not None

    def execute(self, context: BuildContext) -> None:
        info("生成 npm 平台子包和伞包", stage=LogStage.NPM)
        try:
            path = self.target_directory(context, "npm")
            assets = write_npm_packages(
                context.spec,
                context.version,
                context.platform_directories,
                path,
                context.build_time,
            )
            context.registry.extend(assets)

            _, progress_end = self.get_progress_range()
            context.report("npm", progress_end, f"{len(assets)} 个包")
            success(f"已生成 {len(assets)} 个 npm 包", stage=LogStage.NPM)

        except Exception as e:
            error(f"npm 包生成失败: {e}", stage=LogStage.NPM)
            raise BuildError(f"npm 包生成失败: {e}") from e
