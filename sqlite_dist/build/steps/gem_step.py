"""
RubyGems 步骤模块
"""

from ...utils.logging import info, success, error, LogStage
from ..build_context import BuildContext, BuildError
from ..gem import write_gems
from .build_step import BuildStep


class GemStep(BuildStep):
    """gem 步骤"""

    def __init__(self):
        super().__init__("gem", "生成 Ruby gem")

    def get_progress_range(self) -> tuple[int, int]:
        return (75, 90)

    def is_enabled(self, context: BuildContext) -> bool:
        return context.spec.targets.gem is not None

    def execute(self, context: BuildContext) -> None:
        info(f"生成 gem，gem 版本号: {context.version.to_gem_version()}", stage=LogStage.GEM)
        try:
            path = self.target_directory(context, "gem")
            assets = write_gems(
                context.spec,
                context.version,
                context.platform_directories,
                path,
                context.build_time,
            )
            context.registry.extend(assets)

            _, progress_end = self.get_progress_range()
            context.report("gem", progress_end, f"{len(assets)} 个 gem")
            success(f"已生成 {len(assets)} 个 gem", stage=LogStage.GEM)

        except Exception as e:
            error(f"gem 生成失败: {e}", stage=LogStage.GEM)
            raise BuildError(f"gem 生成失败: {e}") from e
