"""
pip 步骤模块

负责生成基础 wheel 以及 datasette / sqlite-utils 插件 wheel。
"""

from ...utils.logging import info, success, debug, error, LogStage
from ..build_context import BuildContext, BuildError
from ..pip import write_base_packages, write_datasette, write_sqlite_utils
from .build_step import BuildStep


class PipStep(BuildStep):
    """pip wheel 步骤"""

    def __init__(self):
        super().__init__("pip", "生成 Python wheel")

    def get_progress_range(self) -> tuple[int, int]:
        return (35, 60)

    def is_enabled(self, context: BuildContext) -> bool:
        return context.spec.targets.pip is not None

    def execute(self, context: BuildContext) -> None:
        targets = context.spec.targets

        try:
            info(f"生成 wheel，pip 版本号: {context.version.to_pip_version()}", stage=LogStage.PIP)
            path = self.target_directory(context, "pip")
            assets = write_base_packages(
                context.spec,
                context.version,
                context.platform_directories,
                path,
                context.build_time,
            )
            context.registry.extend(assets)
            for asset in assets:
                debug(f"{asset.name} sha256={asset.checksum_sha256}", stage=LogStage.PIP)
            context.report("pip", 50, f"{len(assets)} 个 wheel")

            if targets.datasette is not None:
                path = self.target_directory(context, "datasette")
                assets.append(context.registry.append(
                    write_datasette(context.spec, context.version, path, context.build_time)
                ))

            if targets.sqlite_utils is not None:
                path = self.target_directory(context, "sqlite_utils")
                assets.append(context.registry.append(
                    write_sqlite_utils(context.spec, context.version, path, context.build_time)
                ))

            _, progress_end = self.get_progress_range()
            context.report("pip", progress_end, "完成")
            success(f"已生成 {len(assets)} 个 wheel", stage=LogStage.PIP)

        except Exception as e:
            error(f"wheel 生成失败: {e}", stage=LogStage.PIP)
            raise BuildError(f"wheel 生成失败: {e}") from e
