"""
GitHub Release 步骤模块

负责生成 GitHub Release 归档，以及引用这些归档的 sqlpkg.json 和 spm.json。
"""

from ...utils.logging import info, success, error, LogStage
from ..build_context import BuildContext, BuildError
from ..descriptors import write_spm, write_sqlpkg
from ..github_releases import write_platform_files
from .build_step import BuildStep


class GithubReleaseStep(BuildStep):
    """GitHub Release 步骤"""

    def __init__(self):
        super().__init__("github_releases", "生成 GitHub Release 归档")

    def get_progress_range(self) -> tuple[int, int]:
        return (10, 30)

    def is_enabled(self, context: BuildContext) -> bool:
        return context.spec.targets.github_releases is not None

    def execute(self, context: BuildContext) -> None:
        """生成 Release 归档，再生成描述文件"""
        targets = context.spec.targets
        stage = LogStage.RELEASE
        try:
            info("生成 GitHub Release 归档", stage=stage)
            path = self.target_directory(context, "github_releases")
            release_assets = write_platform_files(
                context.spec,
                context.version,
                context.platform_directories,
                path,
                context.build_time,
            )
            # 描述文件只能引用已登记的产物
            context.registry.extend(release_assets)
            success(f"已生成 {len(release_assets)} 个 Release 归档", stage=stage)
            context.report("GitHub Release", 20, f"{len(release_assets)} 个归档")

            if targets.sqlpkg is not None:
                stage = LogStage.SQLPKG
                path = self.target_directory(context, "sqlpkg")
                asset = write_sqlpkg(context.spec, context.version, context.registry.github_releases(), path)
                context.registry.append(asset)
                success(f"已生成 {asset.name}", stage=stage)

            if targets.spm is not None:
                stage = LogStage.SPM
                path = self.target_directory(context, "spm")
                asset = write_spm(context.spec, context.registry.github_releases(), path)
                context.registry.append(asset)
                success(f"已生成 {asset.name}", stage=stage)

            _, progress_end = self.get_progress_range()
            context.report("GitHub Release", progress_end, "完成")

        except Exception as e:
            error(f"GitHub Release 生成失败: {e}", stage=stage)
            raise BuildError(f"GitHub Release 生成失败: {e}") from e
