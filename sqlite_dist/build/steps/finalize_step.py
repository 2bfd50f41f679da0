"""
收尾步骤模块

负责写出 checksums.txt、install.sh 和构建清单。
"""

from ...utils.logging import info, success, error, LogStage
from ..build_context import BuildContext, BuildError
from ..installer import write_install_sh
from ..manifest import write_checksums_txt, write_manifest
from .build_step import BuildStep


class FinalizeStep(BuildStep):
    """收尾步骤"""

    def __init__(self):
        super().__init__("finalize", "写出校验和、安装脚本与构建清单")

    def get_progress_range(self) -> tuple[int, int]:
        return (90, 100)

    def execute(self, context: BuildContext) -> None:
        info("写出 checksums.txt、install.sh 和构建清单", stage=LogStage.MANIFEST)
        try:
            write_checksums_txt(context.registry, context.output_dir)
            context.report("收尾", 93, "checksums.txt")

            write_install_sh(
                context.spec.package.name,
                context.version,
                context.registry.snapshot(),
                context.output_dir,
            )
            context.report("收尾", 96, "install.sh")

            manifest = write_manifest(
                context.registry,
                context.version,
                context.output_dir,
                context.build_time,
            )
            context.build_stats['artifacts'] = len(context.registry)

            _, progress_end = self.get_progress_range()
            context.report("收尾", progress_end, manifest.name)
            success(f"构建清单: {manifest.path}", stage=LogStage.MANIFEST)

        except Exception as e:
            error(f"收尾失败: {e}", stage=LogStage.MANIFEST)
            raise BuildError(f"收尾失败: {e}") from e
