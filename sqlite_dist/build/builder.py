"""
构建器主类

负责整个构建流程的协调，使用管道模式组织构建步骤。
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from ..config.schema import PackageSpec
from ..utils.logging import info, warning, LogStage
from ..utils.paths import clear_directory, ensure_directory
from .assets import GeneratedAsset
from .build_context import BuildError, ProgressCallback
from .build_pipeline import BuildPipeline
from .version import SemanticVersion, VersionError


@dataclass
class BuildResult:
    """构建结果"""
    success: bool
    output_dir: Optional[Path] = None
    version: Optional[str] = None
    assets: List[GeneratedAsset] = field(default_factory=list)
    build_time: Optional[float] = None
    error: Optional[str] = None


def resolve_version(spec: PackageSpec, override: Optional[str] = None) -> SemanticVersion:
    """确定本次构建的版本号，命令行参数优先于描述文件

    Raises:
        VersionError: 没有版本号或版本号不合法
    """
    text = override if override is not None else spec.package.version
    if not text:
        raise VersionError("未指定版本号，请在描述文件的 package.version 中设置或使用 --version")
    return SemanticVersion.parse(text)


class Builder:
    """多格式分发包构建器

    使用管道模式协调构建步骤，提供统一的构建接口。
    """

    def __init__(self):
        self.pipeline = BuildPipeline()

    def prepare_output(self, output_dir: Path, force: bool = False) -> Path:
        """准备输出根目录

        force 为 True 时清空已有内容；否则保留，已存在的目标子目录会在
        对应步骤中报错。
        """
        output_dir = Path(output_dir)
        if force and output_dir.exists() and any(output_dir.iterdir()):
            warning(f"清空输出目录: {output_dir}", stage=LogStage.INIT)
            clear_directory(output_dir)
        return ensure_directory(output_dir)

    def build(
        self,
        spec: PackageSpec,
        input_dir: Path,
        output_dir: Path,
        version: Optional[str] = None,
        spec_directory: Optional[Path] = None,
        force: bool = False,
        progress_callback: Optional[ProgressCallback] = None,
        build_time: Optional[int] = None,
    ) -> BuildResult:
        """构建全部启用的目标

        Args:
            spec: 包描述
            input_dir: 输入根目录
            output_dir: 输出根目录
            version: 覆盖描述文件中的版本号
            spec_directory: 描述文件所在目录，默认为当前目录
            force: 是否清空已有输出
            progress_callback: 进度回调函数
            build_time: 固定构建时间（Unix 秒）

        Returns:
            BuildResult: 构建结果
        """
        try:
            semver = resolve_version(spec, version)
        except VersionError as e:
            return BuildResult(success=False, error=str(e))

        try:
            output_dir = self.prepare_output(output_dir, force)
        except OSError as e:
            return BuildResult(success=False, error=f"无法准备输出目录: {e}")

        info(f"版本号: {semver}", stage=LogStage.INIT)
        try:
            context = self.pipeline.execute(
                spec,
                semver,
                spec_directory if spec_directory is not None else Path.cwd(),
                input_dir,
                output_dir,
                progress_callback=progress_callback,
                build_time=build_time,
            )
        except BuildError as e:
            # 构建失败，返回失败结果
            return BuildResult(success=False, output_dir=output_dir, version=str(semver), error=str(e))

        return BuildResult(
            success=True,
            output_dir=output_dir,
            version=str(semver),
            assets=context.registry.snapshot(),
            build_time=context.build_stats['end_time'] - context.build_stats['start_time'],
        )

    def get_pipeline(self) -> BuildPipeline:
        """获取构建管道，用于自定义构建流程"""
        return self.pipeline

    def validate_build_pipeline(self) -> List[str]:
        """验证构建管道的完整性

        Returns:
            List[str]: 验证错误列表，空列表表示验证通过
        """
        return self.pipeline.validate_pipeline()
