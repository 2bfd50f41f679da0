"""
构建管道模块

使用管道模式协调构建步骤的执行。
"""

import time
from pathlib import Path
from typing import List, Optional

from ..config.schema import PackageSpec
from ..utils import format_size
from ..utils.logging import debug, info, success, error, LogStage
from .build_context import BuildContext, BuildError, ProgressCallback
from .version import SemanticVersion
from .steps import (
    BuildStep,
    PlatformCollectionStep,
    GithubReleaseStep,
    AmalgamationStep,
    PipStep,
    NpmStep,
    GemStep,
    FinalizeStep,
)


class BuildPipeline:
    """构建管道，负责协调构建步骤的执行"""

    def __init__(self):
        """初始化构建管道"""
        self._steps: List[BuildStep] = []

        # 初始化默认构建步骤
        self._init_default_steps()

    def _init_default_steps(self):
        """初始化默认的构建步骤"""
        self._steps = [
            PlatformCollectionStep(),
            GithubReleaseStep(),
            AmalgamationStep(),
            PipStep(),
            NpmStep(),
            GemStep(),
            FinalizeStep(),
        ]

    def add_step(self, step: BuildStep, position: Optional[int] = None):
        """添加构建步骤"""
        if position is None:
            self._steps.append(step)
        else:
            self._steps.insert(position, step)

    def remove_step(self, step_name: str):
        """移除构建步骤"""
        self._steps = [step for step in self._steps if step.name != step_name]

    def get_steps(self) -> List[BuildStep]:
        """获取所有构建步骤"""
        return self._steps.copy()

    def execute(
        self,
        spec: PackageSpec,
        version: SemanticVersion,
        spec_directory: Path,
        input_dir: Path,
        output_dir: Path,
        progress_callback: Optional[ProgressCallback] = None,
        build_time: Optional[int] = None,
    ) -> BuildContext:
        """执行构建管道

        Args:
            spec: 包描述
            version: 本次构建的版本号
            spec_directory: 描述文件所在目录，用于解析相对路径
            input_dir: 平台目录所在的输入根目录
            output_dir: 输出根目录（必须已存在）
            progress_callback: 进度回调函数
            build_time: 固定构建时间，None 表示使用当前时间

        Returns:
            BuildContext: 构建上下文，包含所有构建结果

        Raises:
            BuildError: 构建失败
        """
        context = BuildContext(
            spec=spec,
            version=version,
            spec_directory=Path(spec_directory),
            input_dir=Path(input_dir),
            output_dir=Path(output_dir),
            progress_callback=progress_callback,
        )
        if build_time is not None:
            context.build_time = build_time

        context.build_stats['start_time'] = time.time()

        try:
            info(f"开始构建 {spec.package.name} {version}: {output_dir}", stage=LogStage.BUILD)
            debug(f"启用的目标: {', '.join(spec.targets.enabled()) or '无'}", stage=LogStage.BUILD)

            # 依次执行每个构建步骤
            for step in self._steps:
                if not step.is_enabled(context):
                    debug(f"跳过未启用的步骤: {step.name}", stage=LogStage.BUILD)
                    continue
                info(f"执行步骤: {step.description}", stage=LogStage.BUILD)
                step.execute(context)

            context.build_stats['end_time'] = time.time()
            elapsed = context.build_stats['end_time'] - context.build_stats['start_time']

            success(f"构建成功: {output_dir}", stage=LogStage.DONE)
            info(f"构建时间: {elapsed:.1f}秒")
            info(f"产物数量: {len(context.registry)}")
            info(f"产物总大小: {format_size(sum(asset.size for asset in context.registry))}")

            return context

        except Exception as e:
            context.build_stats['end_time'] = time.time()

            error_msg = str(e)
            error(f"构建失败: {error_msg}", stage=LogStage.BUILD)

            # 重新抛出异常，让调用者处理
            if isinstance(e, BuildError):
                raise
            raise BuildError(f"构建失败: {error_msg}") from e

    def validate_pipeline(self) -> List[str]:
        """验证构建管道的完整性

        Returns:
            List[str]: 验证错误列表，空列表表示验证通过
        """
        errors = []

        if not self._steps:
            errors.append("构建管道中没有步骤")
            return errors

        # 检查步骤的进度范围是否连续
        prev_end = 0
        for step in self._steps:
            start, end = step.get_progress_range()
            if start != prev_end:
                errors.append(f"步骤 '{step.name}' 的进度范围不连续: 期望起始 {prev_end}%, 实际 {start}%")
            if start >= end:
                errors.append(f"步骤 '{step.name}' 的进度范围无效: {start}% - {end}%")
            prev_end = end

        if prev_end != 100:
            errors.append(f"构建管道的总进度范围不是100%: {prev_end}%")

        return errors
