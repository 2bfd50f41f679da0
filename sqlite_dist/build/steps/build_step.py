"""
构建步骤基类模块

定义构建步骤的抽象接口和基础功能。
"""

from abc import ABC, abstractmethod
from pathlib import Path

from ...utils.paths import create_target_directory
from ..build_context import BuildContext


class BuildStep(ABC):
    """构建步骤抽象基类"""

    def __init__(self, name: str, description: str):
        self.name = name
        self.description = description

    def is_enabled(self, context: BuildContext) -> bool:
        """目标未启用的步骤不执行任何操作"""
        return True

    @abstractmethod
    def execute(self, context: BuildContext) -> None:
        """执行构建步骤"""
        pass

    @abstractmethod
    def get_progress_range(self) -> tuple[int, int]:
        """获取此步骤的进度范围 (start_percent, end_percent)"""
        pass

    def target_directory(self, context: BuildContext, name: str) -> Path:
        """在输出根目录下创建目标子目录"""
        return create_target_directory(context.output_dir, name)
