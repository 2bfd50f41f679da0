"""包描述文件模块

提供包描述文件（YAML / TOML）的加载和验证功能。
"""

from .schema import PackageSpec, PackageModel, TargetsModel
from .loader import (
    ConfigLoader,
    ConfigValidationError,
    ConfigError,
    load_spec,
    validate_spec,
    config_loader,
)

__all__ = [
    # 主要类
    "PackageSpec",
    "PackageModel",
    "TargetsModel",
    "ConfigLoader",

    # 异常类
    "ConfigError",
    "ConfigValidationError",

    # 便捷函数
    "load_spec",
    "validate_spec",

    # 单例
    "config_loader",
]
