"""
sqlite-dist - SQLite 扩展多格式分发包构建工具

Package pre-compiled SQLite extensions for GitHub Releases, pip, npm,
RubyGems, sqlpkg and spm.
"""

__version__ = "0.1.0"
__license__ = "MIT"

# 导出主要 API
from .config.schema import PackageSpec
from .build.builder import Builder

__all__ = ["PackageSpec", "Builder", "__version__"]
