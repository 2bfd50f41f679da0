"""构建服务模块

提供多格式分发包构建的核心功能。
"""

from .builder import Builder, BuildResult, resolve_version
from .build_context import BuildContext, BuildError
from .build_pipeline import BuildPipeline
from .collector import PlatformCollector, collect_platform_directories
from .platform import (
    Os,
    Cpu,
    PlatformFile,
    LoadableFile,
    PlatformDirectory,
    PlatformDirectoryError,
    EmptyPlatformError,
)
from .version import SemanticVersion, VersionError
from .archive import ArchiveError, create_targz, create_tar, create_zip, gzip_bytes
from .checksum import sha256_hex, sha512_hex, sha256_urlsafe_b64
from .assets import AssetRegistry, GeneratedAsset, GithubRelease, in_checksums_txt

__all__ = [
    # 主构建器
    "Builder",
    "BuildResult",
    "BuildContext",
    "BuildError",
    "BuildPipeline",
    "resolve_version",

    # 平台输入
    "PlatformCollector",
    "collect_platform_directories",
    "Os",
    "Cpu",
    "PlatformFile",
    "LoadableFile",
    "PlatformDirectory",
    "PlatformDirectoryError",
    "EmptyPlatformError",

    # 版本号
    "SemanticVersion",
    "VersionError",

    # 归档与摘要
    "ArchiveError",
    "create_targz",
    "create_tar",
    "create_zip",
    "gzip_bytes",
    "sha256_hex",
    "sha512_hex",
    "sha256_urlsafe_b64",

    # 产物
    "AssetRegistry",
    "GeneratedAsset",
    "GithubRelease",
    "in_checksums_txt",
]
