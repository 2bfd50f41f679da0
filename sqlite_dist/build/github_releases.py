"""
GitHub Release 打包器

每个平台将可加载文件打成一个 tar.gz；存在静态库或头文件时再额外打一个
static tar.gz。产物名称和下载地址完全由包名、版本和平台决定。
"""

from pathlib import Path
from typing import List, Optional

from ..config.schema import PackageSpec
from .archive import create_targz
from .assets import (
    GeneratedAsset,
    GithubRelease,
    GithubReleaseLoadableAsset,
    GithubReleaseStaticAsset,
)
from .platform import PlatformDirectory
from .version import SemanticVersion


LOADABLE = "loadable"
STATIC = "static"


def artifact_name(name: str, version: str, artifact_type: str, os: str, cpu: str) -> str:
    """GitHub Release 产物文件名"""
    return f"{name}-{version}-{artifact_type}-{os}-{cpu}.tar.gz"


def release_download_url(spec: PackageSpec, version: SemanticVersion, file_name: str) -> str:
    """GitHub Release 下载地址"""
    tag = spec.package.git_tag(str(version))
    return f"{spec.package.repo}/releases/download/{tag}/{file_name}"


def release_download_base(spec: PackageSpec, version: SemanticVersion) -> str:
    """GitHub Release 下载目录地址（不含文件名）"""
    tag = spec.package.git_tag(str(version))
    return f"{spec.package.repo}/releases/download/{tag}"


def loadable_archive(platform_dir: PlatformDirectory, build_time: int) -> bytes:
    """可加载文件归档"""
    return create_targz([loadable.file for loadable in platform_dir.loadable], build_time)


def static_archive(platform_dir: PlatformDirectory, build_time: int) -> Optional[bytes]:
    """静态库和头文件归档，两者都不存在时返回 None"""
    targets = list(platform_dir.static) + list(platform_dir.headers)
    if not targets:
        return None
    return create_targz(targets, build_time)


def write_platform_files(
    spec: PackageSpec,
    version: SemanticVersion,
    platform_directories: List[PlatformDirectory],
    output_dir: Path,
    build_time: int,
) -> List[GeneratedAsset]:
    """写出所有平台的 GitHub Release 产物

    Returns:
        List[GeneratedAsset]: 先是全部 loadable 产物，再是全部 static 产物
    """
    loadable_assets = []
    static_assets = []

    for platform_dir in platform_directories:
        os, cpu = platform_dir.os.value, platform_dir.cpu.value

        name = artifact_name(spec.package.name, str(version), LOADABLE, os, cpu)
        loadable_assets.append(GeneratedAsset.write(
            GithubReleaseLoadableAsset(GithubRelease(
                url=release_download_url(spec, version, name),
                os=platform_dir.os,
                cpu=platform_dir.cpu,
            )),
            output_dir / name,
            loadable_archive(platform_dir, build_time),
        ))

        data = static_archive(platform_dir, build_time)
        if data is not None:
            name = artifact_name(spec.package.name, str(version), STATIC, os, cpu)
            static_assets.append(GeneratedAsset.write(
                GithubReleaseStaticAsset(GithubRelease(
                    url=release_download_url(spec, version, name),
                    os=platform_dir.os,
                    cpu=platform_dir.cpu,
                )),
                output_dir / name,
                data,
            ))

    return loadable_assets + static_assets
