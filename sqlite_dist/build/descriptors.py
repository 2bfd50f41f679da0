"""
跨格式描述文件

spm.json 与 sqlpkg.json 都只引用已经登记的 GitHub Release 产物的下载地址
和 SHA-256，不读取任何尚未生成的数据。
"""

import json
from pathlib import Path
from typing import Any, Dict, List

from ..config.schema import PackageSpec
from .assets import (
    GeneratedAsset,
    GithubReleaseLoadableAsset,
    GithubReleaseStaticAsset,
    SpmAsset,
    SqlpkgAsset,
)
from .github_releases import release_download_base
from .platform import Cpu, Os
from .version import SemanticVersion


SPM_VERSION = 0

_SQLPKG_OS = {
    Os.MACOS: "darwin",
    Os.LINUX: "linux",
    Os.WINDOWS: "windows",
}

_SQLPKG_ARCH = {
    Cpu.X86_64: "amd64",
    Cpu.AARCH64: "arm64",
}


def _platform_asset(asset: GeneratedAsset) -> Dict[str, str]:
    release = asset.kind.release
    return {
        'os': release.os.value,
        'cpu': release.cpu.value,
        'url': release.url,
        'checksum_sha256': asset.checksum_sha256,
    }


def spm_document(spec: PackageSpec, release_assets: List[GeneratedAsset]) -> Dict[str, Any]:
    """生成 spm.json 内容

    static 列表为空时输出 null。
    """
    loadable = [
        _platform_asset(asset) for asset in release_assets
        if isinstance(asset.kind, GithubReleaseLoadableAsset)
    ]
    static = [
        _platform_asset(asset) for asset in release_assets
        if isinstance(asset.kind, GithubReleaseStaticAsset)
    ]
    return {
        'version': SPM_VERSION,
        'description': spec.package.description,
        'loadable': loadable,
        'static': static or None,
    }


def write_spm(spec: PackageSpec, release_assets: List[GeneratedAsset], output_dir: Path) -> GeneratedAsset:
    """写出 spm.json"""
    document = spm_document(spec, release_assets)
    return GeneratedAsset.write(
        SpmAsset(),
        output_dir / "spm.json",
        json.dumps(document, indent=2, ensure_ascii=False).encode('utf-8'),
    )


def sqlpkg_platform(os: Os, cpu: Cpu) -> str:
    """sqlpkg 平台标识，例如 darwin-arm64"""
    return f"{_SQLPKG_OS[os]}-{_SQLPKG_ARCH[cpu]}"


def sqlpkg_document(
    spec: PackageSpec,
    version: SemanticVersion,
    release_assets: List[GeneratedAsset],
) -> Dict[str, Any]:
    """生成 sqlpkg.json 内容

    assets.files 将 sqlpkg 平台映射到 loadable 产物文件名，
    assets.checksums 将文件名映射到 "sha256-<hex>"。
    """
    files: Dict[str, str] = {}
    checksums: Dict[str, str] = {}
    for asset in release_assets:
        if not isinstance(asset.kind, GithubReleaseLoadableAsset):
            continue
        release = asset.kind.release
        files[sqlpkg_platform(release.os, release.cpu)] = asset.name
        checksums[asset.name] = f"sha256-{asset.checksum_sha256}"

    package = spec.package
    return {
        'owner': ", ".join(package.authors),
        'name': package.name,
        'version': str(version),
        'homepage': package.homepage,
        'repository': package.repo,
        'authors': list(package.authors),
        'license': package.license,
        'description': package.description,
        'keywords': [],
        'symbols': None,
        'assets': {
            'path': release_download_base(spec, version),
            'pattern': None,
            'files': files,
            'checksums': checksums,
        },
    }


def write_sqlpkg(
    spec: PackageSpec,
    version: SemanticVersion,
    release_assets: List[GeneratedAsset],
    output_dir: Path,
) -> GeneratedAsset:
    """写出 sqlpkg.json"""
    document = sqlpkg_document(spec, version, release_assets)
    return GeneratedAsset.write(
        SqlpkgAsset(),
        output_dir / "sqlpkg.json",
        json.dumps(document, indent=2, ensure_ascii=False).encode('utf-8'),
    )
