"""
生成产物与产物登记表

每个产物在字节写入磁盘后立即登记一次，登记表只追加、不修改。
产物类型是带载荷的标签联合：GitHub Release 产物携带下载地址与平台，
其他类型只携带平台或不携带数据。
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Union, assert_never

from ..utils.paths import write_bytes
from .checksum import sha256_hex
from .platform import Cpu, Os


@dataclass(frozen=True)
class GithubRelease:
    """GitHub Release 下载描述"""
    url: str
    os: Os
    cpu: Cpu


@dataclass(frozen=True)
class NpmAsset:
    os: Optional[Os] = None
    cpu: Optional[Cpu] = None
    name = "npm"


@dataclass(frozen=True)
class GemAsset:
    os: Os
    cpu: Cpu
    name = "gem"


@dataclass(frozen=True)
class PipAsset:
    os: Os
    cpu: Cpu
    name = "pip"


@dataclass(frozen=True)
class DatasetteAsset:
    name = "datasette"


@dataclass(frozen=True)
class SqliteUtilsAsset:
    name = "sqlite-utils"


@dataclass(frozen=True)
class GithubReleaseLoadableAsset:
    release: GithubRelease
    name = "github-release-loadable"


@dataclass(frozen=True)
class GithubReleaseStaticAsset:
    release: GithubRelease
    name = "github-release-static"


@dataclass(frozen=True)
class SqlpkgAsset:
    name = "sqlpkg"


@dataclass(frozen=True)
class SpmAsset:
    name = "spm"


@dataclass(frozen=True)
class AmalgamationAsset:
    name = "amalgamation"


@dataclass(frozen=True)
class ManifestAsset:
    name = "sqlite-dist-manifest"


AssetKind = Union[
    NpmAsset,
    GemAsset,
    PipAsset,
    DatasetteAsset,
    SqliteUtilsAsset,
    GithubReleaseLoadableAsset,
    GithubReleaseStaticAsset,
    SqlpkgAsset,
    SpmAsset,
    AmalgamationAsset,
    ManifestAsset,
]


def in_checksums_txt(kind: AssetKind) -> bool:
    """产物是否列入 checksums.txt"""
    match kind:
        case GithubReleaseLoadableAsset() | GithubReleaseStaticAsset() | SqlpkgAsset() | SpmAsset():
            return True
        case (NpmAsset() | GemAsset() | PipAsset() | DatasetteAsset() | SqliteUtilsAsset()
              | AmalgamationAsset() | ManifestAsset()):
            return False
        case _:
            assert_never(kind)


def release_of(kind: AssetKind) -> Optional[GithubRelease]:
    """取出 GitHub Release 产物携带的下载描述，其他类型返回 None"""
    match kind:
        case GithubReleaseLoadableAsset(release=release) | GithubReleaseStaticAsset(release=release):
            return release
        case (NpmAsset() | GemAsset() | PipAsset() | DatasetteAsset() | SqliteUtilsAsset()
              | SqlpkgAsset() | SpmAsset() | AmalgamationAsset() | ManifestAsset()):
            return None
        case _:
            assert_never(kind)


@dataclass(frozen=True)
class GeneratedAsset:
    """已写入磁盘的产物"""
    kind: AssetKind
    name: str
    path: str
    checksum_sha256: str
    size: int

    @classmethod
    def write(cls, kind: AssetKind, path: Path, contents: bytes) -> 'GeneratedAsset':
        """写入产物字节并计算摘要

        Raises:
            OSError: 写入失败
        """
        path = Path(path)
        write_bytes(path, contents)
        return cls(
            kind=kind,
            name=path.name,
            path=str(path),
            checksum_sha256=sha256_hex(contents),
            size=len(contents),
        )

    def to_dict(self) -> Dict[str, Any]:
        """转换为清单中的条目"""
        return {
            'kind': self.kind.name,
            'name': self.name,
            'path': self.path,
            'checksum_sha256': self.checksum_sha256,
            'size': self.size,
        }


class AssetRegistry:
    """产物登记表

    按构建顺序追加产物，不支持删除和重排。
    """

    def __init__(self):
        self._assets: List[GeneratedAsset] = []

    def append(self, asset: GeneratedAsset) -> GeneratedAsset:
        """登记单个产物"""
        self._assets.append(asset)
        return asset

    def extend(self, assets: List[GeneratedAsset]) -> None:
        """按顺序登记多个产物"""
        for asset in assets:
            self.append(asset)

    def __iter__(self) -> Iterator[GeneratedAsset]:
        return iter(tuple(self._assets))

    def __len__(self) -> int:
        return len(self._assets)

    def __getitem__(self, index: int) -> GeneratedAsset:
        return self._assets[index]

    def snapshot(self) -> List[GeneratedAsset]:
        """当前登记内容的副本"""
        return list(self._assets)

    def of_kind(self, *kinds: type) -> List[GeneratedAsset]:
        """筛选指定类型的产物（保持登记顺序）"""
        return [asset for asset in self._assets if isinstance(asset.kind, kinds)]

    def github_releases(self) -> List[GeneratedAsset]:
        """所有 GitHub Release 产物"""
        return [asset for asset in self._assets if release_of(asset.kind) is not None]

    def for_checksums_txt(self) -> List[GeneratedAsset]:
        """需要列入 checksums.txt 的产物"""
        return [asset for asset in self._assets if in_checksums_txt(asset.kind)]
