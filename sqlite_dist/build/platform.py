"""
平台输入模型

定义操作系统/CPU 枚举、平台文件以及按扩展名分类后的平台目录。
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional, Tuple


class PlatformDirectoryError(Exception):
    """平台目录错误（目录名或文件名无法识别）"""
    pass


class Os(str, Enum):
    """操作系统枚举"""
    MACOS = "macos"
    LINUX = "linux"
    WINDOWS = "windows"

    def __str__(self) -> str:
        return self.value


class Cpu(str, Enum):
    """CPU 架构枚举"""
    X86_64 = "x86_64"
    AARCH64 = "aarch64"

    def __str__(self) -> str:
        return self.value


Platform = Tuple[Os, Cpu]


def platform_label(os: Os, cpu: Cpu) -> str:
    """平台标识，例如 linux-x86_64"""
    return f"{os.value}-{cpu.value}"


@dataclass(frozen=True)
class PlatformFile:
    """平台文件

    mode/mtime 为读取时捕获的文件系统元数据，未捕获时为 None，
    打包时使用默认值。
    """
    name: str
    data: bytes
    mode: Optional[int] = None
    mtime: Optional[int] = None

    @property
    def size(self) -> int:
        return len(self.data)

    @classmethod
    def from_path(cls, path: Path, name: Optional[str] = None) -> 'PlatformFile':
        """读取磁盘文件并捕获 mode/mtime"""
        stat = path.stat()
        return cls(
            name=name if name is not None else path.name,
            data=path.read_bytes(),
            mode=stat.st_mode & 0o7777,
            mtime=int(stat.st_mtime),
        )


@dataclass(frozen=True)
class LoadableFile:
    """可加载扩展文件（.so / .dll / .dylib）"""
    file_stem: str
    file: PlatformFile


LOADABLE_SUFFIXES = ('.so', '.dll', '.dylib')
STATIC_SUFFIXES = ('.a',)
HEADER_SUFFIXES = ('.h',)


@dataclass
class PlatformDirectory:
    """按扩展名分类后的平台目录"""
    os: Os
    cpu: Cpu
    path: Path
    loadable: List[LoadableFile] = field(default_factory=list)
    static: List[PlatformFile] = field(default_factory=list)
    headers: List[PlatformFile] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)

    @property
    def platform(self) -> Platform:
        return (self.os, self.cpu)

    @property
    def label(self) -> str:
        return platform_label(self.os, self.cpu)

    @staticmethod
    def parse_directory_name(dirname: str) -> Platform:
        """解析 {os}-{cpu} 目录名

        Raises:
            PlatformDirectoryError: 目录名格式不正确或取值无法识别
        """
        parts = dirname.split('-')
        if len(parts) != 2 or not all(parts):
            raise PlatformDirectoryError(
                f"目录 {dirname} 不是有效的平台目录，名称格式必须为 $OS-$CPU"
            )

        os_name, cpu_name = parts
        try:
            os = Os(os_name)
        except ValueError:
            raise PlatformDirectoryError(
                f"无效的操作系统 '{os_name}'，必须是 'macos'、'linux' 或 'windows' 之一"
            ) from None
        try:
            cpu = Cpu(cpu_name)
        except ValueError:
            raise PlatformDirectoryError(
                f"无效的 CPU 名称 '{cpu_name}'，必须是 'x86_64' 或 'aarch64' 之一"
            ) from None

        return os, cpu

    @classmethod
    def from_path(cls, base_path: Path) -> 'PlatformDirectory':
        """扫描平台目录并按扩展名分类文件

        Args:
            base_path: 平台目录路径（目录名为 {os}-{cpu}）

        Returns:
            PlatformDirectory: 分类结果，各分类内部按文件名排序

        Raises:
            PlatformDirectoryError: 目录名无法识别或文件名不是合法 UTF-8
            OSError: 读取失败
        """
        base_path = Path(base_path)
        if not base_path.name:
            raise PlatformDirectoryError(f"无法获取目录名称: {base_path}")
        _check_utf8(base_path)

        os, cpu = cls.parse_directory_name(base_path.name)
        directory = cls(os=os, cpu=cpu, path=base_path)

        for entry in sorted(base_path.iterdir(), key=lambda p: p.name):
            _check_utf8(entry)
            if not entry.is_file():
                directory.skipped.append(entry.name)
                continue

            suffix = entry.suffix.lower()
            if suffix in LOADABLE_SUFFIXES:
                directory.loadable.append(
                    LoadableFile(file_stem=entry.stem, file=PlatformFile.from_path(entry))
                )
            elif suffix in STATIC_SUFFIXES:
                directory.static.append(PlatformFile.from_path(entry))
            elif suffix in HEADER_SUFFIXES:
                directory.headers.append(PlatformFile.from_path(entry))
            else:
                directory.skipped.append(entry.name)

        return directory


def _check_utf8(path: Path) -> None:
    """文件名中包含无法编码的代理字符时说明不是合法 UTF-8"""
    try:
        path.name.encode('utf-8')
    except UnicodeEncodeError:
        raise PlatformDirectoryError(
            f"目录或文件名只能包含合法的 UTF-8 字符: {path.name!r}"
        ) from None


class EmptyPlatformError(PlatformDirectoryError):
    """平台目录中没有可加载文件"""
    pass


def require_loadable(platform_dir: PlatformDirectory, target: str) -> None:
    """断言平台目录至少包含一个可加载文件

    Raises:
        EmptyPlatformError: 没有可加载文件
    """
    if not platform_dir.loadable:
        raise EmptyPlatformError(
            f"{target} 目标要求平台 {platform_dir.label} 至少包含一个可加载文件"
        )
