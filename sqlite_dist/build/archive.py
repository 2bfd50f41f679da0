"""
归档容器原语

提供 gzip-tar、纯 tar 和 deflate-zip 的内存写入器，供所有上层打包器使用。
条目顺序与输入顺序严格一致。
"""

import gzip
import io
import tarfile
import time
import zipfile
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

from .platform import PlatformFile


DEFAULT_MODE = 0o700


class ArchiveError(Exception):
    """归档写入错误"""
    pass


@dataclass(frozen=True)
class TarEntry:
    """显式指定元数据的 tar 条目"""
    name: str
    data: bytes
    mode: int = 0o644
    mtime: int = 0


def current_build_time() -> int:
    """当前构建时间（Unix 秒）"""
    return int(time.time())


def _tar_info(name: str, size: int, mode: int, mtime: int) -> tarfile.TarInfo:
    info = tarfile.TarInfo(name=name)
    info.size = size
    info.mode = mode
    info.mtime = mtime
    info.type = tarfile.REGTYPE
    return info


def _write_tar_entries(archive: tarfile.TarFile, entries: Iterable[TarEntry]) -> None:
    for entry in entries:
        info = _tar_info(entry.name, len(entry.data), entry.mode, entry.mtime)
        archive.addfile(info, io.BytesIO(entry.data))


def platform_file_entries(files: Sequence[PlatformFile], build_time: int) -> list:
    """将平台文件转换为 tar 条目

    未捕获元数据的文件使用默认权限 0o700 和构建时间。
    """
    return [
        TarEntry(
            name=f.name,
            data=f.data,
            mode=f.mode if f.mode is not None else DEFAULT_MODE,
            mtime=f.mtime if f.mtime is not None else build_time,
        )
        for f in files
    ]


def create_targz(files: Sequence[PlatformFile], build_time: Optional[int] = None) -> bytes:
    """创建 gzip 压缩的 tar 归档

    Args:
        files: 平台文件列表（顺序即归档条目顺序）
        build_time: 构建时间，未捕获 mtime 的文件使用该值

    Returns:
        bytes: .tar.gz 数据

    Raises:
        ArchiveError: 写入失败
    """
    if build_time is None:
        build_time = current_build_time()
    return create_targz_entries(platform_file_entries(files, build_time), build_time)


def create_targz_entries(entries: Sequence[TarEntry], build_time: int) -> bytes:
    """按显式条目创建 gzip 压缩的 tar 归档

    gzip 头中的时间戳固定为 build_time，相同输入得到相同字节。
    """
    buffer = io.BytesIO()
    try:
        with gzip.GzipFile(fileobj=buffer, mode='wb', mtime=build_time) as gz:
            with tarfile.open(fileobj=gz, mode='w', format=tarfile.GNU_FORMAT) as archive:
                _write_tar_entries(archive, entries)
    except (OSError, tarfile.TarError, ValueError) as e:
        raise ArchiveError(f"创建 tar.gz 失败: {e}") from e
    return buffer.getvalue()


def create_tar(entries: Sequence[TarEntry]) -> bytes:
    """创建未压缩的 tar 归档"""
    buffer = io.BytesIO()
    try:
        with tarfile.open(fileobj=buffer, mode='w', format=tarfile.GNU_FORMAT) as archive:
            _write_tar_entries(archive, entries)
    except (OSError, tarfile.TarError, ValueError) as e:
        raise ArchiveError(f"创建 tar 失败: {e}") from e
    return buffer.getvalue()


def zip_info(name: str, build_time: int, mode: int = 0o644) -> zipfile.ZipInfo:
    """创建带固定时间戳的 zip 条目信息"""
    # zip 时间戳最早只能表示 1980 年
    timestamp = time.gmtime(max(build_time, 315532800))[:6]
    info = zipfile.ZipInfo(filename=name, date_time=timestamp)
    info.compress_type = zipfile.ZIP_DEFLATED
    info.external_attr = (0o100000 | mode) << 16
    return info


def create_zip(files: Sequence[PlatformFile], build_time: Optional[int] = None) -> bytes:
    """创建 deflate 压缩的 zip 归档

    Args:
        files: 平台文件列表（顺序即归档条目顺序）
        build_time: 未捕获 mtime 的文件使用的时间戳

    Returns:
        bytes: .zip 数据

    Raises:
        ArchiveError: 写入失败
    """
    if build_time is None:
        build_time = current_build_time()

    buffer = io.BytesIO()
    try:
        with zipfile.ZipFile(buffer, 'w', zipfile.ZIP_DEFLATED) as zf:
            for f in files:
                mtime = f.mtime if f.mtime is not None else build_time
                mode = f.mode if f.mode is not None else DEFAULT_MODE
                zf.writestr(zip_info(f.name, mtime, mode), f.data)
    except (OSError, zipfile.BadZipFile, ValueError) as e:
        raise ArchiveError(f"创建 zip 失败: {e}") from e
    return buffer.getvalue()


def gzip_bytes(data: bytes, mtime: Optional[int] = None) -> bytes:
    """gzip 压缩单个字节块"""
    return gzip.compress(data, mtime=mtime)
