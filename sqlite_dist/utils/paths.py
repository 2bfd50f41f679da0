"""
路径工具

提供输出目录与文件写入相关的工具函数。
"""

import shutil
from pathlib import Path
from typing import Union


def ensure_directory(path: Union[str, Path]) -> Path:
    """确保目录存在

    Args:
        path: 目录路径

    Returns:
        Path: 目录路径
    """
    dir_path = Path(path)
    dir_path.mkdir(parents=True, exist_ok=True)
    return dir_path


def create_target_directory(output_dir: Path, name: str) -> Path:
    """在输出根目录下创建某个目标的子目录

    子目录已存在时报错，保证一次构建的产物不会与旧产物混在一起。

    Raises:
        FileExistsError: 子目录已存在
    """
    path = output_dir / name
    path.mkdir(parents=False, exist_ok=False)
    return path


def clear_directory(path: Union[str, Path]) -> None:
    """清空目录内容（保留目录本身）"""
    dir_path = Path(path)
    if not dir_path.exists():
        return
    for item in dir_path.iterdir():
        if item.is_dir() and not item.is_symlink():
            shutil.rmtree(item)
        else:
            item.unlink()


def write_bytes(path: Union[str, Path], data: Union[bytes, str]) -> Path:
    """写入完整文件内容

    Args:
        path: 目标路径
        data: 字节或 UTF-8 文本

    Returns:
        Path: 目标路径
    """
    file_path = Path(path)
    if isinstance(data, str):
        data = data.encode('utf-8')
    file_path.write_bytes(data)
    return file_path


def format_size(size_bytes: int) -> str:
    """格式化文件大小

    Args:
        size_bytes: 字节数

    Returns:
        str: 格式化的大小字符串
    """
    if size_bytes == 0:
        return "0 B"

    units = ["B", "KB", "MB", "GB", "TB"]
    unit_index = 0
    size = float(size_bytes)

    while size >= 1024.0 and unit_index < len(units) - 1:
        size /= 1024.0
        unit_index += 1

    if unit_index == 0:
        return f"{int(size)} {units[unit_index]}"
    else:
        return f"{size:.1f} {units[unit_index]}"
