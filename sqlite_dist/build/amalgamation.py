"""
源码合并包

将描述文件中列出的源码文件打成 tar.gz 和 zip 两份归档，
归档内保留描述文件中写的相对路径。
"""

from pathlib import Path
from typing import List

from ..config.schema import PackageSpec
from .archive import create_targz, create_zip
from .assets import AmalgamationAsset, GeneratedAsset
from .platform import PlatformFile
from .version import SemanticVersion


def read_sources(include: List[Path], spec_directory: Path) -> List[PlatformFile]:
    """读取源码文件，归档条目名使用描述文件中的原始路径

    Raises:
        OSError: 文件不存在或无法读取
    """
    files = []
    for relative_path in include:
        files.append(PlatformFile.from_path(spec_directory / relative_path, name=relative_path.as_posix()))
    return files


def write_amalgamation(
    spec: PackageSpec,
    version: SemanticVersion,
    spec_directory: Path,
    output_dir: Path,
    build_time: int,
) -> List[GeneratedAsset]:
    """写出合并包（先 tar.gz 后 zip）"""
    include = spec.targets.amalgamation.include
    files = read_sources(include, spec_directory)
    base_name = f"{spec.package.name}-{version}-amalgamation"

    return [
        GeneratedAsset.write(
            AmalgamationAsset(),
            output_dir / f"{base_name}.tar.gz",
            create_targz(files, build_time),
        ),
        GeneratedAsset.write(
            AmalgamationAsset(),
            output_dir / f"{base_name}.zip",
            create_zip(files, build_time),
        ),
    ]
