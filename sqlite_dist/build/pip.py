"""
pip 目标

为每个受支持的平台生成基础 wheel，并可选生成 datasette / sqlite-utils
插件 wheel（平台无关，依赖基础包）。
"""

from pathlib import Path
from typing import List, Optional

from ..config.schema import PackageSpec
from ..utils.logging import warning, LogStage
from .assets import DatasetteAsset, GeneratedAsset, PipAsset, SqliteUtilsAsset
from .platform import PlatformDirectory, require_loadable
from .version import SemanticVersion
from .wheel import WheelBuilder, is_supported_platform


def base_init_py(package_name: str, version: str, entrypoint: str) -> str:
    return f'''
from os import path
import sqlite3

__version__ = "{version}"
__version_info__ = tuple(__version__.split("."))

def loadable_path():
  """ Returns the full path to the {package_name} loadable SQLite extension bundled with this package """

  loadable_path = path.join(path.dirname(__file__), "{entrypoint}")
  return path.normpath(loadable_path)

def load(conn: sqlite3.Connection)  -> None:
  """ Load the {package_name} SQLite extension into the given database connection. """

  conn.load_extension(loadable_path())

'''


def plugin_init_py(host_module: str, dep_library: str, version: str) -> str:
    """datasette / sqlite_utils 插件的 __init__.py"""
    return f'''
from {host_module} import hookimpl
import {dep_library}

__version__ = "{version}"
__version_info__ = tuple(__version__.split("."))

@hookimpl
def prepare_connection(conn):
  conn.enable_load_extension(True)
  {dep_library}.load(conn)
  conn.enable_load_extension(False)
'''


def new_wheel(spec: PackageSpec, package_name: str, version: SemanticVersion, build_time: int) -> WheelBuilder:
    package = spec.package
    return WheelBuilder(
        package_name,
        version,
        build_time,
        summary=package.description,
        homepage=package.homepage,
        author=", ".join(package.authors),
        license=package.license,
        description=package.description,
    )


def write_base_packages(
    spec: PackageSpec,
    version: SemanticVersion,
    platform_directories: List[PlatformDirectory],
    output_dir: Path,
    build_time: int,
) -> List[GeneratedAsset]:
    """为每个受支持平台写出基础 wheel

    Raises:
        EmptyPlatformError: 平台目录没有可加载文件
        VersionError: 版本号无法转换为 pip 版本
    """
    extra_init_py: Optional[str] = None
    if spec.targets.pip.extra_init_py is not None:
        extra_init_py = Path(spec.targets.pip.extra_init_py).read_text(encoding='utf-8')

    assets = []
    for platform_dir in platform_directories:
        if not is_supported_platform(platform_dir.os, platform_dir.cpu):
            warning(f"pip 不支持平台 {platform_dir.label}，已跳过", stage=LogStage.PIP)
            continue
        require_loadable(platform_dir, "pip")

        wheel = new_wheel(spec, spec.package.name, version, build_time)
        entrypoint = platform_dir.loadable[0].file_stem
        init_py = base_init_py(wheel.package_name, wheel.package_version, entrypoint)
        if extra_init_py:
            init_py += extra_init_py
        wheel.add_library_file("__init__.py", init_py.encode('utf-8'))

        for loadable in platform_dir.loadable:
            wheel.add_library_file(loadable.file.name, loadable.file.data)

        platform = platform_dir.platform
        wheel_name = wheel.wheel_name(platform)
        assets.append(GeneratedAsset.write(
            PipAsset(platform_dir.os, platform_dir.cpu),
            output_dir / wheel_name,
            wheel.finish(platform),
        ))
    return assets


def _write_plugin(
    spec: PackageSpec,
    version: SemanticVersion,
    output_dir: Path,
    build_time: int,
    package_prefix: str,
    host_module: str,
    host_distribution: str,
    kind,
) -> GeneratedAsset:
    base_name = spec.package.name
    dep_library = base_name.replace('-', '_')
    pip_version = version.to_pip_version()

    wheel = new_wheel(spec, f"{package_prefix}-{base_name}", version, build_time)
    wheel.add_library_file(
        "__init__.py",
        plugin_init_py(host_module, dep_library, pip_version).encode('utf-8'),
    )
    wheel.add_entrypoint(host_module, f"{dep_library} = {wheel.python_package_name}")
    wheel.add_metadata("Requires-Dist", host_distribution)
    wheel.add_metadata("Requires-Dist", f"{base_name} (=={pip_version})")

    wheel_name = wheel.wheel_name(None)
    return GeneratedAsset.write(kind, output_dir / wheel_name, wheel.finish(None))


def write_datasette(
    spec: PackageSpec,
    version: SemanticVersion,
    output_dir: Path,
    build_time: int,
) -> GeneratedAsset:
    """写出 datasette-{name} 插件 wheel"""
    return _write_plugin(
        spec, version, output_dir, build_time,
        package_prefix="datasette",
        host_module="datasette",
        host_distribution="datasette",
        kind=DatasetteAsset(),
    )


def write_sqlite_utils(
    spec: PackageSpec,
    version: SemanticVersion,
    output_dir: Path,
    build_time: int,
) -> GeneratedAsset:
    """写出 sqlite-utils-{name} 插件 wheel"""
    return _write_plugin(
        spec, version, output_dir, build_time,
        package_prefix="sqlite-utils",
        host_module="sqlite_utils",
        host_distribution="sqlite-utils",
        kind=SqliteUtilsAsset(),
    )
