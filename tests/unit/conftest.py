"""
测试公共夹具
"""

from pathlib import Path
from typing import Any, Dict

import pytest

from sqlite_dist.build.collector import collect_platform_directories
from sqlite_dist.build.version import SemanticVersion
from sqlite_dist.config.schema import PackageSpec


BUILD_TIME = 1700000000


def make_spec_dict(**targets: Any) -> Dict[str, Any]:
    """构造最小可用的描述字典"""
    return {
        'package': {
            'name': 'sqlite-sample',
            'version': '0.1.0',
            'authors': ['Alex Garcia'],
            'license': 'MIT',
            'description': 'A sample SQLite extension',
            'homepage': 'https://example.com/sqlite-sample',
            'repo': 'https://github.com/asg017/sqlite-sample',
        },
        'targets': targets,
    }


def make_spec(**targets: Any) -> PackageSpec:
    return PackageSpec.from_dict(make_spec_dict(**targets))


def write_platform(input_dir: Path, label: str, files: Dict[str, bytes]) -> Path:
    """在输入目录下创建一个平台目录"""
    platform_dir = input_dir / label
    platform_dir.mkdir(parents=True)
    for name, data in files.items():
        (platform_dir / name).write_bytes(data)
    return platform_dir


@pytest.fixture
def version() -> SemanticVersion:
    return SemanticVersion.parse("0.1.0")


@pytest.fixture
def input_dir(tmp_path: Path) -> Path:
    """macos-x86_64 只有 .dylib；linux-aarch64 有 .so 和 .a"""
    root = tmp_path / "input"
    write_platform(root, "macos-x86_64", {"sample0.dylib": b"MACHO-sample0"})
    write_platform(root, "linux-aarch64", {
        "sample0.so": b"ELF-sample0",
        "libsample0.a": b"!<arch>sample0",
    })
    return root


@pytest.fixture
def platform_directories(input_dir: Path):
    return collect_platform_directories(input_dir)


@pytest.fixture
def output_dir(tmp_path: Path) -> Path:
    path = tmp_path / "output"
    path.mkdir()
    return path
