"""
平台目录与收集器单元测试
"""

from unittest.mock import patch

import pytest

from sqlite_dist.build.collector import PlatformCollector, collect_platform_directories
from sqlite_dist.build.platform import (
    Cpu,
    EmptyPlatformError,
    Os,
    PlatformDirectory,
    PlatformDirectoryError,
    require_loadable,
)

from conftest import write_platform


class TestParseDirectoryName:
    """平台目录名解析测试"""

    @pytest.mark.parametrize("name,expected", [
        ("macos-x86_64", (Os.MACOS, Cpu.X86_64)),
        ("macos-aarch64", (Os.MACOS, Cpu.AARCH64)),
        ("linux-x86_64", (Os.LINUX, Cpu.X86_64)),
        ("windows-aarch64", (Os.WINDOWS, Cpu.AARCH64)),
    ])
    def test_valid(self, name, expected):
        assert PlatformDirectory.parse_directory_name(name) == expected

    @pytest.mark.parametrize("name", ["linux", "linux-x86_64-musl", "-x86_64", "linux-"])
    def test_bad_shape(self, name):
        """测试名称格式错误"""
        with pytest.raises(PlatformDirectoryError, match=r"\$OS-\$CPU"):
            PlatformDirectory.parse_directory_name(name)

    def test_unknown_os(self):
        with pytest.raises(PlatformDirectoryError, match="freebsd"):
            PlatformDirectory.parse_directory_name("freebsd-x86_64")

    def test_unknown_cpu(self):
        with pytest.raises(PlatformDirectoryError, match="arm"):
            PlatformDirectory.parse_directory_name("linux-arm")


class TestPlatformDirectory:
    """平台目录分类测试"""

    def test_classification(self, tmp_path):
        """测试按扩展名分类"""
        path = write_platform(tmp_path, "linux-x86_64", {
            "sample0.so": b"so",
            "libsample0.a": b"a",
            "sample.h": b"h",
            "README.md": b"readme",
        })
        directory = PlatformDirectory.from_path(path)

        assert directory.platform == (Os.LINUX, Cpu.X86_64)
        assert directory.label == "linux-x86_64"
        assert [f.file_stem for f in directory.loadable] == ["sample0"]
        assert directory.loadable[0].file.data == b"so"
        assert [f.name for f in directory.static] == ["libsample0.a"]
        assert [f.name for f in directory.headers] == ["sample.h"]
        assert directory.skipped == ["README.md"]

    def test_sorted_by_name(self, tmp_path):
        """测试分类内部按文件名排序"""
        path = write_platform(tmp_path, "windows-x86_64", {"b.dll": b"b", "a.dll": b"a"})
        directory = PlatformDirectory.from_path(path)
        assert [f.file.name for f in directory.loadable] == ["a.dll", "b.dll"]

    def test_captures_metadata(self, tmp_path):
        """测试读取时捕获 mode 和 mtime"""
        path = write_platform(tmp_path, "macos-aarch64", {"x.dylib": b"x"})
        (path / "x.dylib").chmod(0o755)
        directory = PlatformDirectory.from_path(path)
        file = directory.loadable[0].file
        assert file.mode == 0o755
        assert file.mtime is not None
        assert file.size == 1

    def test_nested_directory_skipped(self, tmp_path):
        """测试子目录被跳过"""
        path = write_platform(tmp_path, "linux-aarch64", {"x.so": b"x"})
        (path / "nested").mkdir()
        directory = PlatformDirectory.from_path(path)
        assert directory.skipped == ["nested"]

    def test_require_loadable(self, tmp_path):
        """测试没有可加载文件时报错"""
        path = write_platform(tmp_path, "linux-aarch64", {"libx.a": b"a"})
        directory = PlatformDirectory.from_path(path)
        with pytest.raises(EmptyPlatformError, match="npm"):
            require_loadable(directory, "npm")


class TestPlatformCollector:
    """PlatformCollector 测试"""

    def test_collect_sorted(self, input_dir):
        """测试平台目录按名称排序"""
        directories = collect_platform_directories(input_dir)
        assert [d.label for d in directories] == ["linux-aarch64", "macos-x86_64"]

    def test_statistics(self, input_dir):
        collector = PlatformCollector()
        collector.collect(input_dir)
        stats = collector.get_statistics()
        assert stats['platforms'] == 2
        assert stats['loadable_files'] == 2
        assert stats['static_files'] == 1
        assert stats['header_files'] == 0
        assert stats['total_size'] > 0

    def test_skipped_files_warned(self, input_dir):
        """测试未知文件产生警告"""
        (input_dir / "linux-aarch64" / "notes.txt").write_text("x")
        with patch("sqlite_dist.build.collector.warning") as mock_warning:
            collect_platform_directories(input_dir)
        mock_warning.assert_called_once()
        assert "notes.txt" in mock_warning.call_args[0][0]

    def test_file_in_input_root(self, input_dir):
        """测试输入根目录中的普通文件报错"""
        (input_dir / "stray.txt").write_text("x")
        with pytest.raises(PlatformDirectoryError):
            collect_platform_directories(input_dir)

    def test_bad_directory_name(self, tmp_path):
        write_platform(tmp_path, "plan9-x86_64", {"x.so": b"x"})
        with pytest.raises(PlatformDirectoryError, match="plan9"):
            collect_platform_directories(tmp_path)

    def test_missing_input(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            collect_platform_directories(tmp_path / "missing")
