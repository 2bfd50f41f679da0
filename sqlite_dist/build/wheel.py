"""
Wheel 构建器

生成符合 Python wheel 布局的 zip：包内容 + dist-info 元数据
（METADATA、WHEEL、可选 entry_points.txt、top_level.txt、RECORD）。
"""

import io
import zipfile
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from .. import __version__
from .archive import zip_info
from .checksum import sha256_urlsafe_b64
from .platform import Cpu, Os, Platform
from .version import SemanticVersion


GENERATOR = "sqlite-dist"

PLATFORM_TAGS: Dict[Platform, str] = {
    (Os.MACOS, Cpu.X86_64): "macosx_10_6_x86_64",
    (Os.MACOS, Cpu.AARCH64): "macosx_11_0_arm64",
    (Os.LINUX, Cpu.X86_64): "manylinux_2_17_x86_64.manylinux2014_x86_64.manylinux1_x86_64",
    (Os.LINUX, Cpu.AARCH64): "manylinux_2_17_aarch64.manylinux2014_aarch64",
    (Os.WINDOWS, Cpu.X86_64): "win_amd64",
}


def is_supported_platform(os: Os, cpu: Cpu) -> bool:
    """pip 是否支持该平台"""
    return (os, cpu) in PLATFORM_TAGS


def platform_tag(platform: Optional[Platform]) -> str:
    """wheel 平台标签，无平台时为 any

    Raises:
        ValueError: 平台不受支持（应在上游被过滤）
    """
    if platform is None:
        return "any"
    try:
        return PLATFORM_TAGS[platform]
    except KeyError:
        os, cpu = platform
        raise ValueError(f"不支持的 pip 平台 {os.value}-{cpu.value}，应在上游被过滤") from None


@dataclass(frozen=True)
class WheelFile:
    """已写入 wheel 的文件记录"""
    path: str
    hash: str
    size: int


# ---- dist-info 模板 ----

def dist_info_metadata(
    name: str,
    version: str,
    summary: str = "",
    homepage: str = "",
    author: str = "",
    license: str = "",
    extra_metadata: Optional[List[Tuple[str, str]]] = None,
    description: str = "",
) -> str:
    lines = [
        "Metadata-Version: 2.1",
        f"Name: {name}",
        f"Version: {version}",
        f"Summary: {summary}",
        f"Home-page: {homepage}",
        f"Author: {author}",
        f"License: {license}",
        "Description-Content-Type: text/markdown",
    ]
    for key, value in extra_metadata or []:
        lines.append(f"{key}: {value}")
    return "\n".join(lines) + "\n\n" + description + "\n"


def dist_info_wheel(platform: Optional[Platform]) -> str:
    return (
        "Wheel-Version: 1.0\n"
        f"Generator: {GENERATOR} {__version__}\n"
        "Root-Is-Purelib: false\n"
        f"Tag: py3-none-{platform_tag(platform)}\n"
    )


def dist_info_entrypoints(entrypoints: List[Tuple[str, str]]) -> str:
    """按组输出 entry_points.txt，组的顺序为首次出现顺序"""
    groups: Dict[str, List[str]] = {}
    for group, value in entrypoints:
        groups.setdefault(group, []).append(value)

    text = ""
    for group, values in groups.items():
        text += f"[{group}]\n"
        text += "".join(f"{value}\n" for value in values)
        text += "\n"
    return text


def dist_info_top_level_txt(python_package_name: str) -> str:
    return f"{python_package_name}\n"


def dist_info_record(written_files: List[WheelFile], record_path: str) -> str:
    """RECORD 内容，最后一行是 RECORD 本身（哈希与大小为空）"""
    record = "".join(f"{f.path},sha256={f.hash},{f.size}\n" for f in written_files)
    return record + f"{record_path},,\n"


class WheelBuilder:
    """Wheel 构建器

    用法：多次 add_library_file / add_entrypoint，最后调用 finish 得到字节。
    """

    def __init__(
        self,
        package_name: str,
        version: SemanticVersion,
        build_time: int,
        summary: str = "",
        homepage: str = "",
        author: str = "",
        license: str = "",
        description: str = "",
    ):
        """初始化 wheel 构建器

        Args:
            package_name: 包名（原样保留，可包含 '-'）
            version: 语义化版本，转换为 pip 版本号

        Raises:
            VersionError: 版本号无法转换
        """
        self.package_name = package_name
        self.python_package_name = package_name.replace('-', '_')
        self.package_version = version.to_pip_version()
        self.build_time = build_time
        self.summary = summary
        self.homepage = homepage
        self.author = author
        self.license = license
        self.description = description

        self.written_files: List[WheelFile] = []
        self.entrypoints: List[Tuple[str, str]] = []
        self.extra_metadata: List[Tuple[str, str]] = []

        self._buffer = io.BytesIO()
        self._zipfile = zipfile.ZipFile(self._buffer, 'w', zipfile.ZIP_DEFLATED)
        self._finished = False

    def wheel_name(self, platform: Optional[Platform]) -> str:
        """wheel 文件名"""
        return (
            f"{self.python_package_name}-{self.package_version}"
            f"-py3-none-{platform_tag(platform)}.whl"
        )

    def dist_info_path(self, file: str) -> str:
        return f"{self.python_package_name}-{self.package_version}.dist-info/{file}"

    def _write_file(self, path: str, data: bytes) -> None:
        if self._finished:
            raise RuntimeError("wheel 已完成，不能继续写入")
        self._zipfile.writestr(zip_info(path, self.build_time), data)
        self.written_files.append(WheelFile(path=path, hash=sha256_urlsafe_b64(data), size=len(data)))

    def add_library_file(self, path: str, data: bytes) -> None:
        """写入包内文件，存放于 {python_package_name}/{path}"""
        self._write_file(f"{self.python_package_name}/{path}", data)

    def add_entrypoint(self, group: str, value: str) -> None:
        """添加入口点（至少添加一个时才生成 entry_points.txt）"""
        self.entrypoints.append((group, value))

    def add_metadata(self, key: str, value: str) -> None:
        """添加额外的 METADATA 行，例如 Requires-Dist"""
        self.extra_metadata.append((key, value))

    def finish(self, platform: Optional[Platform]) -> bytes:
        """写入 dist-info 并关闭 zip

        Returns:
            bytes: wheel 数据
        """
        metadata = dist_info_metadata(
            name=self.package_name,
            version=self.package_version,
            summary=self.summary,
            homepage=self.homepage,
            author=self.author,
            license=self.license,
            extra_metadata=self.extra_metadata,
            description=self.description,
        )
        self._write_file(self.dist_info_path("METADATA"), metadata.encode('utf-8'))
        self._write_file(self.dist_info_path("WHEEL"), dist_info_wheel(platform).encode('utf-8'))
        if self.entrypoints:
            self._write_file(
                self.dist_info_path("entry_points.txt"),
                dist_info_entrypoints(self.entrypoints).encode('utf-8'),
            )
        self._write_file(
            self.dist_info_path("top_level.txt"),
            dist_info_top_level_txt(self.python_package_name).encode('utf-8'),
        )

        record_path = self.dist_info_path("RECORD")
        record = dist_info_record(self.written_files, record_path)
        # RECORD 不记录自身的哈希
        self._zipfile.writestr(zip_info(record_path, self.build_time), record.encode('utf-8'))

        self._zipfile.close()
        self._finished = True
        return self._buffer.getvalue()
