"""
RubyGems 构建器

.gem 是一个未压缩的 tar，依次包含 metadata.gz、data.tar.gz、checksums.yaml.gz。
"""

import io
import json
import time
from pathlib import Path
from typing import List

from ruamel.yaml import YAML

from ..config.schema import PackageSpec
from .archive import TarEntry, create_tar, create_targz_entries, gzip_bytes
from .assets import GemAsset, GeneratedAsset
from .checksum import sha256_hex, sha512_hex
from .platform import Cpu, Os, PlatformDirectory, require_loadable
from .version import SemanticVersion


PAYLOAD_MODE = 0o777

_RUBY_OS = {
    Os.MACOS: "darwin",
    Os.LINUX: "linux",
    Os.WINDOWS: "mingw32",
}

_RUBY_CPU = {
    Cpu.X86_64: "x86_64",
    Cpu.AARCH64: "arm64",
}


def ruby_platform(os: Os, cpu: Cpu) -> str:
    """RubyGems 平台标识，例如 arm64-darwin"""
    return f"{_RUBY_CPU[cpu]}-{_RUBY_OS[os]}"


def _yaml_list(items: List[str]) -> str:
    # JSON 字符串同时也是合法的 YAML 双引号标量
    return "\n".join(f"- {json.dumps(item, ensure_ascii=False)}" for item in items)


def _yaml_single_quoted(value: str) -> str:
    return "'" + value.replace("'", "''") + "'"


def gem_metadata(
    name: str,
    version: str,
    platform: str,
    authors: List[str],
    files: List[str],
    licenses: List[str],
    description: str,
    summary: str,
    homepage: str,
    date: str,
) -> str:
    """Gem::Specification 的 YAML 序列化"""
    return f"""--- !ruby/object:Gem::Specification
name: {name}
version: !ruby/object:Gem::Version
  version: {version}
platform: {platform}
authors:
{_yaml_list(authors)}
autorequire:
bindir: bin
cert_chain: []
date: {date} 00:00:00.000000000 Z
dependencies: []
description: {_yaml_single_quoted(description)}
summary: {_yaml_single_quoted(summary)}
email: []
executables: []
extensions: []
extra_rdoc_files: []
files:
{_yaml_list(files)}
homepage: {_yaml_single_quoted(homepage)}
licenses:
{_yaml_list(licenses)}
post_install_message:
rdoc_options: []
require_paths:
- lib
required_ruby_version: !ruby/object:Gem::Requirement
  requirements:
  - - ">="
    - !ruby/object:Gem::Version
      version: '0'
required_rubygems_version: !ruby/object:Gem::Requirement
  requirements:
  - - ">="
    - !ruby/object:Gem::Version
      version: '0'
requirements: []
rubygems_version: 3.4.10
signing_key:
specification_version: 4
test_files: []
"""


def checksums_yaml(metadata_gz: bytes, data_tar_gz: bytes) -> str:
    """checksums.yaml 内容（SHA256 与 SHA512 两组摘要）"""
    document = {
        'SHA256': {
            'metadata.gz': sha256_hex(metadata_gz),
            'data.tar.gz': sha256_hex(data_tar_gz),
        },
        'SHA512': {
            'metadata.gz': sha512_hex(metadata_gz),
            'data.tar.gz': sha512_hex(data_tar_gz),
        },
    }
    yaml = YAML(typ='safe')
    yaml.default_flow_style = False
    yaml.explicit_start = True
    stream = io.StringIO()
    yaml.dump(document, stream)
    return stream.getvalue()


def lib_rb(version: SemanticVersion, entrypoint: str, module_name: str) -> str:
    return f"""
module {module_name}
  class Error < StandardError; end
  VERSION = "{version}"
  def self.loadable_path
    File.expand_path('{entrypoint}', File.dirname(__FILE__))
  end
  def self.load(db)
    db.load_extension(self.loadable_path)
  end
end

"""


class GemBuilder:
    """单个平台的 gem 构建器"""

    def __init__(self, build_time: int):
        self.build_time = build_time
        self._entries: List[TarEntry] = []

    @property
    def library_filenames(self) -> List[str]:
        return [entry.name for entry in self._entries]

    def add_library_file(self, path: str, data: bytes) -> None:
        """写入 data.tar.gz 的条目（权限 0o777）"""
        self._entries.append(TarEntry(name=path, data=data, mode=PAYLOAD_MODE, mtime=self.build_time))

    def gem_name(self, spec: PackageSpec, version: SemanticVersion, os: Os, cpu: Cpu) -> str:
        return f"{spec.package.name}-{version.to_gem_version()}-{ruby_platform(os, cpu)}.gem"

    def metadata_gz(self, spec: PackageSpec, version: SemanticVersion, os: Os, cpu: Cpu) -> bytes:
        package = spec.package
        metadata = gem_metadata(
            name=package.name,
            version=version.to_gem_version(),
            platform=ruby_platform(os, cpu),
            authors=list(package.authors),
            files=self.library_filenames,
            licenses=[package.license],
            description=package.description,
            summary=package.description,
            homepage=package.homepage,
            date=time.strftime("%Y-%m-%d", time.gmtime(self.build_time)),
        )
        return gzip_bytes(metadata.encode('utf-8'), mtime=self.build_time)

    def finish(self, spec: PackageSpec, version: SemanticVersion, os: Os, cpu: Cpu) -> bytes:
        """组装外层 tar

        Returns:
            bytes: .gem 数据
        """
        metadata_gz = self.metadata_gz(spec, version, os, cpu)
        data_tar_gz = create_targz_entries(self._entries, self.build_time)
        checksums_gz = gzip_bytes(
            checksums_yaml(metadata_gz, data_tar_gz).encode('utf-8'),
            mtime=self.build_time,
        )
        return create_tar([
            TarEntry("metadata.gz", metadata_gz, mtime=self.build_time),
            TarEntry("data.tar.gz", data_tar_gz, mtime=self.build_time),
            TarEntry("checksums.yaml.gz", checksums_gz, mtime=self.build_time),
        ])


def write_gems(
    spec: PackageSpec,
    version: SemanticVersion,
    platform_directories: List[PlatformDirectory],
    output_dir: Path,
    build_time: int,
) -> List[GeneratedAsset]:
    """为每个平台写出 gem

    只打包第一个可加载文件和对应的 lib/{name}.rb。

    Raises:
        EmptyPlatformError: 平台目录没有可加载文件
    """
    module_name = spec.targets.gem.module_name
    rb_name = spec.package.name.replace('-', '_')

    assets = []
    for platform_dir in platform_directories:
        require_loadable(platform_dir, "gem")
        loadable = platform_dir.loadable[0]

        gem = GemBuilder(build_time)
        gem.add_library_file(f"lib/{loadable.file.name}", loadable.file.data)
        gem.add_library_file(
            f"lib/{rb_name}.rb",
            lib_rb(version, loadable.file_stem, module_name).encode('utf-8'),
        )

        os, cpu = platform_dir.platform
        assets.append(GeneratedAsset.write(
            GemAsset(os, cpu),
            output_dir / gem.gem_name(spec, version, os, cpu),
            gem.finish(spec, version, os, cpu),
        ))
    return assets
