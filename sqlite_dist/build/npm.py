"""
npm 构建器

每个平台生成一个只包含二进制的子包 {name}-{os}-{cpu}，再生成一个伞包 {name}，
伞包通过 optionalDependencies 引用全部平台子包，并在运行时定位对应平台的
可加载文件。
"""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from ..config.schema import PackageSpec
from .archive import create_targz
from .assets import GeneratedAsset, NpmAsset
from .platform import Cpu, EmptyPlatformError, Os, PlatformDirectory, PlatformFile, require_loadable
from .version import SemanticVersion


ESM = "esm"
CJS = "cjs"

# 平台子包名中使用的操作系统名称
_NPM_OS = {
    Os.LINUX: "linux",
    Os.MACOS: "darwin",
    Os.WINDOWS: "windows",
}

# node 中 process.platform 的取值
_NODE_PLATFORM = {
    Os.LINUX: "linux",
    Os.MACOS: "darwin",
    Os.WINDOWS: "win32",
}

_NPM_CPU = {
    Cpu.X86_64: "x64",
    Cpu.AARCH64: "arm64",
}


def npm_os(os: Os) -> str:
    return _NPM_OS[os]


def npm_cpu(cpu: Cpu) -> str:
    return _NPM_CPU[cpu]


def platform_package_name(name: str, os: Os, cpu: Cpu) -> str:
    """平台子包名，例如 sqlite-hello-darwin-arm64"""
    return f"{name}-{npm_os(os)}-{npm_cpu(cpu)}"


def package_json(
    spec: PackageSpec,
    name: str,
    version: str,
    optional_dependencies: Optional[Dict[str, str]] = None,
    os: Optional[List[str]] = None,
    cpu: Optional[List[str]] = None,
) -> Dict[str, Any]:
    """生成 package.json 内容，值为 None 的可选字段不输出

    平台子包（指定了 os/cpu）只包含二进制文件，不声明入口字段。
    """
    package = spec.package
    document: Dict[str, Any] = {
        'name': name,
        'version': version,
        'author': package.authors[0],
        'license': package.license,
        'description': package.description,
        'repository': {
            'type': 'git',
            'url': package.repo,
        },
        'files': [],
        'keywords': [],
    }
    if os is None and cpu is None:
        document.update({
            'main': './index.cjs',
            'module': './index.mjs',
            'types': './index.d.ts',
            'exports': {
                '.': {
                    'require': './index.cjs',
                    'import': './index.mjs',
                    'types': './index.d.ts',
                },
            },
        })
    if optional_dependencies is not None:
        document['optionalDependencies'] = optional_dependencies
    if os is not None:
        document['os'] = os
    if cpu is not None:
        document['cpu'] = cpu
    return document


def readme(spec: PackageSpec, name: str) -> str:
    return f"# {name}\n\n{spec.package.description}\n\nSee {spec.package.homepage} for details.\n"


INDEX_DTS = """
/**
 * Returns the full path to the loadable SQLite extension for the current platform.
 */
export declare function getLoadablePath(): string;


interface Db {
    loadExtension(file: string, entrypoint?: string | undefined): void;
}

/**
 * Loads the SQLite extension into the given database connection.
 */
export declare function load(db: Db): void;
"""


_IMPORTS = {
    ESM: """
import { join } from "node:path";
import { fileURLToPath } from "node:url";
import { arch, platform } from "node:process";
import { statSync } from "node:fs";

const packageDirectory = fileURLToPath(new URL(".", import.meta.url));
""",
    CJS: """
const { join } = require("node:path");
const { arch, platform } = require("node:process");
const { statSync } = require("node:fs");

const packageDirectory = __dirname;
""",
}

_EXPORTS = {
    ESM: "export { getLoadablePath, load };",
    CJS: "module.exports = { getLoadablePath, load };",
}


def index_js(
    package_name: str,
    entrypoint: str,
    supported_platforms: List[Tuple[Os, Cpu]],
    js_format: str,
) -> str:
    """伞包入口脚本（ESM 或 CJS）"""
    platforms = json.dumps([[_NODE_PLATFORM[os], npm_cpu(cpu)] for os, cpu in supported_platforms])
    return f"""{_IMPORTS[js_format]}
const BASE_PACKAGE_NAME = {json.dumps(package_name)};
const ENTRYPOINT_BASE_NAME = {json.dumps(entrypoint)};
const supportedPlatforms = {platforms};

const invalidPlatformErrorMessage = `Unsupported platform for ${{BASE_PACKAGE_NAME}}, on a ${{platform}}-${{arch}} machine. Supported platforms are (${{supportedPlatforms
  .map(([p, a]) => `${{p}}-${{a}}`)
  .join(",")}}). Consult the ${{BASE_PACKAGE_NAME}} NPM package README for details.`;

const extensionNotFoundErrorMessage = packageName => `Loadable extension for ${{BASE_PACKAGE_NAME}} not found. Was the ${{packageName}} package installed?`;

function validPlatform(platform, arch) {{
  return (
    supportedPlatforms.find(([p, a]) => platform === p && arch === a) !== undefined
  );
}}
function extensionSuffix(platform) {{
  if (platform === "win32") return "dll";
  if (platform === "darwin") return "dylib";
  return "so";
}}
function platformPackageName(platform, arch) {{
  const os = platform === "win32" ? "windows" : platform;
  return `${{BASE_PACKAGE_NAME}}-${{os}}-${{arch}}`;
}}

function getLoadablePath() {{
  if (!validPlatform(platform, arch)) {{
    throw new Error(
      invalidPlatformErrorMessage
    );
  }}
  const packageName = platformPackageName(platform, arch);
  const loadablePath = join(
    packageDirectory,
    "..",
    packageName,
    `${{ENTRYPOINT_BASE_NAME}}.${{extensionSuffix(platform)}}`
  );
  if (!statSync(loadablePath, {{ throwIfNoEntry: false }})) {{
    throw new Error(extensionNotFoundErrorMessage(packageName));
  }}

  return loadablePath;
}}

function load(db) {{
  db.loadExtension(getLoadablePath());
}}

{_EXPORTS[js_format]}
"""


def _json_file(name: str, document: Dict[str, Any]) -> PlatformFile:
    return PlatformFile(name, json.dumps(document, indent=2, ensure_ascii=False).encode('utf-8'))


def _text_file(name: str, text: str) -> PlatformFile:
    return PlatformFile(name, text.encode('utf-8'))


def write_npm_packages(
    spec: PackageSpec,
    version: SemanticVersion,
    platform_directories: List[PlatformDirectory],
    output_dir: Path,
    build_time: int,
) -> List[GeneratedAsset]:
    """写出全部 npm tarball

    Returns:
        List[GeneratedAsset]: 先是各平台子包，最后是伞包

    Raises:
        EmptyPlatformError: 没有平台目录或平台目录没有可加载文件
    """
    if not platform_directories:
        raise EmptyPlatformError("npm 目标至少需要一个平台目录")
    for platform_dir in platform_directories:
        require_loadable(platform_dir, "npm")

    name = spec.package.name
    npm_version = str(version)
    entrypoint = platform_directories[0].loadable[0].file_stem

    assets = []
    optional_dependencies: Dict[str, str] = {}
    for platform_dir in platform_directories:
        os, cpu = platform_dir.platform
        pkg_name = platform_package_name(name, os, cpu)
        optional_dependencies[pkg_name] = npm_version

        document = package_json(spec, pkg_name, npm_version, os=[npm_os(os)], cpu=[npm_cpu(cpu)])
        files = [
            _text_file("package/README.md", readme(spec, pkg_name)),
            _json_file("package/package.json", document),
        ]
        for loadable in platform_dir.loadable:
            files.append(PlatformFile(
                name=f"package/{loadable.file.name}",
                data=loadable.file.data,
                mode=loadable.file.mode,
                mtime=loadable.file.mtime,
            ))

        assets.append(GeneratedAsset.write(
            NpmAsset(os, cpu),
            output_dir / f"{pkg_name}.tar.gz",
            create_targz(files, build_time),
        ))

    platforms = [platform_dir.platform for platform_dir in platform_directories]
    top_document = package_json(spec, name, npm_version, optional_dependencies=optional_dependencies)
    top_files = [
        _text_file("package/README.md", readme(spec, name)),
        _json_file("package/package.json", top_document),
        _text_file("package/index.mjs", index_js(name, entrypoint, platforms, ESM)),
        _text_file("package/index.cjs", index_js(name, entrypoint, platforms, CJS)),
        _text_file("package/index.d.ts", INDEX_DTS),
    ]
    assets.append(GeneratedAsset.write(
        NpmAsset(),
        output_dir / f"{name}.tar.gz",
        create_targz(top_files, build_time),
    ))
    return assets
