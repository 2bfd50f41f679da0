"""
install.sh 生成器

生成的 POSIX shell 脚本按目标平台和产物类型（loadable / static）选择
GitHub Release 下载地址，下载后校验 SHA-256 并解压到指定目录。
"""

from pathlib import Path
from typing import List

from .assets import GeneratedAsset, GithubReleaseLoadableAsset, release_of
from .github_releases import LOADABLE, STATIC
from .platform import platform_label
from .version import SemanticVersion


_HEADER = """#!/bin/sh
set -e

if [ -n "$NO_COLOR" ]; then
    BOLD=""
    RESET=""
else
    BOLD="\\033[1m"
    RESET="\\033[0m"
fi
"""

_CURRENT_TARGET = """
current_target() {
  if [ "$OS" = "Windows_NT" ]; then
    target="windows-x86_64"
    return 0
  fi
  case $(uname -sm) in
  "Darwin x86_64") target=macos-x86_64 ;;
  "Darwin arm64") target=macos-aarch64 ;;
  "Linux x86_64") target=linux-x86_64 ;;
  "Linux aarch64") target=linux-aarch64 ;;
  *) target=$(uname -sm);;
  esac
}
"""

_PROCESS_ARGUMENTS = """
process_arguments() {
  while [ $# -gt 0 ]; do
      case "$1" in
          --help)
              usage
              exit 0
              ;;
          --target=*)
              target="${1#*=}"
              ;;
          --prefix=*)
              prefix="${1#*=}"
              ;;
          static|loadable)
              type="$1"
              ;;
          *)
              echo "Unrecognized option: $1"
              usage
              exit 1
              ;;
      esac
      shift
  done
  if [ -z "$type" ]; then
    type=loadable
  fi
  if [ "$type" != "static" ] && [ "$type" != "loadable" ]; then
      echo "Invalid type '$type'. It must be either 'static' or 'loadable'."
      usage
      exit 1
  fi
  if [ -z "$prefix" ]; then
    prefix="$PWD"
  fi
  if [ -z "$target" ]; then
    current_target
  fi
}
"""


def available_targets(assets: List[GeneratedAsset]) -> List[str]:
    """GitHub Release 产物覆盖的平台（去重并排序）"""
    targets = set()
    for asset in assets:
        release = release_of(asset.kind)
        if release is not None:
            targets.add(platform_label(release.os, release.cpu))
    return sorted(targets)


def _usage(name: str, version: SemanticVersion, targets: List[str]) -> str:
    return f"""
usage() {{
    cat <<EOF
{name}-install {version}

USAGE:
    $0 [static|loadable] [--target=target] [--prefix=path]

OPTIONS:
    --target
            Specify a different target platform to install. Available targets: {", ".join(targets)}

    --prefix
            Specify a different directory to save the binaries. Defaults to the current working directory.
EOF
}}
"""


def _case(asset: GeneratedAsset) -> str:
    release = release_of(asset.kind)
    artifact_type = LOADABLE if isinstance(asset.kind, GithubReleaseLoadableAsset) else STATIC
    return (
        f'    "{platform_label(release.os, release.cpu)}-{artifact_type}")\n'
        f'      url="{release.url}"\n'
        f'      checksum="{asset.checksum_sha256}"\n'
        f'      ;;'
    )


def _main(assets: List[GeneratedAsset]) -> str:
    cases = "\n".join(_case(asset) for asset in assets if release_of(asset.kind) is not None)
    return f"""
main() {{
    type=""
    target=""
    prefix=""
    url=""
    checksum=""

    process_arguments "$@"

    echo "${{BOLD}}Type${{RESET}}: $type"
    echo "${{BOLD}}Target${{RESET}}: $target"
    echo "${{BOLD}}Prefix${{RESET}}: $prefix"

    case "$target-$type" in
{cases}
    *)
      echo "Unsupported platform $target" 1>&2
      exit 1
      ;;
    esac

    extension="${{url##*.}}"

    if [ "$extension" = "zip" ]; then
      tmpfile="$prefix/tmp.zip"
    else
      tmpfile="$prefix/tmp.tar.gz"
    fi

    curl --fail --location --progress-bar --output "$tmpfile" "$url"

    if ! echo "$checksum  $tmpfile" | sha256sum --check --status; then
      echo "Checksum fail!" 1>&2
      rm "$tmpfile"
      exit 1
    fi

    if [ "$extension" = "zip" ]; then
      unzip "$tmpfile" -d "$prefix"
      rm "$tmpfile"
    else
      tar -xzf "$tmpfile" -C "$prefix"
      rm "$tmpfile"
    fi

    echo "✅ $target $type binaries installed at $prefix."
}}
"""


def install_sh(name: str, version: SemanticVersion, assets: List[GeneratedAsset]) -> str:
    """生成 install.sh，每个 GitHub Release 产物对应一个 case 分支"""
    return "\n".join([
        _HEADER,
        _usage(name, version, available_targets(assets)),
        _CURRENT_TARGET,
        _PROCESS_ARGUMENTS,
        _main(assets),
        'main "$@"\n',
    ])


def write_install_sh(name: str, version: SemanticVersion, assets: List[GeneratedAsset], output_dir: Path) -> Path:
    """写出 install.sh 并设置可执行权限"""
    path = Path(output_dir) / "install.sh"
    path.write_text(install_sh(name, version, assets), encoding='utf-8')
    path.chmod(0o755)
    return path
