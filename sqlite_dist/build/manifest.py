"""
最终输出：checksums.txt 与构建清单
"""

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List

from .. import __version__
from ..utils.paths import write_bytes
from .assets import AssetRegistry, GeneratedAsset, ManifestAsset
from .version import SemanticVersion


CHECKSUMS_TXT = "checksums.txt"
MANIFEST_NAME = "sqlite-dist-manifest.json"


def checksums_txt(assets: List[GeneratedAsset]) -> str:
    """每行 "{name} {sha256}"，行之间以换行连接，末尾不带换行"""
    return "\n".join(f"{asset.name} {asset.checksum_sha256}" for asset in assets)


def write_checksums_txt(registry: AssetRegistry, output_dir: Path) -> Path:
    path = Path(output_dir) / CHECKSUMS_TXT
    write_bytes(path, checksums_txt(registry.for_checksums_txt()))
    return path


def manifest_document(
    registry: AssetRegistry,
    version: SemanticVersion,
    manifest_path: Path,
    build_time: int,
) -> Dict[str, Any]:
    """构建清单

    artifacts 按登记顺序列出全部产物，最后一项是清单自身（摘要和大小为 null）。
    """
    artifacts = [asset.to_dict() for asset in registry]
    artifacts.append({
        'kind': ManifestAsset.name,
        'name': manifest_path.name,
        'path': str(manifest_path),
        'checksum_sha256': None,
        'size': None,
    })
    return {
        'build_info': {
            'sqlite_dist_version': __version__,
            'version': str(version),
            'timestamp': datetime.fromtimestamp(build_time, tz=timezone.utc).isoformat(),
        },
        'artifacts': artifacts,
    }


def write_manifest(
    registry: AssetRegistry,
    version: SemanticVersion,
    output_dir: Path,
    build_time: int,
) -> GeneratedAsset:
    """写出清单并登记为 sqlite-dist-manifest 产物"""
    path = Path(output_dir) / MANIFEST_NAME
    document = manifest_document(registry, version, path, build_time)
    contents = json.dumps(document, indent=2, ensure_ascii=False).encode('utf-8')
    return registry.append(GeneratedAsset.write(ManifestAsset(), path, contents))


def load_manifest(path: Path) -> Dict[str, Any]:
    """读取清单文件

    Raises:
        OSError: 读取失败
        ValueError: 不是合法的 JSON 或缺少 artifacts
    """
    document = json.loads(Path(path).read_text(encoding='utf-8'))
    if not isinstance(document, dict) or not isinstance(document.get('artifacts'), list):
        raise ValueError(f"不是有效的构建清单: {path}")
    return document
