"""
Inspect 命令实现

查看构建清单（sqlite-dist-manifest.json）中记录的产物。
"""

import json
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from ...build.manifest import load_manifest
from ...utils import format_size


console = Console()


def inspect_command(
    manifest: str = typer.Argument(..., help="构建清单文件路径"),
    json_output: bool = typer.Option(False, "--json", help="输出 JSON 格式"),
) -> None:
    """查看构建清单

    示例:
        sqlite-dist inspect out/sqlite-dist-manifest.json
        sqlite-dist inspect out/sqlite-dist-manifest.json --json
    """
    manifest_path = Path(manifest)

    if not manifest_path.exists():
        console.print(f"[red]构建清单不存在: {manifest_path}[/red]")
        raise typer.Exit(1)

    try:
        document = load_manifest(manifest_path)
    except (OSError, ValueError) as e:
        console.print(f"[red]读取构建清单失败: {e}[/red]")
        raise typer.Exit(1)

    if json_output:
        console.print_json(json.dumps(document, ensure_ascii=False))
        return

    build_info = document.get('build_info', {})
    console.print("[bold]构建信息[/bold]")
    console.print(f"  sqlite-dist 版本: {build_info.get('sqlite_dist_version', '-')}")
    console.print(f"  包版本: {build_info.get('version', '-')}")
    console.print(f"  构建时间: {build_info.get('timestamp', '-')}")
    console.print()

    table = Table(title=f"产物 ({len(document['artifacts'])})")
    table.add_column("类型", style="cyan")
    table.add_column("文件", style="green")
    table.add_column("大小", justify="right")
    table.add_column("SHA-256", style="dim")
    for artifact in document['artifacts']:
        size = artifact.get('size')
        checksum = artifact.get('checksum_sha256')
        table.add_row(
            str(artifact.get('kind', '-')),
            str(artifact.get('name', '-')),
            format_size(size) if size is not None else "-",
            checksum[:16] if checksum else "-",
        )
    console.print(table)
