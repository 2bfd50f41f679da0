"""
Validate 命令实现

验证包描述文件的命令。
"""

import json
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from ...config import validate_spec


console = Console()


def validate_command(
    spec: str = typer.Argument(..., help="包描述文件路径 (.yaml / .toml)"),
    json_output: bool = typer.Option(False, "--json", help="输出 JSON 格式的错误信息"),
) -> None:
    """验证包描述文件

    检查字段取值以及目标之间的依赖关系。

    示例:
        sqlite-dist validate sqlite-dist.yaml
        sqlite-dist validate sqlite-dist.toml --json
    """
    spec_path = Path(spec)

    if not spec_path.exists():
        console.print(f"[red]包描述文件不存在: {spec_path}[/red]")
        raise typer.Exit(1)

    if not json_output:
        console.print(f"正在验证包描述文件: [cyan]{spec_path}[/cyan]")

    errors = validate_spec(spec_path)

    if not errors:
        if json_output:
            console.print_json(json.dumps({"file": str(spec_path), "valid": True}))
        else:
            console.print("[green]✓ 包描述文件验证通过[/green]")
        return

    if json_output:
        error_data = {
            "file": str(spec_path),
            "valid": False,
            "errors": errors,
            "error_count": len(errors)
        }
        console.print_json(json.dumps(error_data, ensure_ascii=False, default=str))
    else:
        console.print(f"[red]包描述文件验证失败 ({len(errors)} 个错误):[/red]")
        console.print()

        table = Table(title="验证错误")
        table.add_column("位置", style="cyan", no_wrap=True)
        table.add_column("错误信息", style="red")
        table.add_column("输入值", style="yellow")

        for error in errors:
            location = " -> ".join(str(item) for item in error.get('loc', []))
            message = error.get('msg', '未知错误')
            input_value = str(error.get('input', ''))

            if len(input_value) > 47:
                input_value = input_value[:47] + "..."

            table.add_row(
                location or "根级别",
                message,
                input_value or "-"
            )

        console.print(table)

    raise typer.Exit(1)
