"""
Build 命令实现

从包描述文件和平台目录构建全部分发包。
"""

import traceback
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from ...config import load_spec, ConfigError, ConfigValidationError
from ...utils import format_size
from ...utils.logging import set_log_level, set_log_file, OutputLevel


console = Console()


def build_command(
    spec: str = typer.Argument(..., help="包描述文件路径 (.yaml / .toml)"),
    input_dir: str = typer.Option(..., "--input", "-i", help="平台目录所在的输入根目录"),
    output_dir: str = typer.Option(..., "--output", "-o", help="输出根目录"),
    version: Optional[str] = typer.Option(None, "--version", help="版本号，覆盖描述文件中的 package.version"),
    force: bool = typer.Option(False, "--force", "-f", help="清空已存在的输出目录"),
    log_file: Optional[str] = typer.Option(None, "--log-file", help="日志输出文件"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="输出详细调试日志 (DEBUG 级别)"),
) -> None:
    """构建全部分发包

    示例:
        sqlite-dist build sqlite-dist.yaml -i dist/ -o out/ --version 0.1.0
        sqlite-dist build sqlite-dist.toml -i dist/ -o out/ --force
    """
    from ...build.builder import Builder

    spec_path = Path(spec)
    input_path = Path(input_dir)
    output_path = Path(output_dir)

    # 初始化日志：在任何输出前设置
    if verbose:
        set_log_level(OutputLevel.DEBUG)
    else:
        set_log_level(OutputLevel.INFO)

    if log_file:
        try:
            set_log_file(log_file)
        except OSError:
            console.print(f"[yellow]无法写入日志文件: {log_file}[/yellow]")

    if not input_path.is_dir():
        console.print(f"[red]输入目录不存在: {input_path}[/red]")
        raise typer.Exit(1)

    try:
        console.print(f"[cyan]正在加载包描述文件[/cyan]: {spec_path}")
        spec_obj = load_spec(spec_path)
    except ConfigValidationError as e:
        console.print("[red]包描述文件验证失败:[/red]")
        console.print(e.format_errors(), markup=False)
        raise typer.Exit(1)
    except ConfigError as e:
        console.print(f"[red]配置错误[/red]: {e}")
        raise typer.Exit(1)

    builder = Builder()

    def progress_callback(stage: str, current: int, total: int, message: str = "") -> None:
        """进度回调函数，显示进度"""
        if total > 0:
            percentage = (current / total) * 100
            if message:
                console.print(f"[blue]{stage}[/blue]: {message} ({percentage:.0f}%)")
            else:
                console.print(f"[blue]{stage}[/blue]: {percentage:.0f}%")

    try:
        result = builder.build(
            spec_obj,
            input_path,
            output_path,
            version=version,
            spec_directory=spec_path.resolve().parent,
            force=force,
            progress_callback=progress_callback,
        )
    except Exception as e:
        console.print(f"[red]✗ 构建过程中发生意外错误[/red]: {e}")
        if log_file:
            console.print(f"[yellow]详细错误信息:[/yellow]\n{traceback.format_exc()}")
        raise typer.Exit(1)

    if not result.success:
        console.print(f"[red]✗ 构建失败[/red]: {result.error}")
        if log_file:
            console.print(f"[yellow]请检查日志文件 {log_file} 获取详细信息。[/yellow]")
        raise typer.Exit(1)

    console.print(f"[green]✓ 构建完成[/green]: {result.output_dir}")
    console.print(f"[blue]版本号[/blue]: {result.version}")

    table = Table(title="生成的产物")
    table.add_column("类型", style="cyan")
    table.add_column("文件", style="green")
    table.add_column("大小", justify="right")
    table.add_column("SHA-256", style="dim")
    for asset in result.assets:
        table.add_row(asset.kind.name, asset.name, format_size(asset.size), asset.checksum_sha256[:16])
    console.print(table)
