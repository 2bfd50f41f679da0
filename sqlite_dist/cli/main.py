"""
sqlite-dist CLI 主入口

提供命令行接口，支持 build/validate/inspect 等命令。
"""

from typing import Optional

import typer
from rich.console import Console

from .. import __version__
from ..utils import configure_logging
from .commands import build, validate, inspect


# 创建主应用
app = typer.Typer(
    name="sqlite-dist",
    help="sqlite-dist - 将预编译的 SQLite 扩展打包为多种分发格式",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)

# 控制台输出
console = Console()


# 全局选项
def version_callback(value: bool) -> None:
    """显示版本信息"""
    if value:
        console.print(f"sqlite-dist v{__version__}")
        raise typer.Exit()


def verbose_callback(verbose: bool) -> None:
    """配置详细输出"""
    if verbose:
        configure_logging(level="DEBUG")
    else:
        configure_logging(level="INFO")


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        callback=version_callback,
        is_eager=True,
        help="显示版本信息"
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose", "-v",
        callback=verbose_callback,
        help="启用详细输出"
    )
) -> None:
    """sqlite-dist - 将预编译的 SQLite 扩展打包为多种分发格式

    使用 --help 查看可用命令的详细信息。
    """
    pass


# 注册子命令
app.command("build", help="构建全部分发包")(build.build_command)
app.command("validate", help="验证包描述文件")(validate.validate_command)
app.command("inspect", help="查看构建清单")(inspect.inspect_command)


if __name__ == "__main__":
    app()
