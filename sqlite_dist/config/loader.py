"""
包描述文件加载器

负责从 YAML 或 TOML 文件加载包描述并进行验证。
"""

import json
import tomllib
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from pydantic import ValidationError
from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from .schema import PackageSpec


class ConfigError(Exception):
    """配置错误基类"""
    pass


class ConfigValidationError(ConfigError):
    """配置验证错误"""

    def __init__(self, message: str, errors: List[Dict[str, Any]]):
        super().__init__(message)
        self.errors = errors

    def format_errors(self) -> str:
        """格式化错误信息为人类可读的格式"""
        formatted = []
        for error in self.errors:
            loc = " -> ".join(str(item) for item in error.get('loc', []))
            msg = error.get('msg', '未知错误')
            input_val = error.get('input', '')

            if loc:
                formatted.append(f"字段 '{loc}': {msg}")
                if input_val and not isinstance(input_val, dict):
                    formatted.append(f"  输入值: {input_val}")
            else:
                formatted.append(f"根级别: {msg}")

        return "\n".join(formatted)

    def format_errors_json(self) -> str:
        """格式化错误信息为 JSON 格式"""
        return json.dumps(self.errors, ensure_ascii=False, indent=2, default=str)


class ConfigLoader:
    """包描述文件加载器"""

    YAML_SUFFIXES = ('.yaml', '.yml')
    TOML_SUFFIXES = ('.toml',)

    def __init__(self):
        self.yaml = YAML(typ='safe')

    def load_from_file(self, spec_path: Union[str, Path]) -> PackageSpec:
        """从文件加载包描述

        Args:
            spec_path: 描述文件路径

        Returns:
            PackageSpec: 验证后的描述实例

        Raises:
            ConfigError: 文件加载或验证错误
        """
        spec_path = Path(spec_path)

        if not spec_path.exists():
            raise ConfigError(f"描述文件不存在: {spec_path}")

        if not spec_path.is_file():
            raise ConfigError(f"描述文件路径不是文件: {spec_path}")

        raw_data = self._read_raw(spec_path)

        if raw_data is None:
            raise ConfigError("描述文件为空")

        if not isinstance(raw_data, dict):
            raise ConfigError("描述文件根级别必须是对象/字典格式")

        return self.load_from_dict(raw_data, spec_path.parent)

    def load_from_dict(self, data: Dict[str, Any], base_path: Optional[Path] = None) -> PackageSpec:
        """从字典加载包描述

        Args:
            data: 描述数据字典
            base_path: 相对路径的基准路径

        Returns:
            PackageSpec: 验证后的描述实例

        Raises:
            ConfigValidationError: 验证错误
        """
        if base_path:
            # 深拷贝，避免修改调用方数据
            data = json.loads(json.dumps(data, default=str))
            self._resolve_relative_paths(data, Path(base_path))

        try:
            return PackageSpec.from_dict(data)
        except ValidationError as e:
            raise ConfigValidationError("描述文件验证失败", list(e.errors()))

    def validate_file(self, spec_path: Union[str, Path]) -> List[Dict[str, Any]]:
        """验证描述文件并返回错误列表

        Returns:
            List[Dict]: 错误列表，空列表表示验证通过
        """
        try:
            self.load_from_file(spec_path)
            return []
        except ConfigValidationError as e:
            return e.errors
        except ConfigError as e:
            return [{
                'loc': [],
                'msg': str(e),
                'type': 'config_error'
            }]

    def _read_raw(self, spec_path: Path) -> Any:
        """按扩展名读取原始数据"""
        suffix = spec_path.suffix.lower()

        if suffix in self.YAML_SUFFIXES:
            try:
                with open(spec_path, 'r', encoding='utf-8') as f:
                    return self.yaml.load(f)
            except YAMLError as e:
                raise ConfigError(f"YAML 解析错误: {e}")
            except OSError as e:
                raise ConfigError(f"文件读取错误: {e}")

        if suffix in self.TOML_SUFFIXES:
            try:
                with open(spec_path, 'rb') as f:
                    return tomllib.load(f)
            except tomllib.TOMLDecodeError as e:
                raise ConfigError(f"TOML 解析错误: {e}")
            except OSError as e:
                raise ConfigError(f"文件读取错误: {e}")

        raise ConfigError(f"描述文件必须是 .yaml、.yml 或 .toml 格式: {spec_path}")

    def _resolve_relative_paths(self, data: Dict[str, Any], base_path: Path) -> None:
        """将描述中的相对路径解析为相对于描述文件目录的绝对路径

        amalgamation.include 中的条目保持原样写入归档，因此这里只解析
        pip.extra_init_py；include 的解析在合并包构建时完成。
        """
        targets = data.get('targets')
        if not isinstance(targets, dict):
            return

        pip = targets.get('pip')
        if isinstance(pip, dict):
            extra = pip.get('extra_init_py')
            if isinstance(extra, str) and extra and not Path(extra).is_absolute():
                pip['extra_init_py'] = str((base_path / extra).resolve())


# 全局加载器实例
config_loader = ConfigLoader()


def load_spec(spec_path: Union[str, Path]) -> PackageSpec:
    """便捷函数：加载描述文件"""
    return config_loader.load_from_file(spec_path)


def validate_spec(spec_path: Union[str, Path]) -> List[Dict[str, Any]]:
    """便捷函数：验证描述文件"""
    return config_loader.validate_file(spec_path)
