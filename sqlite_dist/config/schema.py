"""
包描述文件 Schema 定义

使用 Pydantic 定义包描述文件（sqlite-dist.yaml / sqlite-dist.toml）的模型，
负责字段校验以及目标之间的依赖关系校验。
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator


VERSION_PLACEHOLDER = "$VERSION"


class PackageModel(BaseModel):
    """包身份信息模型"""
    name: str = Field(..., description="包名称", min_length=1, max_length=100)
    version: Optional[str] = Field(None, description="版本号（SemVer），可由命令行覆盖")
    authors: List[str] = Field(..., description="作者列表", min_length=1)
    license: str = Field(..., description="许可证", min_length=1)
    description: str = Field(..., description="包描述")
    homepage: str = Field(..., description="主页地址")
    repo: str = Field(..., description="源码仓库地址（GitHub）")
    git_tag_format: Optional[str] = Field(None, description="Git 标签格式，使用 $VERSION 占位")

    model_config = {"extra": "forbid"}

    @field_validator('name')
    @classmethod
    def validate_name(cls, v: str) -> str:
        """验证包名称"""
        import re
        if not re.match(r'^[A-Za-z0-9][A-Za-z0-9_\-]*$', v):
            raise ValueError("包名称只能包含字母、数字、'-' 和 '_'，且必须以字母或数字开头")
        return v

    @field_validator('repo')
    @classmethod
    def validate_repo(cls, v: str) -> str:
        """去掉仓库地址末尾的斜杠"""
        return v.rstrip('/')

    @field_validator('git_tag_format')
    @classmethod
    def validate_git_tag_format(cls, v: Optional[str]) -> Optional[str]:
        """验证 Git 标签格式"""
        if v is not None and VERSION_PLACEHOLDER not in v:
            raise ValueError(f"git_tag_format 必须包含 {VERSION_PLACEHOLDER} 占位符")
        return v

    def git_tag(self, version: str) -> str:
        """根据版本号生成 Git 标签"""
        if self.git_tag_format is None:
            return version
        return self.git_tag_format.replace(VERSION_PLACEHOLDER, version)


class TargetModel(BaseModel):
    """无额外参数的目标"""
    model_config = {"extra": "forbid"}


class GithubReleasesTarget(TargetModel):
    """GitHub Release 目标"""


class SqlpkgTarget(TargetModel):
    """sqlpkg 目标"""


class SpmTarget(TargetModel):
    """Swift Package Manager 目标"""


class DatasetteTarget(TargetModel):
    """Datasette 插件目标"""


class SqliteUtilsTarget(TargetModel):
    """sqlite-utils 插件目标"""


class NpmTarget(TargetModel):
    """npm 目标"""


class PipTarget(TargetModel):
    """pip wheel 目标"""
    extra_init_py: Optional[Path] = Field(None, description="追加到 __init__.py 末尾的 Python 文件")


class GemTarget(TargetModel):
    """RubyGems 目标"""
    module_name: str = Field(..., description="Ruby 模块名", min_length=1)

    @field_validator('module_name')
    @classmethod
    def validate_module_name(cls, v: str) -> str:
        """Ruby 模块名必须是常量名"""
        import re
        if not re.match(r'^[A-Z][A-Za-z0-9_]*(::[A-Z][A-Za-z0-9_]*)*$', v):
            raise ValueError("module_name 必须是合法的 Ruby 常量名，例如 SqliteHello")
        return v


class AmalgamationTarget(TargetModel):
    """源码合并包目标"""
    include: List[Path] = Field(..., description="要打包的源码文件列表", min_length=1)

    @field_validator('include')
    @classmethod
    def validate_include(cls, v: List[Path]) -> List[Path]:
        """归档条目名直接使用这些路径，必须是描述文件目录下的相对路径"""
        for path in v:
            if path.is_absolute() or path.anchor:
                raise ValueError(f"include 中的路径必须是相对路径: {path}")
            if '..' in path.parts:
                raise ValueError(f"include 中的路径不能包含 '..': {path}")
        return v


class TargetsModel(BaseModel):
    """目标集合模型

    每个目标都是可选的表，出现即视为启用（即使为空表）。
    """
    github_releases: Optional[GithubReleasesTarget] = None
    sqlpkg: Optional[SqlpkgTarget] = None
    spm: Optional[SpmTarget] = None
    pip: Optional[PipTarget] = None
    datasette: Optional[DatasetteTarget] = None
    sqlite_utils: Optional[SqliteUtilsTarget] = None
    npm: Optional[NpmTarget] = None
    gem: Optional[GemTarget] = None
    amalgamation: Optional[AmalgamationTarget] = None

    model_config = {"extra": "forbid"}

    @model_validator(mode='after')
    def validate_target_dependencies(self) -> 'TargetsModel':
        """验证目标之间的依赖关系"""
        if self.sqlpkg is not None and self.github_releases is None:
            raise ValueError("sqlpkg 目标需要同时启用 github_releases 目标")
        if self.spm is not None and self.github_releases is None:
            raise ValueError("spm 目标需要同时启用 github_releases 目标")
        if self.datasette is not None and self.pip is None:
            raise ValueError("datasette 目标需要同时启用 pip 目标")
        if self.sqlite_utils is not None and self.pip is None:
            raise ValueError("sqlite_utils 目标需要同时启用 pip 目标")
        return self

    def enabled(self) -> List[str]:
        """返回已启用的目标名称（按字段声明顺序）"""
        return [name for name in type(self).model_fields if getattr(self, name) is not None]


class PackageSpec(BaseModel):
    """包描述文件根模型"""
    package: PackageModel = Field(..., description="包身份信息")
    targets: TargetsModel = Field(..., description="目标配置")

    model_config = {
        "extra": "forbid",
        "str_strip_whitespace": True,
    }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PackageSpec':
        """从字典创建描述实例"""
        return cls.model_validate(data)

    def to_dict(self) -> Dict[str, Any]:
        """转换为字典格式（Path 转为字符串）"""
        return self.model_dump(mode='json', exclude_none=True)
