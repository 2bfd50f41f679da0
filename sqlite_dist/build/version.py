"""
语义化版本

解析 SemVer 2.0.0 版本号，并转换为 pip / RubyGems 使用的版本格式。
"""

import re
from dataclasses import dataclass
from typing import Optional


class VersionError(ValueError):
    """版本号无法解析或无法转换"""
    pass


# https://semver.org/#is-there-a-suggested-regular-expression-regex-to-check-a-semver-string
_SEMVER_RE = re.compile(
    r'^(?P<major>0|[1-9]\d*)\.(?P<minor>0|[1-9]\d*)\.(?P<patch>0|[1-9]\d*)'
    r'(?:-(?P<pre>(?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*)'
    r'(?:\.(?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*))*))?'
    r'(?:\+(?P<build>[0-9a-zA-Z-]+(?:\.[0-9a-zA-Z-]+)*))?$'
)

# 预发布标识 -> pip 版本后缀
_PIP_PRE_RELEASE = {
    'alpha': 'a',
    'beta': 'b',
    'rc': 'rc',
}


@dataclass(frozen=True)
class SemanticVersion:
    """SemVer 版本号"""
    major: int
    minor: int
    patch: int
    pre: Optional[str] = None
    build: Optional[str] = None

    @classmethod
    def parse(cls, text: str) -> 'SemanticVersion':
        """解析版本号

        Raises:
            VersionError: 不是合法的 SemVer 字符串
        """
        match = _SEMVER_RE.match(text.strip())
        if not match:
            raise VersionError(f"版本号不是合法的 SemVer 格式: {text!r}")
        return cls(
            major=int(match.group('major')),
            minor=int(match.group('minor')),
            patch=int(match.group('patch')),
            pre=match.group('pre'),
            build=match.group('build'),
        )

    @property
    def base(self) -> str:
        """仅包含数字部分的版本号"""
        return f"{self.major}.{self.minor}.{self.patch}"

    def __str__(self) -> str:
        text = self.base
        if self.pre:
            text += f"-{self.pre}"
        if self.build:
            text += f"+{self.build}"
        return text

    def to_pip_version(self) -> str:
        """转换为 Python 包版本号

        alpha.N / beta.N / rc.N 分别映射为 aN / bN / rcN。

        Raises:
            VersionError: 预发布标识无法映射，或同时带有预发布标识和构建元数据
        """
        if self.pre is None:
            return str(self)

        if self.build is not None:
            raise VersionError(
                f"暂不支持同时带有预发布标识和构建元数据的版本号: {self}"
            )

        label, sep, number = self.pre.partition('.')
        if not sep or not number.isdigit():
            raise VersionError(
                f"预发布标识必须是 alpha.N、beta.N 或 rc.N 形式: {self}"
            )
        suffix = _PIP_PRE_RELEASE.get(label)
        if suffix is None:
            raise VersionError(
                f"无法转换的预发布标识 '{label}'，仅支持 alpha、beta、rc: {self}"
            )
        return f"{self.base}{suffix}{int(number)}"

    def to_gem_version(self) -> str:
        """转换为 RubyGems 版本号（'-' 替换为 '.'）"""
        return str(self).replace('-', '.')
