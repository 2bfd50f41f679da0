"""
包描述文件单元测试

测试 Schema 校验、目标依赖关系以及 YAML / TOML 加载器。
"""

import json
from pathlib import Path

import pytest
from pydantic import ValidationError
from ruamel.yaml import YAML

from sqlite_dist.config.loader import ConfigLoader, ConfigValidationError, ConfigError, load_spec, validate_spec
from sqlite_dist.config.schema import GemTarget, PackageModel, PackageSpec, TargetsModel

from conftest import make_spec_dict


def _write_yaml(path: Path, data: dict) -> Path:
    yaml = YAML(typ='safe')
    yaml.default_flow_style = False
    with open(path, 'w', encoding='utf-8') as f:
        yaml.dump(data, f)
    return path


class TestPackageModel:
    """PackageModel 测试"""

    def test_valid_package(self):
        """测试有效的包信息"""
        package = PackageModel(**make_spec_dict()['package'])
        assert package.name == "sqlite-sample"
        assert package.authors == ["Alex Garcia"]
        assert package.git_tag_format is None

    def test_invalid_name(self):
        """测试非法包名"""
        data = make_spec_dict()['package']
        for name in ["", "-sample", "sample ext", "sample/ext"]:
            data['name'] = name
            with pytest.raises(ValidationError):
                PackageModel(**data)

    def test_authors_required(self):
        """测试作者列表不能为空"""
        data = make_spec_dict()['package']
        data['authors'] = []
        with pytest.raises(ValidationError):
            PackageModel(**data)

    def test_repo_trailing_slash_removed(self):
        """测试仓库地址末尾斜杠被去掉"""
        data = make_spec_dict()['package']
        data['repo'] = "https://github.com/asg017/sqlite-sample/"
        assert PackageModel(**data).repo == "https://github.com/asg017/sqlite-sample"

    def test_git_tag(self):
        """测试 Git 标签格式"""
        data = make_spec_dict()['package']
        assert PackageModel(**data).git_tag("1.0.0") == "1.0.0"

        data['git_tag_format'] = "v$VERSION"
        assert PackageModel(**data).git_tag("1.0.0") == "v1.0.0"

    def test_git_tag_format_requires_placeholder(self):
        """测试标签格式必须包含占位符"""
        data = make_spec_dict()['package']
        data['git_tag_format'] = "release"
        with pytest.raises(ValidationError):
            PackageModel(**data)

    def test_unknown_field_rejected(self):
        """测试未知字段被拒绝"""
        data = make_spec_dict()['package']
        data['email'] = "someone@example.com"
        with pytest.raises(ValidationError):
            PackageModel(**data)


class TestTargetsModel:
    """TargetsModel 测试"""

    def test_empty_table_enables_target(self):
        """测试空表即视为启用"""
        targets = TargetsModel(github_releases={}, pip={})
        assert targets.enabled() == ["github_releases", "pip"]

    @pytest.mark.parametrize("target,required", [
        ("sqlpkg", "github_releases"),
        ("spm", "github_releases"),
        ("datasette", "pip"),
        ("sqlite_utils", "pip"),
    ])
    def test_dependency_rules(self, target, required):
        """测试目标之间的依赖关系"""
        with pytest.raises(ValidationError) as exc_info:
            TargetsModel(**{target: {}})
        assert required in str(exc_info.value)

        TargetsModel(**{target: {}, required: {}})

    def test_gem_module_name(self):
        """测试 Ruby 模块名校验"""
        assert GemTarget(module_name="SqliteSample").module_name == "SqliteSample"
        with pytest.raises(ValidationError):
            GemTarget(module_name="sqlite_sample")

    def test_amalgamation_requires_include(self):
        """测试合并包必须列出源码文件"""
        with pytest.raises(ValidationError):
            TargetsModel(amalgamation={'include': []})

    @pytest.mark.parametrize("include", ["/abs/src/sample.c", "../sample.c", "src/../../sample.c"])
    def test_amalgamation_include_must_stay_relative(self, include):
        """测试合并包源码路径不能是绝对路径或跳出描述文件目录"""
        with pytest.raises(ValidationError):
            TargetsModel(amalgamation={'include': ["sample.h", include]})

        assert TargetsModel(amalgamation={'include': ["src/sample.c"]}).amalgamation.include == [Path("src/sample.c")]

    def test_unknown_target_rejected(self):
        """测试未知目标被拒绝"""
        with pytest.raises(ValidationError):
            TargetsModel(conda={})


class TestPackageSpec:
    """PackageSpec 测试"""

    def test_round_trip(self):
        """测试字典转换"""
        data = make_spec_dict(github_releases={}, gem={'module_name': 'SqliteSample'})
        spec = PackageSpec.from_dict(data)
        result = spec.to_dict()
        assert result['package']['name'] == "sqlite-sample"
        assert result['targets']['gem'] == {'module_name': 'SqliteSample'}
        assert 'pip' not in result['targets']


class TestConfigLoader:
    """ConfigLoader 测试"""

    def setup_method(self):
        self.loader = ConfigLoader()

    def test_load_yaml(self, tmp_path):
        """测试加载 YAML 描述文件"""
        path = _write_yaml(tmp_path / "sqlite-dist.yaml", make_spec_dict(github_releases={}, spm={}))
        spec = self.loader.load_from_file(path)
        assert spec.targets.spm is not None
        assert spec.targets.pip is None

    def test_load_toml(self, tmp_path):
        """测试加载 TOML 描述文件"""
        path = tmp_path / "sqlite-dist.toml"
        path.write_text(
            '[package]\n'
            'name = "sqlite-sample"\n'
            'version = "0.1.0"\n'
            'authors = ["Alex Garcia"]\n'
            'license = "MIT"\n'
            'description = "A sample SQLite extension"\n'
            'homepage = "https://example.com/sqlite-sample"\n'
            'repo = "https://github.com/asg017/sqlite-sample"\n'
            '\n'
            '[targets]\n'
            'github_releases = {}\n'
            'sqlpkg = {}\n'
            '\n'
            '[targets.gem]\n'
            'module_name = "SqliteSample"\n',
            encoding='utf-8',
        )
        spec = load_spec(path)
        assert spec.targets.sqlpkg is not None
        assert spec.targets.gem.module_name == "SqliteSample"

    def test_unsupported_suffix(self, tmp_path):
        """测试不支持的文件格式"""
        path = tmp_path / "sqlite-dist.json"
        path.write_text(json.dumps(make_spec_dict()), encoding='utf-8')
        with pytest.raises(ConfigError):
            self.loader.load_from_file(path)

    def test_missing_file(self, tmp_path):
        """测试文件不存在"""
        with pytest.raises(ConfigError):
            self.loader.load_from_file(tmp_path / "missing.yaml")

    def test_empty_file(self, tmp_path):
        """测试空文件"""
        path = tmp_path / "empty.yaml"
        path.write_text("", encoding='utf-8')
        with pytest.raises(ConfigError, match="为空"):
            self.loader.load_from_file(path)

    def test_invalid_yaml(self, tmp_path):
        """测试 YAML 语法错误"""
        path = tmp_path / "broken.yaml"
        path.write_text("package: [unclosed\n", encoding='utf-8')
        with pytest.raises(ConfigError):
            self.loader.load_from_file(path)

    def test_validation_error_details(self, tmp_path):
        """测试验证错误携带结构化信息"""
        data = make_spec_dict(sqlpkg={})
        path = _write_yaml(tmp_path / "sqlite-dist.yaml", data)
        with pytest.raises(ConfigValidationError) as exc_info:
            self.loader.load_from_file(path)

        error = exc_info.value
        assert error.errors
        assert "github_releases" in error.format_errors()
        assert isinstance(json.loads(error.format_errors_json()), list)

    def test_extra_init_py_relative_to_spec(self, tmp_path):
        """测试 extra_init_py 相对于描述文件目录解析"""
        spec_dir = tmp_path / "project"
        spec_dir.mkdir()
        (spec_dir / "extra.py").write_text("X = 1\n", encoding='utf-8')
        path = _write_yaml(spec_dir / "sqlite-dist.yaml", make_spec_dict(pip={'extra_init_py': 'extra.py'}))

        spec = self.loader.load_from_file(path)
        assert spec.targets.pip.extra_init_py == (spec_dir / "extra.py").resolve()

    def test_validate_spec(self, tmp_path):
        """测试验证便捷函数"""
        good = _write_yaml(tmp_path / "good.yaml", make_spec_dict(pip={}, datasette={}))
        bad = _write_yaml(tmp_path / "bad.yaml", make_spec_dict(datasette={}))

        assert validate_spec(good) == []
        assert len(validate_spec(bad)) == 1
        assert validate_spec(tmp_path / "missing.yaml")[0]['type'] == 'config_error'
