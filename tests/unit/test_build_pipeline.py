"""
构建管道单元测试

测试构建管道、构建步骤、构建上下文以及完整构建流程。
"""

import json
import stat
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from sqlite_dist.build.build_context import BuildContext, BuildError
from sqlite_dist.build.build_pipeline import BuildPipeline
from sqlite_dist.build.builder import Builder, resolve_version
from sqlite_dist.build.checksum import sha256_hex
from sqlite_dist.build.steps.build_step import BuildStep
from sqlite_dist.build.version import SemanticVersion, VersionError

from conftest import BUILD_TIME, make_spec, make_spec_dict, write_platform


class MockBuildStep(BuildStep):
    """模拟构建步骤"""

    def __init__(self, name="mock", description="Mock step", progress_range=(0, 10), enabled=True):
        super().__init__(name, description)
        self._progress_range = progress_range
        self._enabled = enabled
        self.execute_called = False

    def get_progress_range(self):
        return self._progress_range

    def is_enabled(self, context):
        return self._enabled

    def execute(self, context):
        self.execute_called = True
        context.build_stats['mock_processed'] = True


class FailingBuildStep(MockBuildStep):
    def execute(self, context):
        raise RuntimeError("boom")


def _context(tmp_path, **targets):
    return BuildContext(
        spec=make_spec(**targets),
        version=SemanticVersion.parse("0.1.0"),
        spec_directory=tmp_path,
        input_dir=tmp_path / "input",
        output_dir=tmp_path / "output",
    )


ALL_TARGETS = {
    'github_releases': {},
    'sqlpkg': {},
    'spm': {},
    'pip': {},
    'datasette': {},
    'sqlite_utils': {},
    'npm': {},
    'gem': {'module_name': 'SqliteSample'},
    'amalgamation': {'include': ['sample.c', 'sample.h']},
}


@pytest.fixture
def spec_directory(tmp_path: Path) -> Path:
    path = tmp_path / "project"
    path.mkdir()
    (path / "sample.c").write_text("int sample(void) { return 0; }\n", encoding='utf-8')
    (path / "sample.h").write_text("int sample(void);\n", encoding='utf-8')
    return path


class TestBuildContext:
    """BuildContext 测试"""

    def test_defaults(self, tmp_path):
        context = _context(tmp_path)
        assert context.platform_directories == []
        assert len(context.registry) == 0
        assert context.build_stats['artifacts'] == 0
        assert context.build_time > 0

    def test_report(self, tmp_path):
        """测试进度回调"""
        context = _context(tmp_path)
        context.report("x", 10)

        callback = MagicMock()
        context.progress_callback = callback
        context.report("收集", 10, "2 个平台")
        callback.assert_called_once_with("收集", 10, 100, "2 个平台")


class TestBuildPipeline:
    """BuildPipeline 测试"""

    def test_default_steps(self):
        names = [step.name for step in BuildPipeline().get_steps()]
        assert names == ["collect", "github_releases", "amalgamation", "pip", "npm", "gem", "finalize"]

    def test_validate_default_pipeline(self):
        """测试默认管道的进度范围连续"""
        assert BuildPipeline().validate_pipeline() == []

    def test_validate_gap(self):
        pipeline = BuildPipeline()
        pipeline.remove_step("npm")
        errors = pipeline.validate_pipeline()
        assert len(errors) == 1
        assert "gem" in errors[0]

    def test_validate_empty(self):
        pipeline = BuildPipeline()
        for step in pipeline.get_steps():
            pipeline.remove_step(step.name)
        assert pipeline.validate_pipeline() == ["构建管道中没有步骤"]

    def test_add_step(self):
        pipeline = BuildPipeline()
        step = MockBuildStep()
        pipeline.add_step(step, position=0)
        assert pipeline.get_steps()[0] is step

    def test_disabled_step_skipped(self, tmp_path):
        """测试未启用的步骤不会执行"""
        pipeline = BuildPipeline()
        for step in pipeline.get_steps():
            pipeline.remove_step(step.name)
        enabled = MockBuildStep("enabled", progress_range=(0, 50))
        disabled = MockBuildStep("disabled", progress_range=(50, 100), enabled=False)
        pipeline.add_step(enabled)
        pipeline.add_step(disabled)

        context = pipeline.execute(
            make_spec(), SemanticVersion.parse("0.1.0"), tmp_path, tmp_path, tmp_path,
        )
        assert enabled.execute_called
        assert not disabled.execute_called
        assert context.build_stats['mock_processed'] is True

    def test_failure_wrapped(self, tmp_path):
        """测试非 BuildError 异常被包装"""
        pipeline = BuildPipeline()
        for step in pipeline.get_steps():
            pipeline.remove_step(step.name)
        pipeline.add_step(FailingBuildStep(progress_range=(0, 100)))

        with pytest.raises(BuildError, match="boom"):
            pipeline.execute(make_spec(), SemanticVersion.parse("0.1.0"), tmp_path, tmp_path, tmp_path)


class TestResolveVersion:
    """版本号解析测试"""

    def test_override_wins(self):
        assert str(resolve_version(make_spec(), "2.0.0-rc.1")) == "2.0.0-rc.1"

    def test_from_spec(self):
        assert str(resolve_version(make_spec())) == "0.1.0"

    def test_missing(self):
        data = make_spec_dict()
        del data['package']['version']
        from sqlite_dist.config.schema import PackageSpec
        with pytest.raises(VersionError):
            resolve_version(PackageSpec.from_dict(data))


class TestBuilder:
    """完整构建流程测试"""

    def _build(self, input_dir, output_dir, spec_directory, **kwargs):
        return Builder().build(
            make_spec(**ALL_TARGETS),
            input_dir,
            output_dir,
            spec_directory=spec_directory,
            build_time=BUILD_TIME,
            **kwargs,
        )

    def test_validate_build_pipeline(self):
        builder = Builder()
        assert builder.validate_build_pipeline() == []
        assert builder.get_pipeline() is builder.pipeline

    def test_full_build(self, input_dir, output_dir, spec_directory):
        """测试全部目标的构建结果与登记顺序"""
        progress = MagicMock()
        result = self._build(input_dir, output_dir, spec_directory, progress_callback=progress)

        assert result.success, result.error
        assert result.version == "0.1.0"
        assert [asset.kind.name for asset in result.assets] == [
            "github-release-loadable",
            "github-release-loadable",
            "github-release-static",
            "sqlpkg",
            "spm",
            "amalgamation",
            "amalgamation",
            "pip",
            "pip",
            "datasette",
            "sqlite-utils",
            "npm",
            "npm",
            "npm",
            "gem",
            "gem",
            "sqlite-dist-manifest",
        ]
        for name in ["github_releases", "sqlpkg", "spm", "amalgamation", "pip",
                     "datasette", "sqlite_utils", "npm", "gem"]:
            assert (output_dir / name).is_dir()
        assert progress.call_args[0][1] == 100

    def test_checksum_integrity(self, input_dir, output_dir, spec_directory):
        """测试每个登记产物的摘要与磁盘文件一致"""
        result = self._build(input_dir, output_dir, spec_directory)

        assert result.success, result.error
        for asset in result.assets:
            data = Path(asset.path).read_bytes()
            assert sha256_hex(data) == asset.checksum_sha256, asset.name
            assert len(data) == asset.size

    def test_reproducible(self, tmp_path, input_dir, spec_directory):
        """测试相同输入和构建时间两次构建得到相同的校验和"""
        first = self._build(input_dir, tmp_path / "first", spec_directory)
        second = self._build(input_dir, tmp_path / "second", spec_directory)

        assert first.success and second.success
        assert [a.checksum_sha256 for a in first.assets[:-1]] == [a.checksum_sha256 for a in second.assets[:-1]]
        assert (
            (tmp_path / "first" / "checksums.txt").read_bytes()
            == (tmp_path / "second" / "checksums.txt").read_bytes()
        )

    def test_checksums_txt(self, input_dir, output_dir, spec_directory):
        """测试 checksums.txt 只列出 Release 与描述文件"""
        result = self._build(input_dir, output_dir, spec_directory)

        lines = (output_dir / "checksums.txt").read_text(encoding='utf-8').split("\n")
        assert len(lines) == 5
        assert lines[0] == f"{result.assets[0].name} {result.assets[0].checksum_sha256}"
        assert lines[3].startswith("sqlpkg.json ")
        assert lines[4].startswith("spm.json ")

    def test_manifest(self, input_dir, output_dir, spec_directory):
        """测试构建清单最后一项是自身"""
        self._build(input_dir, output_dir, spec_directory)

        document = json.loads((output_dir / "sqlite-dist-manifest.json").read_text(encoding='utf-8'))
        assert document['build_info']['version'] == "0.1.0"
        assert document['build_info']['timestamp'].startswith("2023-11-14T22:13:20")
        artifacts = document['artifacts']
        assert len(artifacts) == 17
        assert artifacts[-1]['kind'] == "sqlite-dist-manifest"
        assert artifacts[-1]['checksum_sha256'] is None
        assert artifacts[-1]['size'] is None
        assert artifacts[0]['kind'] == "github-release-loadable"

    def test_install_sh(self, input_dir, output_dir, spec_directory):
        """测试 install.sh 的分支与可执行权限"""
        result = self._build(input_dir, output_dir, spec_directory)

        path = output_dir / "install.sh"
        script = path.read_text(encoding='utf-8')
        assert path.stat().st_mode & stat.S_IXUSR
        assert script.startswith("#!/bin/sh\n")
        assert "sqlite-sample-install 0.1.0" in script
        assert "Available targets: linux-aarch64, macos-x86_64" in script
        assert '    "linux-aarch64-loadable")' in script
        assert '    "macos-x86_64-loadable")' in script
        assert '    "linux-aarch64-static")' in script
        assert '"macos-x86_64-static")' not in script
        assert f'checksum="{result.assets[0].checksum_sha256}"' in script
        assert (
            'url="https://github.com/asg017/sqlite-sample/releases/download/0.1.0/'
            'sqlite-sample-0.1.0-loadable-linux-aarch64.tar.gz"'
        ) in script

    def test_existing_directory_requires_force(self, input_dir, output_dir, spec_directory):
        """测试已有目标子目录时必须使用 force"""
        (output_dir / "pip").mkdir()

        result = self._build(input_dir, output_dir, spec_directory)
        assert not result.success
        assert "wheel" in result.error

        result = self._build(input_dir, output_dir, spec_directory, force=True)
        assert result.success, result.error

    def test_invalid_version(self, input_dir, output_dir, spec_directory):
        result = self._build(input_dir, output_dir, spec_directory, version="not-a-version")
        assert not result.success
        assert result.output_dir is None

    def test_npm_empty_platform(self, input_dir, output_dir, spec_directory):
        """测试某个平台没有可加载文件时构建失败"""
        write_platform(input_dir, "windows-x86_64", {"sample0.lib": b"lib"})
        result = Builder().build(
            make_spec(npm={}),
            input_dir,
            output_dir,
            spec_directory=spec_directory,
            build_time=BUILD_TIME,
        )
        assert not result.success
        assert "windows-x86_64" in result.error

    def test_no_targets(self, input_dir, output_dir, spec_directory):
        """测试未启用任何目标时仍写出清单"""
        result = Builder().build(make_spec(), input_dir, output_dir, spec_directory=spec_directory)
        assert result.success
        assert [asset.kind.name for asset in result.assets] == ["sqlite-dist-manifest"]
        assert (output_dir / "checksums.txt").read_text(encoding='utf-8') == ""
