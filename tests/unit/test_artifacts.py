"""Tests for artifact collection and installation."""

import os
import sys
from dataclasses import replace
from pathlib import Path

import pytest

from stagebuild.artifacts import collect_artifacts, install_binaries, resolve_prefix
from stagebuild.config import BuildConfig
from stagebuild.errors import MirrorError
from stagebuild.workspace import create_workspace


@pytest.fixture
def built_workspace(config, make_file):
    """A workspace whose bin directory holds two compiled binaries."""
    workspace = create_workspace(config)
    make_file(workspace.bin / "gauge", "ELF gauge", mode=0o755)
    make_file(workspace.bin / "gauge-java", "ELF gauge-java", mode=0o755)
    return workspace


class TestCollectArtifacts:
    def test_collects_binaries(self, config, built_workspace, capsys):
        output_dir, stats = collect_artifacts(config, built_workspace)

        assert output_dir == config.output_dir.resolve()
        assert output_dir.is_absolute()
        assert (output_dir / "gauge").read_text() == "ELF gauge"
        assert (output_dir / "gauge-java").read_text() == "ELF gauge-java"
        assert stats.copied == 2
        assert f"Binaries are available at: {output_dir}" in capsys.readouterr().out

    def test_recollect_unchanged(self, config, built_workspace):
        collect_artifacts(config, built_workspace)

        output_dir, stats = collect_artifacts(config, built_workspace)

        assert stats.copied == 0
        assert output_dir == config.output_dir.resolve()

    def test_empty_bin_creates_output_dir(self, config):
        workspace = create_workspace(config)

        output_dir, stats = collect_artifacts(config, workspace)

        assert output_dir.is_dir()
        assert stats.total == 0


class TestResolvePrefix:
    def test_default_prefix(self, config):
        assert resolve_prefix(config) == config.default_prefix

    def test_explicit_argument(self, config, tmp_path):
        assert resolve_prefix(config, tmp_path / "opt") == tmp_path / "opt"

    def test_prefix_from_config(self, config, tmp_path):
        configured = replace(config, prefix=tmp_path / "custom")

        assert resolve_prefix(configured) == tmp_path / "custom"

    def test_builtin_default_is_usr_local(self, tmp_path):
        assert resolve_prefix(BuildConfig.defaults(tmp_path)) == Path("/usr/local")

    def test_relative_prefix_is_under_project_dir(self, config):
        configured = replace(config, prefix=Path("stage"))

        assert resolve_prefix(configured) == config.project_dir / "stage"

    def test_relative_default_prefix_is_under_project_dir(self, config):
        configured = replace(config, default_prefix=Path("dist"))

        assert resolve_prefix(configured) == config.project_dir / "dist"


class TestInstallBinaries:
    def test_installs_into_prefix_bin(self, config, built_workspace, tmp_path):
        collect_artifacts(config, built_workspace)
        prefix = tmp_path / "prefix"

        installed = install_binaries(config, prefix)

        assert installed == [prefix / "bin" / "gauge", prefix / "bin" / "gauge-java"]
        for path in installed:
            assert path.is_file()

    @pytest.mark.skipif(sys.platform == "win32", reason="requires POSIX permissions")
    def test_installed_binaries_are_executable(self, config, built_workspace, tmp_path):
        collect_artifacts(config, built_workspace)

        for path in install_binaries(config, tmp_path / "prefix"):
            assert os.access(path, os.X_OK)

    def test_missing_first_binary_aborts_second(self, config, make_file, tmp_path):
        make_file(config.output_dir / "gauge-java", "ELF gauge-java", mode=0o755)
        prefix = tmp_path / "prefix"

        with pytest.raises(MirrorError):
            install_binaries(config, prefix)

        assert not (prefix / "bin" / "gauge-java").exists()

    def test_reinstall_is_noop(self, config, built_workspace, tmp_path, capsys):
        collect_artifacts(config, built_workspace)
        install_binaries(config, tmp_path / "prefix")
        capsys.readouterr()

        install_binaries(config, tmp_path / "prefix")

        assert capsys.readouterr().out.count("(unchanged)") == 2
