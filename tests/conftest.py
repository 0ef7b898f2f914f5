"""Pytest configuration and fixtures for stagebuild tests."""

import os
import sys
from dataclasses import replace
from pathlib import Path

import pytest

from stagebuild.config import BuildConfig

# Fixed timestamp so mirror tests do not depend on filesystem clock resolution.
BASE_MTIME = 1_700_000_000


def write_file(path: Path, content: str, mtime: int = BASE_MTIME, mode: int = 0o644) -> Path:
    """Write a file with an explicit mode and modification time."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    os.chmod(path, mode)
    os.utime(path, (mtime, mtime))
    return path


@pytest.fixture(autouse=True)
def isolate_output_globals():
    """Reset stagebuild.output module state around each test."""
    from stagebuild import output

    original_start_time = output._start_time
    original_output_stream = output._output_stream
    original_verbose = output._verbose

    output._start_time = None
    output._output_stream = None
    output._verbose = False

    yield

    output._start_time = original_start_time
    output._output_stream = original_output_stream
    output._verbose = original_verbose


@pytest.fixture(autouse=True)
def _restore_stdio():  # noqa: PT004
    """Ensure stdout/stderr are restored if a test closed them."""
    yield

    if sys.stdout.closed:
        sys.stdout = sys.__stdout__
    if sys.stderr.closed:
        sys.stderr = sys.__stderr__


@pytest.fixture
def project_dir(tmp_path: Path) -> Path:
    """A small project: two dependency trees, a package and two executables."""
    root = tmp_path / "project"
    write_file(root / "deps" / "github.com" / "acme" / "log" / "log.go", "package log\n")
    write_file(root / "deps" / "github.com" / "acme" / "log" / "README", "acme log\n")
    write_file(root / "deps" / "golang.org" / "x" / "net" / "net.go", "package net\n")
    write_file(root / "common" / "common.go", "package common\n")
    write_file(root / "gauge" / "main.go", "package main\n")
    write_file(root / "gauge" / "run.sh", "#!/bin/sh\n", mode=0o755)
    write_file(root / "gauge-java" / "main.go", "package main\n")
    write_file(root / "gauge-java" / "build.xml", "<project/>\n")
    return root


@pytest.fixture
def config(project_dir: Path, tmp_path: Path) -> BuildConfig:
    """Default configuration for the sample project, installing under tmp_path."""
    return replace(BuildConfig.defaults(project_dir), default_prefix=tmp_path / "usr" / "local")


@pytest.fixture
def make_file():
    """Fixture form of write_file for test modules."""
    return write_file
