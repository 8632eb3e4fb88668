"""
Pytest configuration and fixtures for srpmtools tests.
"""

import os
import subprocess

import pytest
from pathlib import Path

from srpmtools.runner import CommandRunner


class StubRunner(CommandRunner):
    """
    Records commands instead of running them.

    handlers maps a tool basename (e.g. "rpmspec") to a callable
    (cmd, cwd, input) -> CompletedProcess. Unhandled commands exit 0 with
    empty output.
    """

    def __init__(self):
        self.calls = []
        self.handlers = {}

    def run(self, cmd, cwd=None, input=None, text=True):
        self.calls.append({"cmd": list(cmd), "cwd": cwd, "input": input, "text": text})
        handler = self.handlers.get(os.path.basename(cmd[0]))
        if handler:
            return handler(cmd, cwd, input)
        empty = "" if text else b""
        return subprocess.CompletedProcess(cmd, 0, stdout=empty, stderr=empty)

    def commands(self):
        return [os.path.basename(call["cmd"][0]) for call in self.calls]


def completed(cmd, returncode=0, stdout="", stderr=""):
    return subprocess.CompletedProcess(cmd, returncode, stdout=stdout, stderr=stderr)


@pytest.fixture
def stub_runner():
    """CommandRunner that never starts a process."""
    return StubRunner()


@pytest.fixture
def fixtures_dir():
    """Path to test fixtures directory."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def sample_spec(fixtures_dir):
    """Path to test-package.spec fixture file."""
    return fixtures_dir / "test-package.spec"


@pytest.fixture
def sample_spec_content(sample_spec):
    return sample_spec.read_text()


@pytest.fixture
def expanded_spec_content(fixtures_dir):
    """rpmspec -P output for test-package.spec."""
    return (fixtures_dir / "test-package.expanded").read_text()


@pytest.fixture
def rpmspec_handler(expanded_spec_content):
    """Handler that makes rpmspec -P print the expanded fixture."""

    def handler(cmd, cwd, input):
        return completed(cmd, stdout=expanded_spec_content)

    return handler


@pytest.fixture
def cpio_handler(sample_spec_content):
    """Handler that makes cpio drop test-package.spec and a tarball into cwd."""

    def handler(cmd, cwd, input):
        Path(cwd, "test-package.spec").write_text(sample_spec_content)
        Path(cwd, "test-package-1.0.0.tar.gz").write_bytes(b"tarball")
        return completed(cmd, stdout=b"", stderr=b"")

    return handler


@pytest.fixture
def rpmbuild_handler():
    """Handler that makes rpmbuild -bp populate BUILD under the given topdir."""

    def handler(cmd, cwd, input):
        topdir = cmd[cmd.index("--define") + 1].split(" ", 1)[1]
        build = Path(topdir, "BUILD", "test-package-1.0.0")
        build.mkdir(parents=True)
        (build / "main.c").write_text("int main(void) { return 0; }\n")
        return completed(cmd)

    return handler


@pytest.fixture
def output_root(tmp_path):
    return tmp_path / "out"


@pytest.fixture
def mock_subprocess_run(mocker):
    """Mock subprocess.run for testing."""
    mock = mocker.patch("subprocess.run")
    mock.return_value.returncode = 0
    mock.return_value.stdout = ""
    mock.return_value.stderr = ""
    return mock


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: mark test as unit test")
    config.addinivalue_line("markers", "integration: mark test as integration test")
