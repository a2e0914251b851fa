"""
Shared fixtures: a fake ProcessRunner standing in for yarn/pnpm/npm.
"""

import pytest

from cli_notify.process import ProcessError, ProcessResult


class FakeRunner:
    """
    ProcessRunner double.

    Attributes:
        versions: Binary name -> output of ``<binary> --version``
        outputs: (binary, *args) -> stdout string, or an exception to raise
        calls: Every (binary, *args) invocation, in order
    """

    def __init__(self, versions=None, outputs=None):
        self.versions = dict(versions or {})
        self.outputs = dict(outputs or {})
        self.calls = []

    def run(self, binary, args):
        key = (binary, *args)
        self.calls.append(key)
        if key in self.outputs:
            out = self.outputs[key]
            if isinstance(out, Exception):
                raise out
            return ProcessResult(stdout=out)
        if tuple(args) == ("--version",) and binary in self.versions:
            return ProcessResult(stdout=self.versions[binary])
        raise ProcessError(binary, args, reason="command not found")

    def count(self, *key):
        return self.calls.count(key)


@pytest.fixture
def fake_runner():
    """Factory for FakeRunner instances."""
    return FakeRunner


@pytest.fixture(autouse=True)
def isolated_home(tmp_path, monkeypatch):
    """Keep the developer's real ~/.npmrc and environment out of tests."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("USERPROFILE", str(home))
    monkeypatch.delenv("CLI_NOTIFY_DEBUG", raising=False)
    monkeypatch.delenv("CLI_NOTIFY_DISABLE", raising=False)
    return home
