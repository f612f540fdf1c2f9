import subprocess

import pytest

import brewpick


class FakeRunner:
    """Stands in for brewpick.run_command; unknown commands exit 1."""

    def __init__(self):
        self.calls = []
        self.responses = {}

    def add(self, args, returncode=0, stdout="", stderr=""):
        self.responses[tuple(args)] = (returncode, stdout, stderr)

    def fail_to_spawn(self, args, error=None):
        self.responses[tuple(args)] = error or FileNotFoundError(2, "No such file or directory")

    def __call__(self, args):
        self.calls.append(list(args))
        response = self.responses.get(tuple(args), (1, "", ""))
        if isinstance(response, Exception):
            raise response
        returncode, stdout, stderr = response
        return subprocess.CompletedProcess(args, returncode, stdout, stderr)


@pytest.fixture
def runner(monkeypatch):
    fake = FakeRunner()
    monkeypatch.setattr(brewpick, "run_command", fake)
    monkeypatch.setattr(brewpick.shutil, "which", lambda name: f"/opt/homebrew/bin/{name}")
    return fake


@pytest.fixture
def no_tools(monkeypatch):
    monkeypatch.setattr(brewpick.shutil, "which", lambda name: None)


@pytest.fixture
def sample_brewfile():
    return (
        "# CLI tool\n"
        'brew "jq"\n'
        'cask "firefox"\n'
        'mas "Xcode", id: 497799835\n'
    )
