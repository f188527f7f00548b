"""
Tests for the install contract, the registry and the mock, Homebrew
and tool command adapters.
"""

import subprocess

import pytest
from pydantic import ValidationError

from shellsetup.adapters.mock import MockAdapter
from shellsetup.adapters.packages.brew import HomebrewAdapter
from shellsetup.adapters.registry import AdapterRegistry
from shellsetup.adapters.shell.command import ToolCommandAdapter
from shellsetup.core.models.action import Action, Receipt


def _install(package: str = "tmux", cask: bool = False) -> Action:
    return Action(kind="install", target=package, cask=cask)


# ── Action / Receipt Tests ────────────────────────────────────────


class TestAction:
    def test_id(self):
        assert _install("kitty").id == "install:kitty"
        assert Action(kind="tap", target="homebrew/cask-fonts").id == "tap:homebrew/cask-fonts"

    def test_describe(self):
        assert _install("kitty", cask=True).describe() == "install kitty (cask)"
        assert Action(kind="tap", target="x/y").describe() == "tap x/y"

    def test_unknown_kind_rejected(self):
        with pytest.raises(ValidationError):
            Action(kind="upgrade", target="tmux")


class TestReceipt:
    def test_success(self):
        r = Receipt.success(_install(), output="done")
        assert r.ok and not r.failed
        assert r.action_id == "install:tmux"
        assert r.adapter == "brew"

    def test_failure(self):
        r = Receipt.failure(_install(), "boom")
        assert r.failed
        assert r.error == "boom"

    def test_skip(self):
        r = Receipt.skip(_install(), reason="dry")
        assert not r.ok and not r.failed
        assert r.output == "dry"


# ── Mock Adapter Tests ────────────────────────────────────────────


class TestMockAdapter:
    def test_default_success(self):
        mock = MockAdapter()
        receipt = mock.run(_install())
        assert receipt.ok
        assert mock.call_count == 1

    def test_fail(self):
        mock = MockAdapter()
        mock.fail("install:tmux", error="Intentional failure")
        receipt = mock.run(_install())
        assert receipt.failed
        assert receipt.error == "Intentional failure"

    def test_mark_installed(self):
        mock = MockAdapter()
        mock.mark_installed("install:tmux")
        receipt = mock.run(_install())
        assert receipt.status == "skipped"
        assert mock.call_count == 1

    def test_records_calls(self):
        mock = MockAdapter()
        for name in ("a", "b", "c"):
            mock.run(_install(name))
        assert [a.target for a in mock.calls] == ["a", "b", "c"]


# ── Registry Tests ────────────────────────────────────────────────


class TestAdapterRegistry:
    def test_register_and_get(self):
        registry = AdapterRegistry()
        mock = MockAdapter()
        registry.register(mock)
        assert registry.get("brew") is mock
        assert registry.get("apt") is None

    def test_execute_success(self):
        registry = AdapterRegistry()
        registry.register(MockAdapter())
        receipt = registry.execute_action(_install())
        assert receipt.ok
        assert receipt.duration_ms >= 0

    def test_missing_adapter_fails(self):
        receipt = AdapterRegistry().execute_action(_install())
        assert receipt.failed
        assert "No adapter registered" in receipt.error

    def test_dry_run_skips(self):
        registry = AdapterRegistry()
        mock = MockAdapter()
        registry.register(mock)
        receipt = registry.execute_action(_install(), dry_run=True)
        assert receipt.status == "skipped"
        assert mock.call_count == 0

    def test_mock_mode_without_adapter(self):
        registry = AdapterRegistry(mock_mode=True)
        receipt = registry.execute_action(_install())
        assert receipt.ok
        assert receipt.metadata["mock"] is True

    def test_use_mock(self):
        registry = AdapterRegistry()
        registry.register(HomebrewAdapter(brew_path="/nonexistent/brew"))
        mock = MockAdapter()
        registry.use_mock(mock)
        registry.execute_action(_install())
        assert mock.call_count == 1

    def test_check_failure(self):
        registry = AdapterRegistry()
        registry.register(HomebrewAdapter(brew_path="/opt/homebrew/bin/brew"))
        receipt = registry.execute_action(Action(kind="install", target=" "))
        assert receipt.failed
        assert receipt.error.startswith("Cannot install")

    def test_adapter_that_raises(self):
        class Exploding(MockAdapter):
            def run(self, action):
                raise RuntimeError("kaboom")

        registry = AdapterRegistry()
        registry.register(Exploding())
        receipt = registry.execute_action(_install())
        assert receipt.failed
        assert "kaboom" in receipt.error

    def test_availability(self):
        registry = AdapterRegistry()
        registry.register(MockAdapter(available=False))
        assert registry.availability() == {"brew": False}


# ── Homebrew Adapter Tests ────────────────────────────────────────


class TestHomebrewAdapter:
    def test_build_install_command(self):
        adapter = HomebrewAdapter(brew_path="/usr/local/bin/brew")
        assert adapter.build_command(_install("tmux")) == ["/usr/local/bin/brew", "install", "tmux"]

    def test_build_cask_command(self):
        adapter = HomebrewAdapter(brew_path="brew")
        assert adapter.build_command(_install("kitty", cask=True)) == [
            "brew", "install", "--cask", "kitty",
        ]

    def test_build_tap_command(self):
        adapter = HomebrewAdapter(brew_path="brew")
        action = Action(kind="tap", target="homebrew/cask-fonts")
        assert adapter.build_command(action) == ["brew", "tap", "homebrew/cask-fonts"]

    def test_check_requires_brew(self, monkeypatch):
        monkeypatch.setattr("shellsetup.adapters.packages.brew.locate_brew", lambda: None)
        assert "Homebrew not found" in HomebrewAdapter().check(_install())

    def test_check_ok(self):
        assert HomebrewAdapter(brew_path="brew").check(_install()) is None

    def test_run_success(self, monkeypatch):
        calls = []

        def fake_run(command, **kwargs):
            calls.append(command)
            if "list" in command:
                return subprocess.CompletedProcess(command, 1, stdout="", stderr="")
            return subprocess.CompletedProcess(command, 0, stdout="installed\n", stderr="")

        monkeypatch.setattr("shellsetup.adapters.packages.brew.subprocess.run", fake_run)
        receipt = HomebrewAdapter(brew_path="brew").run(_install())
        assert receipt.ok
        assert receipt.output == "installed"
        assert receipt.command == ["brew", "install", "tmux"]
        assert receipt.return_code == 0
        assert calls[0] == ["brew", "list", "--versions", "tmux"]

    def test_already_installed_is_skipped(self, monkeypatch):
        calls = []

        def fake_run(command, **kwargs):
            calls.append(command)
            return subprocess.CompletedProcess(command, 0, stdout="tmux 3.4\n", stderr="")

        monkeypatch.setattr("shellsetup.adapters.packages.brew.subprocess.run", fake_run)
        receipt = HomebrewAdapter(brew_path="brew").run(_install())
        assert receipt.status == "skipped"
        assert receipt.output == "tmux already installed"
        assert calls == [["brew", "list", "--versions", "tmux"]]

    def test_installed_check_for_cask(self, monkeypatch):
        calls = []

        def fake_run(command, **kwargs):
            calls.append(command)
            return subprocess.CompletedProcess(command, 0, stdout="kitty 0.35\n", stderr="")

        monkeypatch.setattr("shellsetup.adapters.packages.brew.subprocess.run", fake_run)
        receipt = HomebrewAdapter(brew_path="brew").run(_install("kitty", cask=True))
        assert receipt.status == "skipped"
        assert calls == [["brew", "list", "--versions", "--cask", "kitty"]]

    def test_tap_is_not_checked(self, monkeypatch):
        calls = []

        def fake_run(command, **kwargs):
            calls.append(command)
            return subprocess.CompletedProcess(command, 0, stdout="", stderr="")

        monkeypatch.setattr("shellsetup.adapters.packages.brew.subprocess.run", fake_run)
        receipt = HomebrewAdapter(brew_path="brew").run(Action(kind="tap", target="x/y"))
        assert receipt.ok
        assert calls == [["brew", "tap", "x/y"]]

    def test_rejects_tool_actions(self):
        action = Action(kind="tool", target="ruff", adapter="shell", command="uv tool install ruff")
        assert "shell adapter" in HomebrewAdapter(brew_path="brew").check(action)

    def test_run_failure(self, monkeypatch):
        def fake_run(command, **kwargs):
            return subprocess.CompletedProcess(command, 1, stdout="", stderr="No formula\n")

        monkeypatch.setattr("shellsetup.adapters.packages.brew.subprocess.run", fake_run)
        receipt = HomebrewAdapter(brew_path="brew").run(_install("nope"))
        assert receipt.failed
        assert receipt.error == "No formula"
        assert receipt.return_code == 1

    def test_run_timeout(self, monkeypatch):
        def fake_run(command, **kwargs):
            raise subprocess.TimeoutExpired(command, kwargs["timeout"])

        monkeypatch.setattr("shellsetup.adapters.packages.brew.subprocess.run", fake_run)
        receipt = HomebrewAdapter(brew_path="brew", timeout=5).run(_install())
        assert receipt.failed
        assert "timed out after 5s" in receipt.error


# ── Tool Command Adapter Tests ────────────────────────────────────


def _tool(name: str = "ruff", command: str = "uv tool install ruff", check: str | None = None) -> Action:
    return Action(kind="tool", target=name, adapter="shell", command=command, check=check)


class TestToolCommandAdapter:
    def test_describe(self):
        assert _tool().describe() == "install ruff via `uv tool install ruff`"
        assert _tool().id == "tool:ruff"

    def test_check(self):
        adapter = ToolCommandAdapter()
        assert adapter.check(_tool()) is None
        assert "install" in adapter.check(_install())
        assert adapter.check(_tool(command="  ")) == "no install command given"

    def test_on_path_is_skipped(self, monkeypatch):
        ran = []
        monkeypatch.setattr(
            "shellsetup.adapters.shell.command.shutil.which", lambda name: f"/usr/local/bin/{name}"
        )
        monkeypatch.setattr(
            "shellsetup.adapters.shell.command.subprocess.run", lambda *a, **kw: ran.append(a)
        )
        receipt = ToolCommandAdapter().run(_tool())
        assert receipt.status == "skipped"
        assert receipt.output == "ruff already installed"
        assert receipt.metadata["path"] == "/usr/local/bin/ruff"
        assert ran == []

    def test_check_names_the_executable(self, monkeypatch):
        looked_up = []

        def fake_which(name):
            looked_up.append(name)
            return "/usr/local/bin/taplo"

        monkeypatch.setattr("shellsetup.adapters.shell.command.shutil.which", fake_which)
        receipt = ToolCommandAdapter().run(
            _tool("taplo-cli", command="cargo install taplo-cli", check="taplo")
        )
        assert receipt.status == "skipped"
        assert looked_up == ["taplo"]

    def test_missing_tool_is_installed(self, monkeypatch):
        ran = []

        def fake_run(command, **kwargs):
            ran.append((command, kwargs["shell"]))
            return subprocess.CompletedProcess(command, 0, stdout="Installed ruff\n", stderr="")

        monkeypatch.setattr("shellsetup.adapters.shell.command.shutil.which", lambda name: None)
        monkeypatch.setattr("shellsetup.adapters.shell.command.subprocess.run", fake_run)
        receipt = ToolCommandAdapter().run(_tool())
        assert receipt.ok
        assert receipt.output == "Installed ruff"
        assert ran == [("uv tool install ruff", True)]

    def test_install_failure(self, monkeypatch):
        def fake_run(command, **kwargs):
            return subprocess.CompletedProcess(command, 1, stdout="", stderr="")

        monkeypatch.setattr("shellsetup.adapters.shell.command.shutil.which", lambda name: None)
        monkeypatch.setattr("shellsetup.adapters.shell.command.subprocess.run", fake_run)
        receipt = ToolCommandAdapter().run(_tool())
        assert receipt.failed
        assert receipt.error == "install command exited with code 1"
        assert receipt.return_code == 1

    def test_install_timeout(self, monkeypatch):
        def fake_run(command, **kwargs):
            raise subprocess.TimeoutExpired(command, kwargs["timeout"])

        monkeypatch.setattr("shellsetup.adapters.shell.command.shutil.which", lambda name: None)
        monkeypatch.setattr("shellsetup.adapters.shell.command.subprocess.run", fake_run)
        receipt = ToolCommandAdapter(timeout=3).run(_tool())
        assert receipt.failed
        assert "timed out after 3s" in receipt.error
