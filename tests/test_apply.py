"""
Tests for apply_manifest — the full run over a manifest.
"""

from pathlib import Path

import pytest

from shellsetup.adapters.mock import MockAdapter
from shellsetup.adapters.registry import AdapterRegistry
from shellsetup.core.models.manifest import Manifest
from shellsetup.core.use_cases.apply import apply_manifest


@pytest.fixture
def project(tmp_path: Path) -> Path:
    """A project directory with a few source files."""
    root = tmp_path / "project"
    (root / "configs").mkdir(parents=True)
    (root / "configs" / "kitty.conf").write_text("font_size 13\n")
    (root / "configs" / "tmux.conf").write_text("set -g mouse on\n")
    (root / "scripts").mkdir()
    (root / "scripts" / "hello").write_text("#!/bin/sh\necho hello\n")
    return root


def _manifest(**data) -> Manifest:
    return Manifest.model_validate(data)


# ── Files ─────────────────────────────────────────────────────────


class TestApplyFiles:
    def test_all_step_kinds(self, project: Path, home_dir: Path):
        manifest = _manifest(
            blocks=[{"target": "~/.config/kitty/kitty.conf", "source": "configs/kitty.conf"}],
            sections=[{"target": "~/.zprofile", "subsection": "cargo", "body": ". \"$HOME/.cargo/env\"\n"}],
            lines=[{"target": "~/.zshrc", "line": "source ~/.p10k.zsh", "comment": "p10k"}],
            files=[{"source": "configs/tmux.conf", "target": "~/.tmux.conf"}],
            directories=[{"source": "scripts", "target": "~/.local/bin"}],
        )
        report = apply_manifest(manifest, base_dir=project, home=home_dir, install=False)

        assert report.status == "ok"
        assert [s.kind for s in report.steps] == ["block", "section", "line", "file", "file"]
        assert all(s.action == "created" for s in report.steps)

        assert (home_dir / ".config/kitty/kitty.conf").read_text() == (
            "# BEGIN shell-setup\nfont_size 13\n# END shell-setup\n"
        )
        assert (home_dir / ".zprofile").read_text() == (
            "# BEGIN shell-setup: cargo\n. \"$HOME/.cargo/env\"\n# END shell-setup: cargo\n"
        )
        assert (home_dir / ".zshrc").read_text() == "# p10k\nsource ~/.p10k.zsh\n"
        assert (home_dir / ".tmux.conf").read_text() == "set -g mouse on\n"
        assert (home_dir / ".local/bin/hello").exists()

    def test_second_run_is_unchanged(self, project: Path, home_dir: Path):
        manifest = _manifest(
            blocks=[{"target": "~/.kitty.conf", "source": "configs/kitty.conf"}],
            lines=[{"target": "~/.zshrc", "line": "x=1"}],
        )
        apply_manifest(manifest, base_dir=project, home=home_dir, install=False)
        report = apply_manifest(manifest, base_dir=project, home=home_dir, install=False)
        assert [s.action for s in report.steps] == ["unchanged", "unchanged"]

    def test_one_failure_does_not_stop_others(self, project: Path, home_dir: Path):
        (project / "configs" / "bad.conf").write_text("# END shell-setup\n")
        manifest = _manifest(blocks=[
            {"target": "~/.bad", "source": "configs/bad.conf"},
            {"target": "~/.good", "source": "configs/kitty.conf"},
        ])
        report = apply_manifest(manifest, base_dir=project, home=home_dir, install=False)

        assert report.status == "partial"
        assert report.steps[0].failed
        assert report.steps[0].error_kind == "validation_failed"
        assert report.steps[1].ok
        assert (home_dir / ".good").exists()
        assert not (home_dir / ".bad").exists()

    def test_missing_sources_are_skipped(self, project: Path, home_dir: Path):
        manifest = _manifest(
            blocks=[{"target": "~/.a", "source": "configs/missing"}],
            sections=[{"target": "~/.b", "source": "configs/missing"}],
            directories=[{"source": "nope", "target": "~/bin"}],
        )
        report = apply_manifest(manifest, base_dir=project, home=home_dir, install=False)
        assert [s.status for s in report.steps] == ["skipped", "skipped", "skipped"]
        assert report.status == "ok"
        assert all(s.warnings for s in report.steps)

    def test_dry_run_touches_nothing(self, project: Path, home_dir: Path):
        manifest = _manifest(blocks=[{"target": "~/.a", "source": "configs/kitty.conf"}])
        report = apply_manifest(manifest, base_dir=project, home=home_dir, install=False, dry_run=True)
        assert report.steps[0].action == "dry-run"
        assert not (home_dir / ".a").exists()

    def test_backup_suffix_from_manifest(self, project: Path, home_dir: Path):
        (home_dir / ".a").write_text("user\n")
        manifest = _manifest(
            backup_suffix="backup",
            blocks=[{"target": "~/.a", "source": "configs/kitty.conf"}],
        )
        report = apply_manifest(manifest, base_dir=project, home=home_dir, install=False)
        assert ".a.backup-" in report.steps[0].backup_path


# ── Install ───────────────────────────────────────────────────────


class TestApplyInstall:
    def test_packages_run_first(self, project: Path, home_dir: Path):
        mock = MockAdapter()
        mock.fail("install:nope")
        registry = AdapterRegistry()
        registry.register(mock)

        manifest = _manifest(
            packages=["tmux", "nope"],
            lines=[{"target": "~/.zshrc", "line": "x"}],
        )
        report = apply_manifest(manifest, base_dir=project, home=home_dir, registry=registry)

        assert [(s.kind, s.target, s.status) for s in report.steps] == [
            ("package", "tmux", "ok"),
            ("package", "nope", "failed"),
            ("line", str(home_dir / ".zshrc"), "ok"),
        ]
        assert report.status == "partial"
        assert report.to_dict()["install"]["failed"] == {"nope": "Mock failure"}

    def test_tools_after_packages(self, project: Path, home_dir: Path):
        brew = MockAdapter()
        shell = MockAdapter(adapter_name="shell")
        shell.mark_installed("tool:ruff")
        registry = AdapterRegistry()
        registry.register(brew)
        registry.register(shell)

        manifest = _manifest(
            packages=["tmux"],
            tools=[
                {"name": "ruff", "command": "uv tool install ruff"},
                {"name": "taplo-cli", "command": "cargo install taplo-cli", "check": "taplo"},
            ],
        )
        report = apply_manifest(manifest, base_dir=project, home=home_dir, registry=registry)

        assert [(s.kind, s.target, s.status) for s in report.steps] == [
            ("package", "tmux", "ok"),
            ("tool", "taplo-cli", "ok"),
            ("tool", "ruff", "skipped"),
        ]
        assert report.status == "ok"
        assert report.to_dict()["install"]["skipped"] == ["ruff"]

    def test_tools_alone_need_a_registry(self, project: Path, home_dir: Path):
        manifest = _manifest(tools=[{"name": "ruff", "command": "uv tool install ruff"}])
        with pytest.raises(ValueError):
            apply_manifest(manifest, base_dir=project, home=home_dir)

    def test_registry_required(self, project: Path, home_dir: Path):
        with pytest.raises(ValueError):
            apply_manifest(_manifest(packages=["tmux"]), base_dir=project, home=home_dir)

    def test_no_install(self, project: Path, home_dir: Path):
        report = apply_manifest(_manifest(packages=["tmux"]), base_dir=project, home=home_dir, install=False)
        assert report.steps == []
        assert report.install is None
