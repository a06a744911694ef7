"""Pytest configuration and fixtures."""

import sys
from pathlib import Path

import pytest

# Add src to path (for 'ourpkgversion.*' imports without an install)
repo_root = Path(__file__).parent.parent
sys.path.insert(0, str(repo_root / "src"))


class RecordingReporter:
    """Reporter that remembers every outcome it is told about."""

    def __init__(self) -> None:
        self.skips: list[tuple[str, str]] = []
        self.munges: list[tuple[str, int]] = []

    def skipped(self, name: str, reason: str) -> None:
        self.skips.append((name, reason))

    def munged(self, name: str, mutation_count: int) -> None:
        self.munges.append((name, mutation_count))


@pytest.fixture(autouse=True)
def _isolate_logging():
    """Reset global verbosity and log bus subscribers between tests."""
    from ourpkgversion.core.log_bus import get_log_bus
    from ourpkgversion.core.logging import set_colors, set_verbosity

    set_verbosity("normal")
    set_colors(False)
    yield
    get_log_bus().clear()
    set_verbosity("normal")
    set_colors(True)


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch, tmp_path_factory):
    """Hide the developer's OURPKGVERSION_* variables and user config."""
    import os

    for key in list(os.environ):
        if key.startswith("OURPKGVERSION_"):
            monkeypatch.delenv(key)
    monkeypatch.setenv("HOME", str(tmp_path_factory.mktemp("home")))


@pytest.fixture
def flags():
    """Default mode flags: version 0.01, every mode off."""
    from ourpkgversion.core.model import ModeFlags

    return ModeFlags(version="0.01")


@pytest.fixture
def reporter():
    return RecordingReporter()


@pytest.fixture
def sample_dist(tmp_path):
    """Create a small Perl distribution.

    Returns:
        Distribution root with two sentinel files, one pod file, one module
        without a sentinel and a non-Perl file in bin/
    """
    root = tmp_path / "My-Module"
    (root / "lib" / "My" / "Module").mkdir(parents=True)
    (root / "bin").mkdir()

    (root / "lib" / "My" / "Module.pm").write_text(
        "package My::Module;\nuse strict;\n# VERSION\n1;\n", encoding="utf-8"
    )
    (root / "lib" / "My" / "Module" / "Doc.pod").write_text(
        "=head1 NAME\n\n# VERSION\n\n=cut\n", encoding="utf-8"
    )
    (root / "lib" / "My" / "Plain.pm").write_text("package My::Plain;\n1;\n", encoding="utf-8")
    (root / "bin" / "my-tool").write_text(
        "#!/usr/bin/perl\nuse strict;\n# VERSION\nprint qq{hi\\n};\n", encoding="utf-8"
    )
    (root / "bin" / "readme.txt").write_text("not perl\n", encoding="utf-8")
    return root
