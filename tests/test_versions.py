"""Tests for version selection."""

from pathlib import Path

import pytest
from cask import Formula
from cask import NoVersionsAvailableError
from cask import UnknownVersionError
from cask import select_version


class MockGit:
    """Mock git client returning fixed tags."""

    def __init__(self, tags: list[str]):
        self._tags = tags
        self.tag_calls: list[str] = []

    def exists(self, url: str) -> bool:
        return True

    def clone(self, url: str, directory: Path, options=None) -> None:
        raise AssertionError("clone should not be called")

    def tags(self, url: str) -> list[str]:
        self.tag_calls.append(url)
        return list(self._tags)


def make_formula(version_lines: str = "") -> Formula:
    return Formula.from_text(
        f"""
[package]
name = "github.com/example/tool"
bin = "tool"
repository = "https://github.com/example/tool"
description = "tool"
{version_lines}
"""
    )


def test_explicit_version():
    formula = make_formula('versions = ["1.1.0", "1.0.0"]')

    assert select_version(formula, "1.0.0") == "1.0.0"


def test_explicit_version_not_declared():
    """Test an explicit version missing from package.versions."""
    formula = make_formula('versions = ["0.1.12", "0.1.11"]')

    with pytest.raises(UnknownVersionError, match="9.9.9"):
        select_version(formula, "9.9.9")


def test_default_version():
    formula = make_formula('version = "1.0.0"\nversions = ["1.1.0", "1.0.0"]')

    assert select_version(formula) == "1.0.0"


def test_default_version_not_declared():
    formula = make_formula('version = "2.0.0"\nversions = ["1.1.0", "1.0.0"]')

    with pytest.raises(UnknownVersionError, match="2.0.0"):
        select_version(formula)


def test_first_declared_version():
    """Test no requested version picks package.versions[0]."""
    formula = make_formula('versions = ["1.1.0", "1.0.0"]')

    assert select_version(formula, None) == "1.1.0"


def test_remote_tags_when_no_versions_declared():
    formula = make_formula()
    git = MockGit(["2.0.0", "1.9.0"])

    assert select_version(formula, git=git) == "2.0.0"
    assert git.tag_calls == ["https://github.com/example/tool"]


def test_explicit_version_checked_against_remote_tags():
    formula = make_formula()
    git = MockGit(["2.0.0", "1.9.0"])

    assert select_version(formula, "1.9.0", git=git) == "1.9.0"
    with pytest.raises(UnknownVersionError):
        select_version(formula, "1.0.0", git=git)


def test_no_versions_available():
    formula = make_formula()

    with pytest.raises(NoVersionsAvailableError):
        select_version(formula, git=MockGit([]))


def test_formula_versions_and_latest():
    """Test Formula.versions() and Formula.latest()."""
    declared = make_formula('versions = ["1.1.0", "1.0.0"]')
    remote = make_formula()
    git = MockGit(["3.0.0", "2.0.0"])

    assert declared.versions() == ["1.1.0", "1.0.0"]
    assert declared.latest() == "1.1.0"
    assert remote.versions(git=git) == ["3.0.0", "2.0.0"]
    assert remote.latest(git=git) == "3.0.0"
    assert remote.latest(git=MockGit([])) is None
