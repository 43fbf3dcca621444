"""Tests for Formula schema and loader."""

from pathlib import Path

import pytest
from cask import CaskRecord
from cask import Formula
from cask import FormulaNotFoundError
from cask import FormulaParseError
from cask import FormulaSchemaError
from cask import ResourceTargetDetail
from cask import ResourceTargetExecutable
from cask import load_formula

FIXTURES = Path(__file__).parent / "fixtures" / "config"

DESCRIPTION = "A command line tool, manage your hundreds of repository, written with Rust.\n"


def test_read_default_config():
    """Test loading a formula with detailed resource targets."""
    config_path = FIXTURES / "default_Cask.toml"

    rc = Formula.from_file(config_path, "https://github.com/example/example.git")

    assert rc.repository == "https://github.com/example/example.git"
    assert rc.filepath == config_path
    assert rc.package.name == "github.com/axetroy/gpm.rs"
    assert rc.package.bin == "gpm"
    assert rc.package.versions == ["0.1.12", "0.1.11"]
    assert rc.package.authors == ["Axetroy <axetroy.dev@gmail.com>"]
    assert rc.package.keywords == ["gpm", "git", "project", "manager"]
    assert rc.package.repository == "https://github.com/axetroy/gpm.rs"
    assert rc.package.description == DESCRIPTION
    assert rc.cask_record is None

    assert isinstance(rc.windows.x86_64, ResourceTargetDetail)
    assert rc.windows.x86_64.url == "{package.repository}/releases/download/v{version}/gpm_windows_amd64.tar.gz"
    assert rc.darwin.x86_64.url == "{package.repository}/releases/download/v{version}/gpm_darwin_amd64.tar.gz"
    assert rc.darwin.aarch64.url == "{package.repository}/releases/download/v{version}/gpm_darwin_arm64.tar.gz"
    assert rc.linux.x86_64.url == "{package.repository}/releases/download/v{version}/gpm_linux_amd64.tar.gz"
    assert rc.linux.aarch64.url == "{package.repository}/releases/download/v{version}/gpm_linux_arm64.tar.gz"
    assert rc.linux.x86 is None


def test_read_simple_config():
    """Test bare string resource targets stay simple url templates."""
    rc = load_formula(FIXTURES / "simple_Cask.toml", "https://github.com/example/example.git")

    assert rc.package.name == "github.com/axetroy/gpm.rs"
    assert rc.package.description == DESCRIPTION

    for platform in (rc.windows, rc.darwin, rc.linux):
        assert isinstance(platform.x86_64, str)

    assert rc.darwin.aarch64 == (
        "https://github.com/axetroy/gpm.rs/releases/download/v{version}/gpm_darwin_arm64.tar.gz"
    )
    assert rc.linux.x86_64 == (
        "https://github.com/axetroy/gpm.rs/releases/download/v{version}/gpm_linux_amd64.tar.gz"
    )


def test_read_executable_config():
    """Test executable targets, context, dependencies and hook."""
    rc = Formula.from_file(FIXTURES / "executable_Cask.toml")

    assert rc.repository == ""
    assert rc.package.version == "1.2.0"
    assert rc.context == {"mirror": "https://downloads.example.com"}

    linux_x64 = rc.linux.x86_64
    assert isinstance(linux_x64, ResourceTargetExecutable)
    assert linux_x64.executable == "{context.mirror}/{version}/tool-linux-amd64"
    assert linux_x64.checksum == "ABCDEF"

    linux_arm = rc.linux.aarch64
    assert isinstance(linux_arm, ResourceTargetDetail)
    assert linux_arm.path == "tool-{version}/bin"
    assert linux_arm.extension is None

    assert rc.windows.riscv64.extension == ".tgz"

    assert rc.dependencies["github.com/example/lib"] == "1.0.0"
    assert rc.dependencies["github.com/example/other"].version == "2.0.0"
    assert rc.hook == {"preinstall": "echo 'hello sh'"}


def test_file_content_is_verbatim():
    """Test the original document text is preserved byte for byte."""
    config_path = FIXTURES / "default_Cask.toml"

    rc = Formula.from_file(config_path)

    assert rc.file_content == config_path.read_text(encoding="utf-8")


def test_missing_file(tmp_path):
    """Test error when the formula file does not exist."""
    with pytest.raises(FormulaNotFoundError, match="does not exist"):
        Formula.from_file(tmp_path / "Cask.toml")


def test_invalid_toml(tmp_path):
    """Test error when the formula is not TOML."""
    path = tmp_path / "Cask.toml"
    path.write_text("[package\nname = ")

    with pytest.raises(FormulaParseError):
        Formula.from_file(path)


@pytest.mark.parametrize("missing", ["name", "bin", "repository", "description"])
def test_missing_required_package_field(tmp_path, missing):
    """Test error when a required [package] field is absent."""
    fields = {
        "name": "github.com/example/tool",
        "bin": "tool",
        "repository": "https://github.com/example/tool",
        "description": "tool",
    }
    del fields[missing]
    path = tmp_path / "Cask.toml"
    path.write_text("[package]\n" + "".join(f'{k} = "{v}"\n' for k, v in fields.items()))

    with pytest.raises(FormulaSchemaError):
        Formula.from_file(path)


def test_invalid_resource_target(tmp_path):
    """Test error when a resource target has neither url nor executable."""
    path = tmp_path / "Cask.toml"
    path.write_text(
        """
[package]
name = "github.com/example/tool"
bin = "tool"
repository = "https://github.com/example/tool"
description = "tool"

[linux]
x86_64 = { checksum = "abc" }
"""
    )

    with pytest.raises(FormulaSchemaError):
        Formula.from_file(path)


def test_invalid_extension(tmp_path):
    """Test error when a detailed target declares an unsupported extension."""
    path = tmp_path / "Cask.toml"
    path.write_text(
        """
[package]
name = "github.com/example/tool"
bin = "tool"
repository = "https://github.com/example/tool"
description = "tool"

[linux]
x86_64 = { url = "https://example.com/tool.7z", extension = ".7z" }
"""
    )

    with pytest.raises(FormulaSchemaError):
        Formula.from_file(path)


def test_cask_record_section():
    """Test the generated [cask] section parses into CaskRecord."""
    text = """[cask]
package_name = "github.com/example/tool"
created_at = "2025-10-26T12:00:00+00:00"
version = "1.0.0"
repository = "https://github.com/example/tool.git"

[package]
name = "github.com/example/tool"
bin = "tool"
repository = "https://github.com/example/tool"
description = "tool"
"""

    rc = Formula.from_text(text)

    assert rc.cask_record == CaskRecord(
        name="github.com/example/tool",
        created_at="2025-10-26T12:00:00+00:00",
        version="1.0.0",
        repository="https://github.com/example/tool.git",
    )
