"""Tests for version lookup."""

from pathlib import Path

from jdl._version import DISTRIBUTION, get_version


class TestGetVersion:
    def test_reads_own_pyproject(self, tmp_path: Path) -> None:
        pyproject = tmp_path / "pyproject.toml"
        pyproject.write_text(f'[project]\nname = "{DISTRIBUTION}"\nversion = "2.3.4"\n')
        assert get_version(pyproject) == "2.3.4"

    def test_ignores_foreign_pyproject(self, tmp_path: Path) -> None:
        pyproject = tmp_path / "pyproject.toml"
        pyproject.write_text('[project]\nname = "other"\nversion = "9.9.9"\n')
        assert get_version(pyproject) != "9.9.9"

    def test_ignores_invalid_toml(self, tmp_path: Path) -> None:
        pyproject = tmp_path / "pyproject.toml"
        pyproject.write_text("[project\n")
        assert get_version(pyproject)

    def test_checkout_version(self) -> None:
        assert get_version() == "0.1.0"
