"""Tests for jdl.toml manifest loading."""

from pathlib import Path

import pytest

from jdl.core.errors import JdlInputError
from jdl.core.manifest import discover_jdl_files, load_manifest


def _write_manifest(root: Path, body: str) -> Path:
    path = root / "jdl.toml"
    path.write_text(body, encoding="utf-8")
    return path


class TestLoadManifest:
    def test_full_manifest(self, tmp_path: Path) -> None:
        _write_manifest(
            tmp_path,
            '[project]\nname = "shop"\nversion = "1.2.0"\n\n'
            '[jdl]\nfiles = ["model/*.jdl"]\ndatabase_type = "postgresql"\n'
            'application_type = "monolith"\n',
        )
        manifest = load_manifest(tmp_path)
        assert manifest.name == "shop"
        assert manifest.version == "1.2.0"
        assert manifest.root == tmp_path
        assert manifest.files == ["model/*.jdl"]
        assert manifest.database_type == "postgresql"
        assert manifest.application_type == "monolith"

    def test_defaults(self, tmp_path: Path) -> None:
        manifest = load_manifest(_write_manifest(tmp_path, ""))
        assert manifest.name == tmp_path.name
        assert manifest.files == []
        assert manifest.database_type == "sql"
        assert manifest.application_type is None

    def test_missing(self, tmp_path: Path) -> None:
        with pytest.raises(JdlInputError, match="couldn't be found"):
            load_manifest(tmp_path)

    def test_invalid_toml(self, tmp_path: Path) -> None:
        _write_manifest(tmp_path, "[jdl\nfiles = ")
        with pytest.raises(JdlInputError, match="Invalid manifest"):
            load_manifest(tmp_path)


class TestDiscoverFiles:
    def test_globs_and_plain_paths(self, tmp_path: Path) -> None:
        model = tmp_path / "model"
        model.mkdir()
        for name in ("b.jdl", "a.jdl"):
            (model / name).write_text("entity A\n")
        _write_manifest(
            tmp_path,
            '[jdl]\nfiles = ["extra.jh", "model/*.jdl", "model/a.jdl"]\n',
        )
        files = discover_jdl_files(load_manifest(tmp_path))
        assert files == [tmp_path / "extra.jh", model / "a.jdl", model / "b.jdl"]
