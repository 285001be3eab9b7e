"""Tests for placing the runtime bundle in the docs tree."""

import logging
from unittest.mock import MagicMock, patch

from docmermaid.assets import (
    PACKAGED_BUNDLE_DIR,
    RUNTIME_MODULE,
    FilesystemAssetPlacer,
    NullAssetPlacer,
    create_placer,
    local_module_path,
)
from docmermaid.errors import AssetPlacementError


def _bundle(tmp_path):
    bundle = tmp_path / "bundle"
    bundle.mkdir()
    (bundle / RUNTIME_MODULE).write_text("export default {};", encoding="utf-8")
    return bundle


class TestFilesystemAssetPlacer:
    """Tests for the idempotent copy of the bundle."""

    def test_copies_bundle_into_docs(self, tmp_path):
        docs = tmp_path / "html"
        docs.mkdir()
        placer = FilesystemAssetPlacer(docs, bundle_dir=_bundle(tmp_path))
        placer.ensure_placed()
        placed = docs / "_static" / "mermaid" / RUNTIME_MODULE
        assert placed.read_text(encoding="utf-8") == "export default {};"
        assert placer.errors == []

    def test_no_docs_dir_is_noop(self, tmp_path):
        docs = tmp_path / "html"
        placer = FilesystemAssetPlacer(docs, bundle_dir=_bundle(tmp_path))
        placer.ensure_placed()
        assert not docs.exists()
        assert placer.errors == []

    def test_existing_target_left_alone(self, tmp_path):
        docs = tmp_path / "html"
        target = docs / "_static" / "mermaid"
        target.mkdir(parents=True)
        (target / "custom.mjs").write_text("keep", encoding="utf-8")
        placer = FilesystemAssetPlacer(docs, bundle_dir=_bundle(tmp_path))
        placer.ensure_placed()
        assert not (target / RUNTIME_MODULE).exists()
        assert (target / "custom.mjs").read_text(encoding="utf-8") == "keep"

    def test_repeated_calls_are_idempotent(self, tmp_path):
        docs = tmp_path / "html"
        docs.mkdir()
        placer = FilesystemAssetPlacer(docs, bundle_dir=_bundle(tmp_path))
        placer.ensure_placed()
        placer.ensure_placed()
        assert placer.errors == []

    def test_concurrent_creation_is_not_an_error(self, tmp_path):
        docs = tmp_path / "html"
        docs.mkdir()
        placer = FilesystemAssetPlacer(docs, bundle_dir=_bundle(tmp_path))
        real_exists = type(placer.target_dir).exists

        def racing_exists(path):
            # Another process creates the target right after our check
            result = real_exists(path)
            if path == placer.target_dir and not result:
                path.mkdir(parents=True)
            return result

        with patch.object(type(placer.target_dir), "exists", racing_exists):
            placer.ensure_placed()
        assert placer.errors == []
        assert (placer.target_dir / RUNTIME_MODULE).exists()

    def test_failure_logged_not_raised(self, tmp_path, caplog):
        docs = tmp_path / "html"
        docs.mkdir()
        placer = FilesystemAssetPlacer(docs, bundle_dir=tmp_path / "no_bundle")
        with caplog.at_level(logging.WARNING, logger="docmermaid.assets"):
            placer.ensure_placed()
        assert len(placer.errors) == 1
        assert isinstance(placer.errors[0], AssetPlacementError)
        assert "failed to place mermaid runtime" in caplog.text

    def test_custom_subdir(self, tmp_path):
        docs = tmp_path / "html"
        docs.mkdir()
        placer = FilesystemAssetPlacer(docs, bundle_dir=_bundle(tmp_path), subdir="static/js")
        placer.ensure_placed()
        assert (docs / "static" / "js" / RUNTIME_MODULE).exists()

    def test_default_bundle_is_packaged(self, tmp_path):
        placer = FilesystemAssetPlacer(tmp_path)
        assert placer.bundle_dir == PACKAGED_BUNDLE_DIR
        assert (PACKAGED_BUNDLE_DIR / RUNTIME_MODULE).is_file()

    def test_take_errors_drains(self, tmp_path):
        docs = tmp_path / "html"
        docs.mkdir()
        placer = FilesystemAssetPlacer(docs, bundle_dir=tmp_path / "no_bundle")
        placer.ensure_placed()
        assert len(placer.take_errors()) == 1
        assert placer.errors == []


class TestLazyBundleSource:
    """Tests for bundle sources resolved only when a copy is needed."""

    def test_not_called_without_docs_dir(self, tmp_path):
        source = MagicMock(return_value=_bundle(tmp_path))
        placer = FilesystemAssetPlacer(tmp_path / "html", bundle_dir=source)
        placer.ensure_placed()
        source.assert_not_called()

    def test_not_called_when_target_exists(self, tmp_path):
        docs = tmp_path / "html"
        (docs / "_static" / "mermaid").mkdir(parents=True)
        source = MagicMock(return_value=_bundle(tmp_path))
        FilesystemAssetPlacer(docs, bundle_dir=source).ensure_placed()
        source.assert_not_called()

    def test_called_once_when_copying(self, tmp_path):
        docs = tmp_path / "html"
        docs.mkdir()
        source = MagicMock(return_value=_bundle(tmp_path))
        placer = FilesystemAssetPlacer(docs, bundle_dir=source)
        placer.ensure_placed()
        placer.ensure_placed()
        source.assert_called_once_with()
        assert (placer.target_dir / RUNTIME_MODULE).is_file()


class TestHelpers:
    """Tests for placer construction and paths."""

    def test_create_placer_without_docs_dir(self):
        assert isinstance(create_placer(None), NullAssetPlacer)

    def test_create_placer_with_docs_dir(self, tmp_path):
        assert isinstance(create_placer(tmp_path), FilesystemAssetPlacer)

    def test_local_module_path(self):
        assert local_module_path() == "_static/mermaid/mermaid.esm.min.mjs"
        assert local_module_path("/static/js/") == "static/js/mermaid.esm.min.mjs"

    def test_null_placer(self):
        NullAssetPlacer().ensure_placed()

    def test_null_placer_has_no_errors(self):
        assert NullAssetPlacer().take_errors() == []
