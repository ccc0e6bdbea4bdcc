"""Tests for the local filesystem asset backend."""

import os
from pathlib import Path

import pytest

from artwork_catalog.errors import BackendError, NotFound, ValidationError
from artwork_catalog.storage import FilesystemBackend


class TestListing:
    def test_list_identifiers_returns_sorted_directories(self, backend: FilesystemBackend, art_dir: Path):
        (art_dir / "stray.txt").write_text("not an artwork")
        assert backend.list_identifiers() == ["la-casa-azul", "night-walk", "notes-only"]

    def test_list_identifiers_missing_root(self, tmp_path: Path):
        with pytest.raises(BackendError):
            FilesystemBackend(tmp_path / "missing").list_identifiers()

    def test_list_files_skips_subdirectories(self, backend: FilesystemBackend, art_dir: Path):
        (art_dir / "night-walk" / "drafts").mkdir()
        assert backend.list_files("night-walk") == ["clip.mp4"]

    def test_list_files_unknown_artwork(self, backend: FilesystemBackend):
        with pytest.raises(NotFound):
            backend.list_files("does-not-exist")

    @pytest.mark.parametrize("artwork_id", ["", "../etc", "a/b", "a\\b", ".."])
    def test_unsafe_identifiers_rejected(self, backend: FilesystemBackend, artwork_id: str):
        with pytest.raises(ValidationError):
            backend.list_files(artwork_id)


class TestFiles:
    def test_read_file_with_limit(self, backend: FilesystemBackend):
        assert backend.read_file("la-casa-azul", "bitacora.md") == b"Primera capa"
        assert backend.read_file("la-casa-azul", "bitacora.md", max_bytes=4) == b"Prim"

    def test_read_missing_file(self, backend: FilesystemBackend):
        with pytest.raises(NotFound):
            backend.read_file("la-casa-azul", "missing.txt")

    def test_write_then_delete(self, backend: FilesystemBackend, art_dir: Path):
        backend.write_file("night-walk", "detalle.txt", b"hola", "text/plain")
        assert (art_dir / "night-walk" / "detalle.txt").read_bytes() == b"hola"
        assert backend.has_file("night-walk", "detalle.txt")

        backend.delete_file("night-walk", "detalle.txt")
        assert not backend.has_file("night-walk", "detalle.txt")

    def test_delete_missing_file(self, backend: FilesystemBackend):
        with pytest.raises(NotFound):
            backend.delete_file("night-walk", "missing.jpg")

    def test_unsafe_filename_rejected(self, backend: FilesystemBackend):
        with pytest.raises(ValidationError):
            backend.read_file("la-casa-azul", "../la-casa-azul/01.jpg")


class TestNamespaces:
    def test_create_namespace(self, backend: FilesystemBackend):
        assert not backend.exists("new-piece")
        backend.create_namespace("new-piece")
        assert backend.exists("new-piece")
        assert backend.list_files("new-piece") == []


class TestResolveRef:
    def test_resolves_to_local_path(self, backend: FilesystemBackend, art_dir: Path):
        ref = backend.resolve_ref("la-casa-azul", "01.jpg")
        assert not ref.is_redirect
        assert ref.content_type == "image/jpeg"
        assert Path(ref.path) == (art_dir / "la-casa-azul" / "01.jpg").resolve()

    def test_missing_file(self, backend: FilesystemBackend):
        with pytest.raises(NotFound):
            backend.resolve_ref("la-casa-azul", "99.jpg")

    def test_symlink_escaping_root_rejected(self, backend: FilesystemBackend, art_dir: Path, tmp_path: Path):
        secret = tmp_path / "secret.jpg"
        secret.write_bytes(b"outside")
        os.symlink(secret, art_dir / "la-casa-azul" / "escape.jpg")
        with pytest.raises(ValidationError):
            backend.resolve_ref("la-casa-azul", "escape.jpg")

    def test_describe(self, backend: FilesystemBackend, art_dir: Path):
        assert backend.describe() == f"file://{art_dir.resolve()}"
