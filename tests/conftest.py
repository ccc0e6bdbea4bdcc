"""Test configuration and fixtures."""

import json
from pathlib import Path
from typing import Dict, Generator, Union

import pytest
from fastapi.testclient import TestClient

from artwork_catalog.api import create_app
from artwork_catalog.config import Settings
from artwork_catalog.context import CatalogContext, build_context
from artwork_catalog.db import DatabaseOverlay, create_overlay_engine, init_database
from artwork_catalog.storage import FilesystemBackend

ADMIN_TOKEN = "test-admin-token"

# Smallest valid-looking payloads; only the extension matters to the catalog
JPEG_BYTES = b"\xff\xd8\xff\xe0fake-jpeg"
PNG_BYTES = b"\x89PNG\r\n\x1a\nfake-png"


def write_artwork(root: Path, artwork_id: str, files: Dict[str, Union[bytes, str, dict]]) -> Path:
    """Create an artwork folder with the given files."""
    folder = root / artwork_id
    folder.mkdir(parents=True, exist_ok=True)
    for name, content in files.items():
        if isinstance(content, dict):
            content = json.dumps(content)
        if isinstance(content, str):
            content = content.encode("utf-8")
        (folder / name).write_bytes(content)
    return folder


@pytest.fixture
def art_dir(tmp_path: Path) -> Path:
    """An artworks folder with a few typical layouts."""
    root = tmp_path / "art"
    root.mkdir()
    write_artwork(
        root,
        "la-casa-azul",
        {
            "02.jpg": JPEG_BYTES,
            "01.jpg": JPEG_BYTES,
            "meta.json": {
                "paintedLocation": "Coyoacán",
                "startDate": "2023-04-01",
                "endDate": "2023-06-15",
                "inProgress": False,
            },
            "detalle.txt": "Óleo sobre tela",
            "bitacora.md": "Primera capa",
        },
    )
    write_artwork(root, "night-walk", {"clip.mp4": b"fake-mp4"})
    write_artwork(root, "notes-only", {"bitacora.txt": "sin imágenes todavía"})
    return root


@pytest.fixture
def backend(art_dir: Path) -> FilesystemBackend:
    return FilesystemBackend(art_dir)


@pytest.fixture
def overlay() -> Generator[DatabaseOverlay, None, None]:
    """Database overlay on an in-memory SQLite database."""
    engine = create_overlay_engine("sqlite:///:memory:")
    init_database(engine)
    db_overlay = DatabaseOverlay(engine)
    yield db_overlay
    db_overlay.dispose()


@pytest.fixture
def settings(art_dir: Path) -> Settings:
    return Settings(
        artworks_dir=str(art_dir),
        admin_token=ADMIN_TOKEN,
        database_url=None,
        bucket_name=None,
        log_format="console",
    )


@pytest.fixture
def context(settings: Settings, backend: FilesystemBackend, overlay: DatabaseOverlay) -> CatalogContext:
    return build_context(settings, backend=backend, overlay=overlay)


@pytest.fixture
def client(context: CatalogContext) -> TestClient:
    return TestClient(create_app(context))


@pytest.fixture
def auth_headers() -> Dict[str, str]:
    return {"Authorization": f"Bearer {ADMIN_TOKEN}"}
