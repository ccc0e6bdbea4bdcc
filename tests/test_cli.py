"""Tests for the artwork-catalog command line."""

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from typer.testing import CliRunner

from artwork_catalog.cli import app
from artwork_catalog.config import Settings

runner = CliRunner()


@pytest.fixture
def bucket_settings() -> Settings:
    return Settings(bucket_name="artworks", database_url=None)


def test_migrate_storage_requires_bucket(art_dir: Path):
    with patch("artwork_catalog.cli.get_settings", return_value=Settings(bucket_name=None)):
        result = runner.invoke(app, ["migrate-storage", str(art_dir)])
    assert result.exit_code == 1
    assert "BUCKET" in result.output


def test_migrate_storage_missing_source(tmp_path: Path, bucket_settings: Settings):
    with patch("artwork_catalog.cli.get_settings", return_value=bucket_settings):
        result = runner.invoke(app, ["migrate-storage", str(tmp_path / "missing")])
    assert result.exit_code == 1


def test_migrate_storage_dry_run(art_dir: Path, bucket_settings: Settings):
    s3_client = MagicMock()
    with patch("artwork_catalog.cli.get_settings", return_value=bucket_settings), patch(
        "artwork_catalog.storage.object_store.create_s3_client", return_value=s3_client
    ):
        result = runner.invoke(app, ["migrate-storage", str(art_dir), "--dry-run"])

    assert result.exit_code == 0, result.output
    assert "[SKIP]" in result.output
    assert "la-casa-azul/01.jpg" in result.output
    s3_client.put_object.assert_not_called()


def test_db_upgrade_requires_database_url():
    with patch("artwork_catalog.cli.get_settings", return_value=Settings(database_url=None)):
        result = runner.invoke(app, ["db-upgrade"])
    assert result.exit_code == 1
