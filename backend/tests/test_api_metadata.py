from pathlib import Path

import pytest
from fastapi import status
from fastapi.testclient import TestClient

from stt_starter.exceptions import MetadataError
from stt_starter.services.metadata import read_metadata


def test_metadata_returns_meta_table(client: TestClient):
    response = client.get("/api/metadata")

    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {"title": "Python Transcription Starter", "language": "Python"}


def test_metadata_without_meta_section(client: TestClient, metadata_file: Path):
    metadata_file.write_text('[build]\ncommand = "make"\n', encoding="utf-8")

    response = client.get("/api/metadata")

    assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
    assert response.json() == {
        "error": "INTERNAL_SERVER_ERROR",
        "message": "Missing [meta] section in deepgram.toml",
    }


def test_metadata_file_missing(client: TestClient, metadata_file: Path):
    metadata_file.unlink()

    response = client.get("/api/metadata")

    assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
    assert response.json()["message"] == "Failed to read metadata from deepgram.toml"


def test_metadata_dates_are_serialised(client: TestClient, metadata_file: Path):
    metadata_file.write_text("[meta]\nreleased = 2024-05-01\n", encoding="utf-8")

    response = client.get("/api/metadata")

    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {"released": "2024-05-01"}


def test_read_metadata_rejects_invalid_toml(tmp_path: Path):
    path = tmp_path / "deepgram.toml"
    path.write_text("[meta\ntitle = ", encoding="utf-8")

    with pytest.raises(MetadataError, match="Failed to read metadata"):
        read_metadata(path)


def test_read_metadata_rejects_non_table_meta(tmp_path: Path):
    path = tmp_path / "deepgram.toml"
    path.write_text('meta = "not a table"\n', encoding="utf-8")

    with pytest.raises(MetadataError, match="Missing \\[meta\\] section"):
        read_metadata(path)
