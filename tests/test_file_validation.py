import uuid

import pytest

from iep.models import FileCategory
from iep.services.file_service import KB, MB, file_extension, storage_path, validate_upload


def test_valid_image():
    errors, warnings = validate_upload("sinif-fotografi.png", "image/png", 200 * KB, FileCategory.IMAGE)

    assert errors == []
    assert warnings == []


def test_wrong_mime_type_for_category():
    errors, _ = validate_upload("rapor.pdf", "application/pdf", 200 * KB, FileCategory.IMAGE)

    assert [e["field"] for e in errors] == ["content_type"]


@pytest.mark.parametrize("size, message", [(11 * MB, "larger than 10MB"), (512, "smaller than 1KB")])
def test_size_bounds(size, message):
    errors, _ = validate_upload("foto.jpg", "image/jpeg", size, FileCategory.IMAGE)

    assert len(errors) == 1
    assert message in errors[0]["message"]


def test_video_allows_large_files():
    errors, _ = validate_upload("gezi.mp4", "video/mp4", 400 * MB, FileCategory.VIDEO)

    assert errors == []


def test_forbidden_characters_and_length():
    errors, _ = validate_upload("a" * 251 + "?.pdf", "application/pdf", 5 * KB, FileCategory.DOCUMENT)

    assert [e["field"] for e in errors] == ["original_name", "original_name"]


def test_name_of_exactly_255_characters_is_allowed():
    name = "a" * 251 + ".pdf"

    errors, _ = validate_upload(name, "application/pdf", 5 * KB, FileCategory.DOCUMENT)

    assert len(name) == 255
    assert errors == []


def test_turkish_characters_only_warn():
    errors, warnings = validate_upload("öğrenci-listesi.csv", "text/csv", 3 * KB, FileCategory.DOCUMENT)

    assert errors == []
    assert len(warnings) == 1


@pytest.mark.parametrize(
    "filename, extension",
    [("Rapor.PDF", ".pdf"), ("arsiv.tar.gz", ".gz"), ("README", "")],
)
def test_file_extension(filename, extension):
    assert file_extension(filename) == extension


def test_storage_path():
    tenant_id = uuid.UUID("0190a1b2-0000-7000-8000-000000000001")
    file_id = uuid.UUID("0190a1b2-0000-7000-8000-0000000000ff")

    path = storage_path(tenant_id, FileCategory.DOCUMENT, file_id, "Karne.PDF")

    assert path == f"{tenant_id}/document/{file_id}.pdf"
