import pytest

from config import Settings, STAGING_DIR_NAME
from app.exceptions import StorageUnavailable
from app.services.storage_manager import StorageManager


@pytest.mark.asyncio
async def test_list_files_sorted_without_staging(tmp_path):
    storage = StorageManager(Settings(upload_dir=tmp_path))
    await storage.initialize()
    for name in ("b.pdf", "a.pdf", "c.docx"):
        (tmp_path / name).write_bytes(b"")

    assert await storage.list_files() == ["a.pdf", "b.pdf", "c.docx"]


@pytest.mark.asyncio
async def test_check_access_rejects_regular_file(tmp_path):
    not_a_dir = tmp_path / "uploads"
    not_a_dir.write_bytes(b"")
    storage = StorageManager(Settings(upload_dir=not_a_dir))

    with pytest.raises(StorageUnavailable) as excinfo:
        await storage.check_access()
    assert "Not a directory" in excinfo.value.detail

    await storage.initialize()
    assert not storage.disk_accessible


@pytest.mark.asyncio
@pytest.mark.parametrize("filename", ["../secret.pdf", "..", ".", "", STAGING_DIR_NAME, "a\\b.pdf", "missing.pdf"])
async def test_find_file_refuses_unservable_names(tmp_path, filename):
    (tmp_path.parent / "secret.pdf").write_bytes(b"secret")
    storage = StorageManager(Settings(upload_dir=tmp_path))
    await storage.initialize()

    assert await storage.find_file(filename) is None


@pytest.mark.asyncio
async def test_find_file(tmp_path):
    (tmp_path / "report.pdf").write_bytes(b"data")
    storage = StorageManager(Settings(upload_dir=tmp_path))

    assert await storage.find_file("report.pdf") == tmp_path / "report.pdf"
