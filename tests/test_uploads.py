from io import BytesIO

import pytest
from fastapi import UploadFile

from app.core.exceptions import ValidationError
from app.utils.uploads import staged_upload


@pytest.mark.asyncio
async def test_staged_upload_yields_local_copy_and_removes_it(tmp_path):
    upload = UploadFile(file=BytesIO(b"hello world"), filename="../../etc/My Clip.mp4")

    async with staged_upload(upload, str(tmp_path), max_bytes=1024) as staged:
        assert staged.path.parent == tmp_path
        assert staged.path.read_bytes() == b"hello world"
        assert staged.filename == "My_Clip.mp4"
        assert staged.size == 11

    assert not staged.path.exists()


@pytest.mark.asyncio
async def test_staged_upload_rejects_oversized_file(tmp_path):
    upload = UploadFile(file=BytesIO(b"x" * 32), filename="big.bin")

    with pytest.raises(ValidationError) as exc_info:
        async with staged_upload(upload, str(tmp_path), max_bytes=16):
            pass

    assert exc_info.value.status_code == 413
    assert list(tmp_path.iterdir()) == []


@pytest.mark.asyncio
async def test_staged_upload_without_file_yields_none(tmp_path):
    async with staged_upload(None, str(tmp_path), max_bytes=16) as staged:
        assert staged is None


@pytest.mark.asyncio
async def test_staged_upload_cleans_up_when_block_fails(tmp_path):
    upload = UploadFile(file=BytesIO(b"data"), filename="a.png")

    with pytest.raises(RuntimeError):
        async with staged_upload(upload, str(tmp_path), max_bytes=1024):
            raise RuntimeError("storage down")

    assert list(tmp_path.iterdir()) == []
