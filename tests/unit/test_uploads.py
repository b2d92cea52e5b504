"""Unit tests for multipart upload reading."""

from io import BytesIO

import pytest
from fastapi import UploadFile

from thesis_tracker.api.deps import read_uploads
from thesis_tracker.kernel.errors import BadRequest

LIMIT = 25 * 1024 * 1024


def _upload(name, content=b"data", size=None):
    return UploadFile(
        file=BytesIO(content),
        filename=name,
        size=len(content) if size is None else size,
    )


@pytest.mark.asyncio
async def test_reads_named_uploads():
    incoming = await read_uploads([_upload("a.pdf", b"alpha"), _upload("", b"skipped")])

    assert [f.original_name for f in incoming] == ["a.pdf"]
    assert incoming[0].data == b"alpha"


@pytest.mark.asyncio
async def test_none_is_empty():
    assert await read_uploads(None) == []


@pytest.mark.asyncio
async def test_declared_size_checked_before_reading():
    small = _upload("small.pdf", b"ok")
    big = _upload("big.pdf", b"x", size=LIMIT + 1)

    with pytest.raises(BadRequest, match="big.pdf"):
        await read_uploads([small, big])

    assert small.file.tell() == 0
    assert big.file.tell() == 0


@pytest.mark.asyncio
async def test_too_many_files():
    uploads = [_upload(f"part{i}.pdf") for i in range(11)]

    with pytest.raises(BadRequest, match="At most 10"):
        await read_uploads(uploads)

    assert all(u.file.tell() == 0 for u in uploads)
