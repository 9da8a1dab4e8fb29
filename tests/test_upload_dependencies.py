from __future__ import annotations

import base64

import pytest
from fastapi import HTTPException

from app.api.dependencies import (
    UploadDecodeError,
    UploadTooLargeError,
    decode_upload_content,
    is_binary_file_name,
    require_decoded_upload,
)
from app.config import UploadSettings

SETTINGS = UploadSettings(max_upload_bytes=64)


def data_url(raw: bytes, mime: str = "text/csv") -> str:
    return f"data:{mime};base64,{base64.b64encode(raw).decode('ascii')}"


def test_plain_text_loses_byte_order_mark() -> None:
    decoded = decode_upload_content("\ufeffDate,Sales\n1/1/25,$1", "sales.csv", SETTINGS)

    assert decoded.content == "Date,Sales\n1/1/25,$1"
    assert decoded.is_binary is False
    assert decoded.size_bytes == len("\ufeffDate,Sales\n1/1/25,$1".encode("utf-8"))


def test_text_data_url_is_decoded() -> None:
    decoded = decode_upload_content(data_url("\ufeffa,b\n1,2".encode("utf-8")), "x.csv", SETTINGS)

    assert decoded.content == "a,b\n1,2"
    assert decoded.size_bytes == len("\ufeffa,b\n1,2".encode("utf-8"))


def test_binary_upload_keeps_encoded_content() -> None:
    content = data_url(b"PK\x03\x04workbook", "application/octet-stream")

    decoded = decode_upload_content(content, "Bulk.XLSX", SETTINGS)

    assert decoded.is_binary is True
    assert decoded.content == content
    assert decoded.size_bytes == len(b"PK\x03\x04workbook")


def test_oversized_upload_is_rejected() -> None:
    with pytest.raises(UploadTooLargeError):
        decode_upload_content("x" * 65, "big.csv", SETTINGS)


def test_invalid_base64_is_rejected() -> None:
    with pytest.raises(UploadDecodeError):
        decode_upload_content("data:text/csv;base64,a", "x.csv", SETTINGS)


@pytest.mark.parametrize(
    ("file_name", "expected"),
    [("bulk.xlsx", True), ("OLD.xls", True), ("report.csv", False), ("inventory.txt", False), (None, False)],
)
def test_binary_detection(file_name: str | None, expected: bool) -> None:
    assert is_binary_file_name(file_name, SETTINGS) is expected


def test_http_mapping() -> None:
    with pytest.raises(HTTPException) as too_large:
        require_decoded_upload("x" * 65, "big.csv", SETTINGS)
    with pytest.raises(HTTPException) as malformed:
        require_decoded_upload("data:text/csv;base64,a", "x.csv", SETTINGS)

    assert too_large.value.status_code == 413
    assert malformed.value.status_code == 400
