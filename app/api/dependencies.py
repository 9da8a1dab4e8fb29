"""
app/api/dependencies.py

Shared FastAPI dependencies for request identity and upload intake.
"""

from __future__ import annotations

import base64
import binascii
import uuid
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import PurePosixPath

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.orm import Session

from app.config import UploadSettings
from db.repositories.client_repository import ClientRepository
from db.session import get_db

DATA_URL_PREFIX = "data:"
BASE64_MARKER = ";base64,"
UTF8_BOM = "\ufeff"

ClientAccessCheck = Callable[[uuid.UUID, uuid.UUID], None]


@dataclass(frozen=True)
class RequestIdentity:
    organization_id: uuid.UUID
    user_id: uuid.UUID | None = None


@dataclass(frozen=True)
class DecodedUpload:
    """
    Content ready for a parser plus the decoded payload size.

    Binary workbooks stay base64 text; text reports are decoded UTF-8.
    """

    content: str
    size_bytes: int
    is_binary: bool


class UploadDecodeError(ValueError):
    """
    Raised when upload content cannot be decoded.
    """


class UploadTooLargeError(UploadDecodeError):
    """
    Raised when the decoded payload exceeds the configured limit.
    """


def get_request_identity(
    x_organization_id: uuid.UUID = Header(..., alias="X-Organization-Id"),
    x_user_id: uuid.UUID | None = Header(default=None, alias="X-User-Id"),
) -> RequestIdentity:
    return RequestIdentity(organization_id=x_organization_id, user_id=x_user_id)


def get_client_access_check(db: Session = Depends(get_db)) -> ClientAccessCheck:
    """
    Bind a client ownership check to the request's database session.
    """

    repository = ClientRepository(db)

    def check(client_id: uuid.UUID, organization_id: uuid.UUID) -> None:
        repository.ensure_client_access(client_id=client_id, organization_id=organization_id)

    return check


def is_binary_file_name(file_name: str | None, settings: UploadSettings) -> bool:
    if not file_name:
        return False
    return PurePosixPath(file_name.strip().lower()).suffix in settings.binary_suffixes


def _split_data_url(content: str) -> str | None:
    """
    Return the base64 payload of a data URL, or None for plain content.
    """

    if not content.startswith(DATA_URL_PREFIX):
        return None
    marker = content.find(BASE64_MARKER)
    if marker == -1:
        return None
    return content[marker + len(BASE64_MARKER) :]


def _b64decode(payload: str) -> bytes:
    try:
        return base64.b64decode(payload, validate=False)
    except (binascii.Error, ValueError) as exc:
        raise UploadDecodeError(f"Upload content is not valid base64: {exc}") from exc


def decode_upload_content(
    content: str,
    file_name: str | None,
    settings: UploadSettings,
) -> DecodedUpload:
    payload = _split_data_url(content)

    if is_binary_file_name(file_name, settings):
        size_bytes = len(_b64decode(payload if payload is not None else content))
        decoded = DecodedUpload(content=content, size_bytes=size_bytes, is_binary=True)
    elif payload is not None:
        raw = _b64decode(payload)
        text = raw.decode("utf-8", errors="replace")
        decoded = DecodedUpload(content=text.removeprefix(UTF8_BOM), size_bytes=len(raw), is_binary=False)
    else:
        decoded = DecodedUpload(
            content=content.removeprefix(UTF8_BOM),
            size_bytes=len(content.encode("utf-8")),
            is_binary=False,
        )

    if decoded.size_bytes > settings.max_upload_bytes:
        raise UploadTooLargeError(
            f"Upload is {decoded.size_bytes} bytes; the limit is {settings.max_upload_bytes} bytes."
        )
    return decoded


def require_decoded_upload(
    content: str,
    file_name: str | None,
    settings: UploadSettings,
) -> DecodedUpload:
    """
    decode_upload_content with HTTP error mapping.
    """

    try:
        return decode_upload_content(content, file_name, settings)
    except UploadTooLargeError as exc:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=str(exc),
        ) from exc
    except UploadDecodeError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
