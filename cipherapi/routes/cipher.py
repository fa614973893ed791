"""
Encrypt and decrypt endpoints.

Both take form data. /encrypt accepts a `data` text field (envelope returned as
text/plain) or an `upload_file` multipart file (JSON summary returned).
/decrypt accepts a `data` field holding an envelope, either url-encoded or as a
file part. Both carry the exact envelope bytes.
"""

import base64
import logging
from typing import Union
from urllib.parse import parse_qsl

from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel
from starlette.datastructures import UploadFile

from ..dependencies import get_cipher
from ..encryption import CipherContext
from ..errors import ClientInputError, ErrorKind

logger = logging.getLogger(__name__)

router = APIRouter()

PREVIEW_LENGTH = 32
URLENCODED = "application/x-www-form-urlencoded"


class EncryptedFile(BaseModel):
    OriginalText: str
    OriginalTextLength: int
    EncryptedTextLength: int
    EncryptedText: str


# ── Helpers ───────────────────────────────────────────────────────

def _preview(data: bytes) -> str:
    """Truncated, printable view of data for log lines."""
    text = data[:PREVIEW_LENGTH].decode("utf-8", errors="replace")
    if len(data) > PREVIEW_LENGTH:
        text += "..."
    return repr(text)


async def _read_form(request: Request):
    """Form fields, with url-encoded values kept as the exact bytes sent.

    Starlette decodes url-encoded values as UTF-8, which mangles envelopes and
    any other non-UTF-8 payload, so those bodies are parsed byte for byte here.
    """
    content_type = request.headers.get("content-type", "").split(";")[0].strip().lower()
    if content_type != URLENCODED:
        return await request.form()

    body = (await request.body()).decode("latin-1")
    fields = {}
    for name, value in parse_qsl(body, keep_blank_values=True, encoding="latin-1"):
        fields.setdefault(name, value.encode("latin-1"))
    return fields


async def _field_bytes(value: Union[bytes, str, UploadFile, None]) -> bytes:
    if value is None:
        return b""
    if isinstance(value, bytes):
        return value
    if isinstance(value, UploadFile):
        return await value.read()
    return value.encode("utf-8")


async def _require_field(value, what: str) -> bytes:
    data = await _field_bytes(value)
    if not data:
        raise ClientInputError(ErrorKind.MISSING_FIELD, f"{what} was not supplied or was empty.")
    return data


async def _encrypt_upload(upload: UploadFile, cipher: CipherContext) -> EncryptedFile:
    contents = await _require_field(upload, "Uploaded file")
    envelope = cipher.seal(contents)
    logger.info("Successfully encrypted uploaded file %s (%d bytes)", upload.filename, len(contents))
    return EncryptedFile(
        OriginalText=contents.decode("utf-8", errors="replace"),
        OriginalTextLength=len(contents),
        EncryptedTextLength=len(envelope),
        EncryptedText=base64.b64encode(envelope).decode("ascii"),
    )


# ── Endpoints ─────────────────────────────────────────────────────

@router.post("/encrypt")
async def encrypt(request: Request, cipher: CipherContext = Depends(get_cipher)):
    """Encrypt the `data` field, or the `upload_file` file if one was sent."""
    form = await _read_form(request)

    upload = form.get("upload_file")
    if isinstance(upload, UploadFile):
        return await _encrypt_upload(upload, cipher)

    plain_text = await _require_field(form.get("data"), "Text to encrypt")
    envelope = cipher.seal(plain_text)
    logger.info("Successfully encrypted [%s]", _preview(plain_text))
    return PlainTextResponse(envelope)


@router.post("/decrypt")
async def decrypt(request: Request, cipher: CipherContext = Depends(get_cipher)):
    """Decrypt the envelope in the `data` field and return the plaintext bytes."""
    form = await _read_form(request)

    envelope = await _require_field(form.get("data"), "Encrypted text")
    plain_text = cipher.open(envelope)
    logger.info("Successfully decrypted the encrypted text (%s)", _preview(plain_text))
    return Response(content=plain_text)
