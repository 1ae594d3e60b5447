"""Shared HTTP helpers for the record routers: injected clients and multipart parsing."""

from __future__ import annotations

from collections.abc import Mapping
from typing import TypeVar

from fastapi import Request
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError
from starlette.datastructures import UploadFile

from app.core.config import settings
from app.core.exceptions import ValidationError, describe_validation_errors
from app.storage.base import AttachmentStore

FormT = TypeVar("FormT", bound=BaseModel)


def get_attachment_store(request: Request) -> AttachmentStore:
    """Return the process-wide attachment store created at startup."""
    return request.app.state.attachment_store


async def _read_upload(field: str, file: UploadFile) -> bytes | None:
    """Return the file bytes, or None for an empty file part (nothing chosen)."""
    contents = await file.read()
    if not file.filename and not contents:
        return None
    if len(contents) > settings.max_upload_size_bytes:
        raise ValidationError(
            f"{field} exceeds the {settings.max_upload_size_mb}MB limit."
        )
    return contents or None


def present(**values: str | None) -> dict[str, str]:
    """Keep only the form fields the client actually sent."""
    return {key: value for key, value in values.items() if value is not None}


async def read_record_form(
    request: Request,
    schema: type[FormT],
    fields: Mapping[str, str],
    uploads: Mapping[str, UploadFile | str | None],
) -> tuple[FormT, dict[str, bytes]]:
    """Validate the declared form fields and read the attachment slot files.

    A slot may also carry a text value (for example a URL the client already
    holds). It is kept as a field and an uploaded file for the same slot
    replaces it. Each slot accepts at most one file.
    """
    form = await request.form()
    values: dict[str, str] = dict(fields)
    seen: set[str] = set()

    for key, value in form.multi_items():
        if isinstance(value, UploadFile):
            if key not in uploads:
                raise ValidationError(f"Unexpected file field '{key}'")
            continue
        if key in seen and key not in uploads:
            raise ValidationError(f"Field '{key}' was sent more than once")
        seen.add(key)
        if key in uploads:
            if value:
                values[key] = value
        elif key not in schema.model_fields:
            # Undeclared names are left to the schema, which forbids extras
            values[key] = value

    files: dict[str, bytes] = {}
    for name, declared in uploads.items():
        parts = [v for v in form.getlist(name) if isinstance(v, UploadFile)]
        if len(parts) > 1:
            raise ValidationError(f"Only one file is allowed for '{name}'")
        upload = declared if isinstance(declared, UploadFile) else next(iter(parts), None)
        if upload is None:
            continue
        data = await _read_upload(name, upload)
        if data is not None:
            files[name] = data

    try:
        body = schema.model_validate(values)
    except PydanticValidationError as exc:
        raise ValidationError(describe_validation_errors(exc.errors())) from exc
    return body, files
