"""Attachment slot policy and the deterministic object path scheme.

Every stored attachment lives at ``{user_id}/{category}/{filename}`` inside the
configured bucket. Filenames and content types are fixed per slot; they are
never taken from the uploaded file.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from app.core.exceptions import ValidationError

VENDOR_CATEGORY = "vendor"
BANK_CATEGORY = "bank"

# Any value that ends up as a path segment must match this.
USER_ID_PATTERN = r"^[A-Za-z0-9][A-Za-z0-9_-]{0,63}$"
_USER_ID_RE = re.compile(USER_ID_PATTERN)


@dataclass(frozen=True)
class AttachmentSlot:
    """One named attachment position on an entity."""

    name: str
    filename: str
    content_type: str = "image/jpeg"


ATTACHMENT_SLOTS: dict[str, dict[str, AttachmentSlot]] = {
    VENDOR_CATEGORY: {
        "personal_photo": AttachmentSlot("personal_photo", "personal.jpg"),
        "aadhar_photo": AttachmentSlot("aadhar_photo", "aadhar.jpg"),
        "cart_photo": AttachmentSlot("cart_photo", "cart.jpg"),
    },
    BANK_CATEGORY: {
        "passbook_photo": AttachmentSlot("passbook_photo", "passbook.jpg"),
    },
}


def slots_for(category: str) -> dict[str, AttachmentSlot]:
    try:
        return ATTACHMENT_SLOTS[category]
    except KeyError:
        raise ValueError(f"Unknown attachment category '{category}'") from None


def validate_user_id(user_id: str | None) -> str:
    """Return *user_id* unchanged, or raise ValidationError if it is not a safe path segment."""
    if not user_id or not _USER_ID_RE.fullmatch(user_id):
        raise ValidationError(
            "user_id is required and may contain only letters, digits, '_' and '-' "
            "(max 64 characters)"
        )
    return user_id


def object_path(user_id: str, category: str, slot_name: str) -> str:
    slot = slots_for(category).get(slot_name)
    if slot is None:
        raise ValidationError(f"Unknown attachment '{slot_name}' for {category} records")
    return f"{validate_user_id(user_id)}/{category}/{slot.filename}"
