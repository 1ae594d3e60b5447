"""Attachment storage package — process-wide blob store clients.

Files:
  base.py      — AttachmentStore protocol + AttachmentStoreError
  local.py     — filesystem backend served at /media (development, tests)
  supabase.py  — Supabase Storage backend over httpx
"""

from app.core.config import Settings
from app.storage.base import AttachmentStore, AttachmentStoreError
from app.storage.local import LocalAttachmentStore
from app.storage.supabase import SupabaseAttachmentStore


def build_attachment_store(settings: Settings) -> AttachmentStore:
    """Create the configured backend. Called once at startup."""
    if settings.storage_backend == "supabase":
        if not settings.supabase_enabled:
            raise RuntimeError(
                "STORAGE_BACKEND=supabase requires SUPABASE_URL and SUPABASE_KEY"
            )
        return SupabaseAttachmentStore(
            settings.supabase_url,
            settings.supabase_key,
            settings.storage_bucket,
            timeout=settings.storage_timeout,
        )
    if settings.storage_backend == "local":
        return LocalAttachmentStore(
            settings.local_storage_dir,
            settings.storage_bucket,
            base_url=f"{settings.public_base_url.rstrip('/')}/media",
        )
    raise RuntimeError(f"Unknown STORAGE_BACKEND '{settings.storage_backend}'")


__all__ = [
    "AttachmentStore",
    "AttachmentStoreError",
    "LocalAttachmentStore",
    "SupabaseAttachmentStore",
    "build_attachment_store",
]
