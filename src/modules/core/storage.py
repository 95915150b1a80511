"""Stored-file primitives backed by Django's ``default_storage``."""

from __future__ import annotations

import structlog
from django.core.files.storage import default_storage

logger = structlog.get_logger(__name__)


def delete_stored_file(ref: str | None) -> bool:
    """Delete ``ref`` from the default storage.

    Returns ``True`` if a file was removed, ``False`` when ``ref`` is empty
    or nothing is stored under it.  Storage errors propagate; callers that
    treat removal as best-effort are expected to catch them.
    """
    if not ref:
        return False
    if not default_storage.exists(ref):
        logger.info("storage.file_missing", ref=ref)
        return False
    default_storage.delete(ref)
    logger.info("storage.file_deleted", ref=ref)
    return True
