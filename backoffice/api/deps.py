"""API Dependencies"""

from functools import lru_cache

from backoffice.config import settings
from backoffice.database import get_db
from backoffice.services.attachment_service import AttachmentStore

__all__ = ["get_db", "get_attachment_store"]


@lru_cache
def get_attachment_store() -> AttachmentStore:
    """
    Attachment store built from the configured upload policy.
    
    Tests swap it out through app.dependency_overrides.
    """
    return AttachmentStore(settings.upload_policy())
