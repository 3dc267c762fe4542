"""Content domain: site content models, the content store and its gate.

The ContentStore is the single source of truth for what the page shows,
who may edit it and how the last save went.  Import/export of the whole
document lives in ``vitrine.content.transfer``.
"""

from vitrine.content.auth import Authenticator, requires_session
from vitrine.content.defaults import DEFAULT_CONTENT, default_content, new_catalog_item
from vitrine.content.models import (
    CatalogItem,
    CollectionName,
    Feature,
    MutationResult,
    SaveStatus,
    SectionName,
    SessionState,
    SiteContent,
    Theme,
)
from vitrine.content.store import ChangeKind, ContentStore
from vitrine.content.transfer import ContentTransfer, ImportReport, parse_document

__all__ = [
    "Authenticator",
    "CatalogItem",
    "ChangeKind",
    "CollectionName",
    "ContentStore",
    "ContentTransfer",
    "DEFAULT_CONTENT",
    "Feature",
    "ImportReport",
    "MutationResult",
    "SaveStatus",
    "SectionName",
    "SessionState",
    "SiteContent",
    "Theme",
    "default_content",
    "new_catalog_item",
    "parse_document",
    "requires_session",
]
