"""Import/export of the whole site content as a portable JSON document.

Exports are verbatim.  Imports are validated before anything is replaced:
a malformed document aborts the import and leaves the store untouched,
and sections missing from an otherwise valid document are filled from the
built-in defaults (``theme`` always; the others unless ``strict``).
"""

from __future__ import annotations

import json
import logging
from datetime import date
from pathlib import Path
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ValidationError
from vitrine.content.defaults import DEFAULT_DOCUMENT
from vitrine.content.models import SECTION_MODELS, MutationResult, SectionName, SiteContent
from vitrine.shared.errors import ImportDocumentError

if TYPE_CHECKING:
    from vitrine.content.store import ContentStore

logger = logging.getLogger(__name__)


def export_filename(today: date | None = None) -> str:
    return f"site-content-{(today or date.today()).isoformat()}.json"


def export_document(content: SiteContent) -> str:
    """Serialize ``content`` to a JSON document suitable for import."""
    return json.dumps(content.to_document(), indent=2, ensure_ascii=False)


def _missing_sections(data: dict[str, Any]) -> list[str]:
    return [name.value for name in SectionName if data.get(name.value) is None]


def content_from_document(data: Any, strict: bool = False) -> SiteContent:
    """Validate an already-decoded document and merge-fill missing sections.

    A section set to ``null`` counts as missing.  Raises ImportDocumentError
    when the root is not an object, a required section is missing in strict
    mode, or a section has the wrong shape.
    """
    if not isinstance(data, dict):
        raise ImportDocumentError("Document root must be a JSON object")

    merged = dict(data)
    missing = _missing_sections(merged)
    if strict:
        required = [name for name in missing if name != SectionName.THEME]
        if required:
            raise ImportDocumentError(f"Document is missing sections: {', '.join(required)}")
    for name in missing:
        logger.info("Document has no %r section, using the default", name)
        merged[name] = DEFAULT_DOCUMENT[name]

    try:
        return SiteContent.model_validate(merged)
    except ValidationError as exc:
        raise ImportDocumentError(f"Invalid site content: {exc}") from exc


def repair_document(data: Any) -> tuple[SiteContent, list[str]]:
    """Load a saved document, replacing only the sections that do not validate.

    Returns the content and the names of the sections taken from the
    defaults (missing, ``null`` or malformed).  Raises ImportDocumentError
    only when the root is not an object.
    """
    if not isinstance(data, dict):
        raise ImportDocumentError("Document root must be a JSON object")

    merged = dict(data)
    replaced = _missing_sections(merged)
    for name, model in SECTION_MODELS.items():
        if name.value in replaced:
            continue
        try:
            model.model_validate(merged[name.value])
        except ValidationError as exc:
            logger.warning("Saved %r section is invalid, using the default: %s", name.value, exc)
            replaced.append(name.value)
    for name in replaced:
        merged[name] = DEFAULT_DOCUMENT[name]
    return SiteContent.model_validate(merged), replaced


def parse_document(text: str, strict: bool = False) -> SiteContent:
    """Parse a JSON document into SiteContent.

    Raises ImportDocumentError on malformed JSON or invalid content.
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ImportDocumentError(f"Malformed JSON: {exc}") from exc
    return content_from_document(data, strict=strict)


class ImportReport(BaseModel):
    """What happened to an import request."""

    result: MutationResult
    error: str | None = None


class ContentTransfer:
    """Backup and restore of a store's content."""

    def __init__(self, store: ContentStore, strict: bool = False) -> None:
        self._store = store
        self.strict = strict

    def export_json(self) -> str:
        return export_document(self._store.content)

    def write_export(self, path: Path | None = None) -> Path:
        """Write the export document, defaulting to a dated file in CWD."""
        target = path or Path(export_filename())
        if target.is_dir():
            target = target / export_filename()
        target.write_text(self.export_json() + "\n", encoding="utf-8")
        logger.info("Exported site content to %s", target)
        return target

    def import_json(self, text: str) -> ImportReport:
        try:
            content = parse_document(text, strict=self.strict)
        except ImportDocumentError as exc:
            logger.warning("Import aborted: %s", exc)
            return ImportReport(result=MutationResult.INVALID, error=str(exc))
        return ImportReport(result=self._store.import_content(content))

    def read_import(self, path: Path) -> ImportReport:
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as exc:
            logger.warning("Import aborted, cannot read %s: %s", path, exc)
            return ImportReport(result=MutationResult.INVALID, error=str(exc))
        return self.import_json(text)
