"""Site content domain models: pure Pydantic v2 data types.

These models describe everything the operator can edit on the live page:
the theme colors, the text sections and the two ordered catalog item
collections.  Every model accepts unknown fields and dumps them back out
unchanged, so documents written by newer revisions (e.g. items carrying a
``price``) survive a load/save or export/import cycle.

JSON documents use camelCase keys (``buttonText``, ``titleLine1``); the
Python attributes are snake_case and either spelling is accepted on input.
"""

from __future__ import annotations

from collections.abc import Mapping
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


class SectionName(StrEnum):
    """Top-level sections of a SiteContent document."""

    THEME = "theme"
    HERO = "hero"
    MARQUEE = "marquee"
    STORY = "story"
    LOOKBOOK = "lookbook"
    RSVP = "rsvp"


class CollectionName(StrEnum):
    """Sections that carry an ordered sequence of catalog items."""

    STORY = "story"
    LOOKBOOK = "lookbook"


class SaveStatus(StrEnum):
    """Observable outcome of the most recent content save attempt."""

    IDLE = "idle"
    SAVING = "saving"
    SAVED = "saved"
    ERROR = "error"
    OFFLINE = "offline"  # written, but only to non-durable storage


class MutationResult(StrEnum):
    """Outcome of a store operation.

    Denials and misses are reported here instead of raised; state is left
    untouched for every value other than ``APPLIED`` and ``FAILED``.
    ``FAILED`` means the in-memory change was made but storage refused it.
    """

    APPLIED = "applied"
    UNCHANGED = "unchanged"
    DENIED = "denied"
    NOT_FOUND = "not_found"
    DECLINED = "declined"
    INVALID = "invalid"
    DUPLICATE = "duplicate"
    FAILED = "failed"

    @property
    def ok(self) -> bool:
        return self in (MutationResult.APPLIED, MutationResult.UNCHANGED)


class ContentModel(BaseModel):
    """Base for every content model: camelCase JSON, extra fields kept."""

    model_config = ConfigDict(
        extra="allow",
        alias_generator=to_camel,
        populate_by_name=True,
        coerce_numbers_to_str=True,
    )

    @classmethod
    def field_name_for(cls, key: str) -> str | None:
        """Map a JSON key or attribute name to the declared field name."""
        for name, info in cls.model_fields.items():
            if key in (name, info.alias):
                return name
        return None

    def to_document(self) -> dict[str, Any]:
        """Dump to a JSON-ready dict using the document (camelCase) keys."""
        return self.model_dump(mode="json", by_alias=True)


class Theme(ContentModel):
    """Site colors.  Values are opaque tokens and are not validated."""

    primary: str
    background: str
    secondary: str


class CatalogItem(ContentModel):
    """A displayable/purchasable entry in the story or lookbook collection."""

    id: str
    title: str
    subtitle: str = ""
    category: str = ""
    image: str = ""  # URL or data: URI
    description: str = ""


class Feature(ContentModel):
    """A short selling point shown next to the lookbook."""

    title: str
    desc: str = ""


class HeroSection(ContentModel):
    subtitle: str = ""
    title: str = ""
    description: str = ""
    button_text: str = ""


class MarqueeSection(ContentModel):
    brand_name: str = ""
    text1: str = ""
    text2: str = ""
    year: str = ""


class CollectionSection(ContentModel):
    """A section with text fields plus an ordered list of catalog items."""

    description: str = ""
    items: list[CatalogItem] = Field(default_factory=list)

    def find_item(self, item_id: str) -> int | None:
        """Return the position of the item with this id, or None."""
        for index, item in enumerate(self.items):
            if item.id == item_id:
                return index
        return None


class StorySection(CollectionSection):
    title_prefix: str = ""
    title_highlight: str = ""


class LookbookSection(CollectionSection):
    label: str = ""
    title_line1: str = ""
    title_line2: str = ""
    features: list[Feature] = Field(default_factory=list)


class RsvpSection(ContentModel):
    label: str = ""
    title: str = ""
    description: str = ""
    success_title: str = ""
    success_message: str = ""


SECTION_MODELS: dict[SectionName, type[ContentModel]] = {
    SectionName.THEME: Theme,
    SectionName.HERO: HeroSection,
    SectionName.MARQUEE: MarqueeSection,
    SectionName.STORY: StorySection,
    SectionName.LOOKBOOK: LookbookSection,
    SectionName.RSVP: RsvpSection,
}


class SiteContent(ContentModel):
    """Root aggregate of everything rendered on the page."""

    theme: Theme
    hero: HeroSection
    marquee: MarqueeSection
    story: StorySection
    lookbook: LookbookSection
    rsvp: RsvpSection

    def section(self, name: SectionName | str) -> ContentModel:
        return getattr(self, SectionName(name).value)

    def collection(self, name: CollectionName | str) -> CollectionSection:
        return getattr(self, CollectionName(name).value)


def coerce_item(item: CatalogItem | Mapping[str, Any]) -> CatalogItem:
    """Return a private copy of ``item`` so callers cannot alias stored state."""
    if isinstance(item, CatalogItem):
        item = item.to_document()
    return CatalogItem.model_validate(item)


class SessionState(BaseModel):
    """Admin session flags.  Edit mode always implies authentication."""

    is_authenticated: bool = False
    is_admin_mode: bool = False

    @model_validator(mode="after")
    def _admin_requires_auth(self) -> SessionState:
        if self.is_admin_mode and not self.is_authenticated:
            raise ValueError("admin mode requires an authenticated session")
        return self
