"""Content document models — pure Pydantic v2 data types.

The whole site lives in one :class:`ContentDocument`: an ordered list of
film projects, an ordered list of staff credits, and the site profile.
Attributes are snake_case in Python and camelCase on the wire, matching
the JSON that earlier revisions of the site already stored.
"""

from __future__ import annotations

from enum import StrEnum

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class Category(StrEnum):
    """Filmography section a project is listed under."""

    DIRECTING = "DIRECTING"
    AI_FILM = "AI_FILM"
    CINEMATOGRAPHY = "CINEMATOGRAPHY"


class _WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Project(_WireModel):
    """A film entry shown on a category page and its detail page.

    ``category`` is kept as a plain string: an unknown value still loads
    and simply never matches a category filter.
    """

    id: str
    category: str = Category.DIRECTING.value
    year: str = ""
    title_local: str = Field(
        "",
        alias="titleLocal",
        validation_alias=AliasChoices("titleLocal", "titleKr", "title_local"),
    )
    title_alt: str = Field(
        "",
        alias="titleAlt",
        validation_alias=AliasChoices("titleAlt", "titleEn", "title_alt"),
    )
    genre: str = ""
    runtime: str = ""
    role: str = ""
    synopsis: str = ""
    awards: list[str] = Field(default_factory=list)
    main_image: str = ""
    stills: list[str] = Field(default_factory=list)


class StaffCredit(_WireModel):
    """A crew credit on someone else's production."""

    id: str
    year: str = ""
    project: str = ""  # free text, not a Project.id
    role: str = ""
    awards: list[str] = Field(default_factory=list)


class ContactInfo(_WireModel):
    email: str = ""
    phone: str = ""
    instagram: str = ""
    youtube: str = ""


class SiteProfile(_WireModel):
    """Site-wide identity, biography and contact details."""

    name: str = ""
    philosophy: str = ""
    about_text: str = ""
    contact_title: str = ""
    home_bg_image: str = ""
    profile_image: str = ""
    contact: ContactInfo = Field(default_factory=ContactInfo)


class ContentDocument(_WireModel):
    """The single persisted aggregate holding all site content.

    The site profile is written under ``content`` (the key stored by the
    browser-era site) and read from either ``content`` or ``site``.
    """

    projects: list[Project] = Field(default_factory=list)
    staff: list[StaffCredit] = Field(default_factory=list)
    site: SiteProfile = Field(
        default_factory=SiteProfile,
        alias="content",
        validation_alias=AliasChoices("content", "site"),
    )

    def to_json_bytes(self) -> bytes:
        """Serialize the whole document as it is sent to a backend."""
        return self.model_dump_json(by_alias=True).encode("utf-8")

    def to_wire(self) -> dict:
        """Return the JSON-compatible dict form used on the wire."""
        return self.model_dump(mode="json", by_alias=True)
