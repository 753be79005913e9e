"""Content domain — the site document model and helpers over it."""

from filmfolio.content.defaults import default_document
from filmfolio.content.models import (
    Category,
    ContactInfo,
    ContentDocument,
    Project,
    SiteProfile,
    StaffCredit,
)

__all__ = [
    "Category",
    "ContactInfo",
    "ContentDocument",
    "Project",
    "SiteProfile",
    "StaffCredit",
    "default_document",
]
