"""Edit helpers that return a new ContentDocument.

None of these functions mutate their input.  The admin surfaces build the
next document with them, show it immediately, then hand it to the
persistence adapter.
"""

from __future__ import annotations

import secrets
import time
from datetime import datetime
from typing import Any, TypeVar

from pydantic import BaseModel

from filmfolio.content.defaults import PLACEHOLDER_POSTER
from filmfolio.content.models import (
    Category,
    ContactInfo,
    ContentDocument,
    Project,
    SiteProfile,
    StaffCredit,
)


M = TypeVar("M", bound=BaseModel)


def new_entry_id() -> str:
    """Return a fresh id: milliseconds since the epoch plus a random suffix."""
    return f"{int(time.time() * 1000)}-{secrets.token_hex(3)}"


def new_project(**fields: Any) -> Project:
    """Build a project with the admin panel's placeholder values.

    Any keyword overrides the matching default.
    """
    values: dict[str, Any] = {
        "id": new_entry_id(),
        "category": Category.DIRECTING.value,
        "year": str(datetime.now().year),
        "title_local": "새 프로젝트",
        "title_alt": "NEW PROJECT",
        "genre": "Drama",
        "runtime": "0min",
        "role": "Director",
        "synopsis": "",
        "awards": [],
        "main_image": PLACEHOLDER_POSTER,
        "stills": [],
    }
    values.update({k: v for k, v in fields.items() if v is not None})
    return Project.model_validate(values)


def new_staff_credit(**fields: Any) -> StaffCredit:
    values: dict[str, Any] = {"id": new_entry_id(), "year": str(datetime.now().year)}
    values.update({k: v for k, v in fields.items() if v is not None})
    return StaffCredit.model_validate(values)


def _with_changes(model: M, changes: dict[str, Any]) -> M:
    unknown = set(changes) - set(type(model).model_fields)
    if unknown:
        raise ValueError(f"Unknown field(s) for {type(model).__name__}: {sorted(unknown)}")
    return type(model).model_validate({**model.model_dump(), **changes})


# ── Projects ────────────────────────────────────────────────────────────


def add_project(doc: ContentDocument, project: Project) -> ContentDocument:
    """Insert ``project`` at the top of the list (newest first)."""
    return doc.model_copy(update={"projects": [project, *doc.projects]})


def update_project(doc: ContentDocument, project_id: str, **changes: Any) -> ContentDocument:
    """Replace fields on one project.

    Raises KeyError if no project has ``project_id``.
    """
    if not any(p.id == project_id for p in doc.projects):
        raise KeyError(project_id)
    projects = [_with_changes(p, changes) if p.id == project_id else p for p in doc.projects]
    return doc.model_copy(update={"projects": projects})


def remove_project(doc: ContentDocument, project_id: str) -> ContentDocument:
    """Drop the project with ``project_id``; other entries are untouched."""
    return doc.model_copy(update={"projects": [p for p in doc.projects if p.id != project_id]})


def add_still(doc: ContentDocument, project_id: str, reference: str) -> ContentDocument:
    """Append an image reference to a project's stills."""
    for project in doc.projects:
        if project.id == project_id:
            return update_project(doc, project_id, stills=[*project.stills, reference])
    raise KeyError(project_id)


def remove_still(doc: ContentDocument, project_id: str, index: int) -> ContentDocument:
    """Remove the still at ``index`` from a project.

    Raises KeyError for an unknown project and IndexError for a bad index.
    """
    for project in doc.projects:
        if project.id == project_id:
            stills = list(project.stills)
            del stills[index]
            return update_project(doc, project_id, stills=stills)
    raise KeyError(project_id)


# ── Staff ───────────────────────────────────────────────────────────────


def add_staff(doc: ContentDocument, credit: StaffCredit) -> ContentDocument:
    return doc.model_copy(update={"staff": [credit, *doc.staff]})


def update_staff(doc: ContentDocument, staff_id: str, **changes: Any) -> ContentDocument:
    if not any(s.id == staff_id for s in doc.staff):
        raise KeyError(staff_id)
    staff = [_with_changes(s, changes) if s.id == staff_id else s for s in doc.staff]
    return doc.model_copy(update={"staff": staff})


def remove_staff(doc: ContentDocument, staff_id: str) -> ContentDocument:
    return doc.model_copy(update={"staff": [s for s in doc.staff if s.id != staff_id]})


# ── Site profile ────────────────────────────────────────────────────────


def update_site(doc: ContentDocument, **changes: Any) -> ContentDocument:
    """Replace site profile fields (``contact`` as a whole dict or model)."""
    site: SiteProfile = _with_changes(doc.site, changes)
    return doc.model_copy(update={"site": site})


def update_contact(doc: ContentDocument, **changes: Any) -> ContentDocument:
    contact: ContactInfo = _with_changes(doc.site.contact, changes)
    return doc.model_copy(update={"site": doc.site.model_copy(update={"contact": contact})})
