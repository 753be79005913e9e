"""Read-side helpers over a ContentDocument."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Literal

from pydantic import BaseModel

from filmfolio.content.models import Category, ContentDocument, Project, StaffCredit


class TimelineEntry(BaseModel):
    """One row of the combined chronological view."""

    kind: Literal["project", "staff"]
    id: str
    year: str
    title: str
    role: str
    category: str | None = None


def filter_by_category(projects: Iterable[Project], category: Category | str) -> list[Project]:
    """Return projects in ``category``, keeping their original order."""
    return [p for p in projects if p.category == category]


def find_project(doc: ContentDocument, project_id: str) -> Project | None:
    """Return the project with ``project_id``, or None."""
    for project in doc.projects:
        if project.id == project_id:
            return project
    return None


def find_staff(doc: ContentDocument, staff_id: str) -> StaffCredit | None:
    """Return the staff credit with ``staff_id``, or None."""
    for credit in doc.staff:
        if credit.id == staff_id:
            return credit
    return None


def sorted_staff(staff: Iterable[StaffCredit]) -> list[StaffCredit]:
    """Staff credits, newest year first."""
    return sorted(staff, key=lambda s: s.year, reverse=True)


def timeline(doc: ContentDocument) -> list[TimelineEntry]:
    """Merge projects and staff credits into one list, newest year first.

    Years are compared as strings, so ``"999"`` sorts above ``"2023"``.
    Entries sharing a year keep projects before staff, each in document
    order (``sorted`` is stable).
    """
    entries = [
        TimelineEntry(
            kind="project",
            id=p.id,
            year=p.year,
            title=p.title_alt or p.title_local,
            role=p.role,
            category=p.category,
        )
        for p in doc.projects
    ]
    entries.extend(
        TimelineEntry(kind="staff", id=s.id, year=s.year, title=s.project, role=s.role)
        for s in doc.staff
    )
    return sorted(entries, key=lambda e: e.year, reverse=True)
