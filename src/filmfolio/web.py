"""JSON API for the portfolio site.

Visitors read the document; the admin panel edits it behind the shared
passphrase.  Admin writes update the in-memory document first and then
save; when the save fails the edit stays in memory and the error is
returned so the panel can show it.
"""

from typing import Annotated, Any

from fastapi import Depends, FastAPI, File, Header, HTTPException, Query, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from filmfolio import __version__
from filmfolio.auth import check_passphrase
from filmfolio.content import mutations, queries
from filmfolio.content.models import Category, ContentDocument
from filmfolio.session import Edit, EditSession
from filmfolio.shared.errors import (
    BackendError,
    ImageDecodeError,
    ImageReadError,
    ImageRejectedError,
    SaveFailure,
)
from filmfolio.storage.store import SaveResult

_FAILURE_STATUS: dict[SaveFailure, int] = {
    SaveFailure.NOT_CONFIGURED: 503,
    SaveFailure.UNAUTHORIZED: 502,
    SaveFailure.PAYLOAD_TOO_LARGE: 413,
    SaveFailure.RATE_LIMITED: 429,
    SaveFailure.UNREACHABLE: 503,
    SaveFailure.SERVER_ERROR: 502,
}


# ------- Models for requests -------
class _Patch(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def changes(self) -> dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)


class ProjectFields(_Patch):
    category: Category | None = None
    year: str | None = None
    title_local: str | None = None
    title_alt: str | None = None
    genre: str | None = None
    runtime: str | None = None
    role: str | None = None
    synopsis: str | None = None
    awards: list[str] | None = None
    main_image: str | None = None
    stills: list[str] | None = None


class StaffFields(_Patch):
    year: str | None = None
    project: str | None = None
    role: str | None = None
    awards: list[str] | None = None


class ContactFields(_Patch):
    email: str | None = None
    phone: str | None = None
    instagram: str | None = None
    youtube: str | None = None


class SiteFields(_Patch):
    name: str | None = None
    philosophy: str | None = None
    about_text: str | None = None
    contact_title: str | None = None
    home_bg_image: str | None = None
    profile_image: str | None = None
    contact: ContactFields | None = None


def create_app(session: EditSession, *, passphrase: str) -> FastAPI:
    """Build the API around an already-opened edit session."""
    app = FastAPI(title="filmfolio", version=__version__)

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.state.session = session

    def require_admin(
        x_admin_passphrase: Annotated[str | None, Header()] = None,
    ) -> None:
        if not check_passphrase(x_admin_passphrase, passphrase):
            raise HTTPException(status_code=401, detail="Invalid admin passphrase")

    Admin = Depends(require_admin)

    def _saved(result: SaveResult) -> dict[str, Any]:
        if not result.ok:
            raise HTTPException(
                status_code=_FAILURE_STATUS[result.reason],  # type: ignore[index]
                detail={
                    "reason": result.reason,
                    "message": result.message,
                    "size": result.size,
                    "limit": result.limit,
                },
            )
        return {"saved": True, "size": result.size, "document": session.document.to_wire()}

    def _commit_or_404(edit: Edit, missing: str) -> dict[str, Any]:
        try:
            result = session.commit(edit)
        except KeyError:
            raise HTTPException(status_code=404, detail=f"{missing} not found") from None
        except ValueError as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc
        return _saved(result)

    # ------- Visitor routes -------

    @app.get("/")
    def read_root() -> dict[str, str]:
        return {"message": f"{session.document.site.name or 'Portfolio'} API running"}

    @app.get("/api/content")
    def get_content() -> dict[str, Any]:
        return session.document.to_wire()

    @app.get("/api/projects")
    def list_projects(category: Annotated[str | None, Query()] = None) -> list[dict[str, Any]]:
        projects = session.document.projects
        if category is not None:
            projects = queries.filter_by_category(projects, category)
        return [p.model_dump(mode="json", by_alias=True) for p in projects]

    @app.get("/api/projects/{project_id}")
    def get_project(project_id: str) -> dict[str, Any]:
        project = queries.find_project(session.document, project_id)
        if project is None:
            raise HTTPException(status_code=404, detail="Project not found")
        return project.model_dump(mode="json", by_alias=True)

    @app.get("/api/staff")
    def list_staff() -> list[dict[str, Any]]:
        return [
            s.model_dump(mode="json", by_alias=True)
            for s in queries.sorted_staff(session.document.staff)
        ]

    @app.get("/api/timeline")
    def get_timeline() -> list[dict[str, Any]]:
        return [e.model_dump(mode="json") for e in queries.timeline(session.document)]

    @app.get("/api/status")
    def get_status() -> dict[str, Any]:
        binding = session.store.binding
        return {
            "backend": binding.describe(),
            "kind": binding.kind,
            "configured": binding.is_configured,
            "connection": session.connection,
            "save_status": session.status,
            "notices": [n.model_dump(mode="json") for n in session.notices],
        }

    # ------- Admin routes -------

    @app.put("/api/content", dependencies=[Admin])
    def replace_content(document: ContentDocument) -> dict[str, Any]:
        return _saved(session.commit(lambda _doc: document))

    @app.post("/api/projects", status_code=201, dependencies=[Admin])
    def create_project(fields: ProjectFields) -> dict[str, Any]:
        project = mutations.new_project(**fields.changes())
        response = _saved(session.commit(lambda doc: mutations.add_project(doc, project)))
        response["id"] = project.id
        return response

    @app.patch("/api/projects/{project_id}", dependencies=[Admin])
    def patch_project(project_id: str, fields: ProjectFields) -> dict[str, Any]:
        changes = fields.changes()
        return _commit_or_404(
            lambda doc: mutations.update_project(doc, project_id, **changes), "Project"
        )

    @app.delete("/api/projects/{project_id}", dependencies=[Admin])
    def delete_project(project_id: str) -> dict[str, Any]:
        if queries.find_project(session.document, project_id) is None:
            raise HTTPException(status_code=404, detail="Project not found")
        return _saved(session.commit(lambda doc: mutations.remove_project(doc, project_id)))

    @app.post("/api/staff", status_code=201, dependencies=[Admin])
    def create_staff(fields: StaffFields) -> dict[str, Any]:
        credit = mutations.new_staff_credit(**fields.changes())
        response = _saved(session.commit(lambda doc: mutations.add_staff(doc, credit)))
        response["id"] = credit.id
        return response

    @app.delete("/api/staff/{staff_id}", dependencies=[Admin])
    def delete_staff(staff_id: str) -> dict[str, Any]:
        if queries.find_staff(session.document, staff_id) is None:
            raise HTTPException(status_code=404, detail="Staff credit not found")
        return _saved(session.commit(lambda doc: mutations.remove_staff(doc, staff_id)))

    @app.patch("/api/site", dependencies=[Admin])
    def patch_site(fields: SiteFields) -> dict[str, Any]:
        site_changes = fields.model_dump(mode="json", exclude_none=True, exclude={"contact"})
        contact_changes = fields.contact.changes() if fields.contact else {}

        def edit(doc: ContentDocument) -> ContentDocument:
            if site_changes:
                doc = mutations.update_site(doc, **site_changes)
            if contact_changes:
                doc = mutations.update_contact(doc, **contact_changes)
            return doc

        return _commit_or_404(edit, "Site")

    @app.post("/api/images", dependencies=[Admin])
    def upload_image(file: Annotated[UploadFile, File()]) -> dict[str, str]:
        content = file.file.read()
        try:
            reference = session.upload_image(content, file.filename or "image")
        except (ImageReadError, ImageDecodeError) as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc
        except ImageRejectedError as exc:
            raise HTTPException(status_code=502, detail=str(exc)) from exc
        except BackendError as exc:
            raise HTTPException(status_code=_FAILURE_STATUS[exc.reason], detail=str(exc)) from exc
        return {"reference": reference}

    return app
