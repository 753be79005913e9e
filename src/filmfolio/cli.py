"""Operator CLI for filmfolio."""

import json
import logging
from pathlib import Path
from typing import Annotated, Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from filmfolio.config import FilmfolioConfig, load_config
from filmfolio.content import mutations, queries
from filmfolio.content.models import Category
from filmfolio.credentials import CredentialStore, StoredCredentials
from filmfolio.session import EditSession, NoticeLevel
from filmfolio.shared.errors import BackendError, ImageUploadError
from filmfolio.storage.binding import resolve_binding
from filmfolio.storage.store import PortfolioStore, SaveResult, parse_document

app = typer.Typer(
    name="filmfolio",
    help="Manage the content of a film portfolio site.",
    no_args_is_help=True,
)

console = Console()


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        from filmfolio import __version__

        console.print(f"filmfolio {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    config_path: Annotated[
        Optional[Path],
        typer.Option("--config", "-c", help="Path to a filmfolio TOML config file."),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", help="Show debug logging."),
    ] = False,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-v",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = False,
) -> None:
    """filmfolio - portfolio content with swappable storage backends."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )
    ctx.obj = {"config_path": config_path}


def _config(ctx: typer.Context) -> FilmfolioConfig:
    try:
        return load_config(ctx.obj["config_path"] if ctx.obj else None)
    except ValidationError as exc:
        console.print(f"[red]Invalid configuration:[/red] {exc.error_count()} error(s)")
        for error in exc.errors():
            location = ".".join(str(part) for part in error["loc"])
            console.print(f"  {location}: {error['msg']}")
        raise typer.Exit(1)


def _open_session(ctx: typer.Context) -> EditSession:
    config = _config(ctx)
    store = PortfolioStore(resolve_binding(config), images=config.images)
    session = EditSession.open(store)
    for notice in session.notices:
        style = "red" if notice.level is NoticeLevel.ERROR else "yellow"
        console.print(f"[{style}]{notice.message}[/{style}]")
    return session


def _report(result: SaveResult) -> None:
    if result.ok:
        console.print(f"[green]Saved[/green] ({result.size:,} bytes)")
        return
    console.print(f"[red]Save failed ({result.reason}):[/red] {result.message}")
    if result.limit:
        console.print("Remove or shrink embedded images, then save again.")
    raise typer.Exit(1)


def _short(reference: str, width: int = 60) -> str:
    if reference.startswith("data:") and len(reference) > width:
        return f"{reference[:width]}... ({len(reference):,} chars)"
    return reference


# ── Read commands ───────────────────────────────────────────────────────


@app.command()
def status(ctx: typer.Context) -> None:
    """Show which backend is bound and whether it answers."""
    session = _open_session(ctx)
    doc = session.document
    console.print(f"Backend:    {session.store.binding.describe()}")
    console.print(f"Connection: {session.connection}")
    console.print(f"Projects:   {len(doc.projects)}")
    console.print(f"Staff:      {len(doc.staff)}")
    console.print(f"Size:       {len(doc.to_json_bytes()):,} bytes")


@app.command()
def show(ctx: typer.Context) -> None:
    """Print the whole document as JSON."""
    session = _open_session(ctx)
    console.print_json(json.dumps(session.document.to_wire(), ensure_ascii=False))


@app.command()
def projects(
    ctx: typer.Context,
    category: Annotated[
        Optional[Category],
        typer.Option("--category", help="Only list projects in this category."),
    ] = None,
) -> None:
    """List projects in display order."""
    session = _open_session(ctx)
    items = session.document.projects
    if category is not None:
        items = queries.filter_by_category(items, category)

    if not items:
        console.print("[yellow]No projects found.[/yellow]")
        raise typer.Exit(0)

    table = Table("ID", "Year", "Category", "Title", "Role")
    for p in items:
        table.add_row(p.id, p.year, p.category, f"{p.title_local} / {p.title_alt}", p.role)
    console.print(table)


@app.command()
def staff(ctx: typer.Context) -> None:
    """List staff credits, newest first."""
    session = _open_session(ctx)
    table = Table("ID", "Year", "Project", "Role")
    for s in queries.sorted_staff(session.document.staff):
        table.add_row(s.id, s.year, s.project, s.role)
    console.print(table)


@app.command()
def timeline(ctx: typer.Context) -> None:
    """List projects and staff credits together, newest year first."""
    session = _open_session(ctx)
    table = Table("Year", "Kind", "Title", "Role")
    for entry in queries.timeline(session.document):
        table.add_row(entry.year, entry.kind, entry.title, entry.role)
    console.print(table)


@app.command(name="export")
def export_cmd(
    ctx: typer.Context,
    output: Annotated[Path, typer.Argument(help="File to write the document to.")],
) -> None:
    """Write the current document to a JSON file."""
    session = _open_session(ctx)
    output.write_text(
        json.dumps(session.document.to_wire(), ensure_ascii=False, indent=2),
        encoding="utf-8",
    )
    console.print(f"Wrote {output}")


# ── Edit commands ───────────────────────────────────────────────────────


@app.command(name="import")
def import_cmd(
    ctx: typer.Context,
    source: Annotated[
        Path,
        typer.Argument(help="JSON document to push.", exists=True, dir_okay=False),
    ],
) -> None:
    """Replace the stored document with the contents of a JSON file."""
    try:
        raw = json.loads(source.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        console.print(f"[red]Error:[/red] {source} is not valid JSON: {exc}")
        raise typer.Exit(1)
    document = parse_document(raw)
    if document is None:
        console.print(f"[red]Error:[/red] {source} is not a portfolio document")
        raise typer.Exit(1)

    session = _open_session(ctx)
    _report(session.commit(lambda _doc: document))


@app.command(name="add-project")
def add_project_cmd(
    ctx: typer.Context,
    title_local: Annotated[Optional[str], typer.Option("--title-local", help="Local-language title.")] = None,
    title_alt: Annotated[Optional[str], typer.Option("--title-alt", help="Alternate (English) title.")] = None,
    category: Annotated[Optional[Category], typer.Option("--category")] = None,
    year: Annotated[Optional[str], typer.Option("--year")] = None,
    genre: Annotated[Optional[str], typer.Option("--genre")] = None,
    runtime: Annotated[Optional[str], typer.Option("--runtime")] = None,
    role: Annotated[Optional[str], typer.Option("--role")] = None,
    synopsis: Annotated[Optional[str], typer.Option("--synopsis")] = None,
    award: Annotated[Optional[list[str]], typer.Option("--award", help="Repeat for several.")] = None,
    main_image: Annotated[Optional[str], typer.Option("--main-image", help="Poster URL or data URI.")] = None,
) -> None:
    """Add a project at the top of the list."""
    project = mutations.new_project(
        title_local=title_local,
        title_alt=title_alt,
        category=category.value if category else None,
        year=year,
        genre=genre,
        runtime=runtime,
        role=role,
        synopsis=synopsis,
        awards=award,
        main_image=main_image,
    )
    session = _open_session(ctx)
    console.print(f"Added project {project.id}")
    _report(session.commit(lambda doc: mutations.add_project(doc, project)))


@app.command(name="remove-project")
def remove_project_cmd(
    ctx: typer.Context,
    project_id: Annotated[str, typer.Argument(help="Project id.")],
) -> None:
    """Delete a project."""
    session = _open_session(ctx)
    if queries.find_project(session.document, project_id) is None:
        console.print(f"[red]Error:[/red] no project with id {project_id}")
        raise typer.Exit(1)
    _report(session.commit(lambda doc: mutations.remove_project(doc, project_id)))


@app.command(name="add-staff")
def add_staff_cmd(
    ctx: typer.Context,
    project: Annotated[str, typer.Option("--project", help="Production name.")],
    role: Annotated[str, typer.Option("--role")],
    year: Annotated[Optional[str], typer.Option("--year")] = None,
    award: Annotated[Optional[list[str]], typer.Option("--award")] = None,
) -> None:
    """Add a staff credit."""
    credit = mutations.new_staff_credit(project=project, role=role, year=year, awards=award)
    session = _open_session(ctx)
    console.print(f"Added staff credit {credit.id}")
    _report(session.commit(lambda doc: mutations.add_staff(doc, credit)))


@app.command(name="remove-staff")
def remove_staff_cmd(
    ctx: typer.Context,
    staff_id: Annotated[str, typer.Argument(help="Staff credit id.")],
) -> None:
    """Delete a staff credit."""
    session = _open_session(ctx)
    if queries.find_staff(session.document, staff_id) is None:
        console.print(f"[red]Error:[/red] no staff credit with id {staff_id}")
        raise typer.Exit(1)
    _report(session.commit(lambda doc: mutations.remove_staff(doc, staff_id)))


@app.command(name="set-site")
def set_site_cmd(
    ctx: typer.Context,
    name: Annotated[Optional[str], typer.Option("--name")] = None,
    philosophy: Annotated[Optional[str], typer.Option("--philosophy")] = None,
    about: Annotated[Optional[str], typer.Option("--about", help="Biography text.")] = None,
    contact_title: Annotated[Optional[str], typer.Option("--contact-title")] = None,
    email: Annotated[Optional[str], typer.Option("--email")] = None,
    phone: Annotated[Optional[str], typer.Option("--phone")] = None,
    instagram: Annotated[Optional[str], typer.Option("--instagram")] = None,
    youtube: Annotated[Optional[str], typer.Option("--youtube")] = None,
) -> None:
    """Edit site identity and contact details."""
    site_changes = {
        k: v
        for k, v in {
            "name": name,
            "philosophy": philosophy,
            "about_text": about,
            "contact_title": contact_title,
        }.items()
        if v is not None
    }
    contact_changes = {
        k: v
        for k, v in {"email": email, "phone": phone, "instagram": instagram, "youtube": youtube}.items()
        if v is not None
    }
    if not site_changes and not contact_changes:
        console.print("[yellow]Nothing to change.[/yellow]")
        raise typer.Exit(0)

    def edit(doc):
        if site_changes:
            doc = mutations.update_site(doc, **site_changes)
        if contact_changes:
            doc = mutations.update_contact(doc, **contact_changes)
        return doc

    session = _open_session(ctx)
    _report(session.commit(edit))


@app.command(name="upload-image")
def upload_image_cmd(
    ctx: typer.Context,
    path: Annotated[Path, typer.Argument(help="Image file to upload.", dir_okay=False)],
    project_id: Annotated[
        Optional[str],
        typer.Option("--project", help="Use as this project's poster (or still, with --still)."),
    ] = None,
    still: Annotated[bool, typer.Option("--still", help="Append to the project's stills.")] = False,
    profile: Annotated[bool, typer.Option("--profile", help="Use as the profile image.")] = False,
    home_bg: Annotated[bool, typer.Option("--home-bg", help="Use as the home background.")] = False,
) -> None:
    """Upload an image and optionally attach it to the document."""
    if still and project_id is None:
        console.print("[red]Error:[/red] --still needs --project")
        raise typer.Exit(1)

    session = _open_session(ctx)
    if project_id is not None and queries.find_project(session.document, project_id) is None:
        console.print(f"[red]Error:[/red] no project with id {project_id}")
        raise typer.Exit(1)
    try:
        reference = session.upload_image(path)
    except (ImageUploadError, BackendError) as exc:
        console.print(f"[red]Upload failed:[/red] {exc}")
        raise typer.Exit(1)
    console.print(f"Reference: {_short(reference)}")

    if project_id is not None and still:
        _report(session.commit(lambda doc: mutations.add_still(doc, project_id, reference)))
    elif project_id is not None:
        _report(
            session.commit(lambda doc: mutations.update_project(doc, project_id, main_image=reference))
        )
    elif profile:
        _report(session.commit(lambda doc: mutations.update_site(doc, profile_image=reference)))
    elif home_bg:
        _report(session.commit(lambda doc: mutations.update_site(doc, home_bg_image=reference)))


# ── Backend setup ───────────────────────────────────────────────────────


@app.command()
def connect(
    bin_id: Annotated[str, typer.Option("--bin-id", help="JSONbin bin id.")],
    api_key: Annotated[str, typer.Option("--api-key", help="JSONbin access key.")],
) -> None:
    """Save JSONbin credentials locally; used from the next command on."""
    store = CredentialStore()
    store.save(StoredCredentials(bin_id=bin_id, api_key=api_key))
    console.print(f"[green]Saved credentials[/green] to {store.path}")


@app.command()
def disconnect() -> None:
    """Forget locally saved JSONbin credentials."""
    store = CredentialStore()
    if store.clear():
        console.print("Removed saved credentials.")
    else:
        console.print("[yellow]No saved credentials.[/yellow]")


@app.command()
def serve(
    ctx: typer.Context,
    host: Annotated[Optional[str], typer.Option("--host")] = None,
    port: Annotated[Optional[int], typer.Option("--port")] = None,
) -> None:
    """Run the visitor/admin JSON API."""
    import uvicorn

    from filmfolio.web import create_app

    config = _config(ctx)
    if not config.admin.passphrase:
        console.print("[yellow]No admin passphrase set, admin routes are locked.[/yellow]")
    session = _open_session(ctx)
    api = create_app(session, passphrase=config.admin.passphrase)
    try:
        uvicorn.run(api, host=host or config.server.host, port=port or config.server.port)
    finally:
        session.close()


if __name__ == "__main__":
    app()
