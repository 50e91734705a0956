"""Typer CLI for SecureVote."""

import asyncio

import typer
from rich.console import Console

app = typer.Typer(name="securevote", help="SecureVote: anonymous election voting API")
console = Console()


@app.command()
def serve(
    host: str = typer.Option("0.0.0.0", help="Bind host"),
    port: int = typer.Option(8080, help="Bind port"),
):
    """Start the SecureVote API server."""
    import uvicorn
    from securevote.app import create_app

    console.print(f"[bold green]Starting SecureVote on {host}:{port}[/bold green]")
    uvicorn.run(create_app(), host=host, port=port)


async def _migrate() -> tuple[list[str], str | None]:
    from securevote.common.config import get_settings
    from securevote.deps import get_db, get_user_service

    settings = get_settings()
    db = get_db()
    await db.init()
    try:
        applied = await db.migrate()
        admin_email = None
        if settings.admin_email and settings.admin_password:
            user, created = await db.run(
                get_user_service().ensure_admin,
                settings.admin_email, settings.admin_password,
            )
            if created:
                admin_email = user.email
        return applied, admin_email
    finally:
        await db.close()


@app.command()
def migrate():
    """Create the schema and the bootstrap admin (SECUREVOTE_ADMIN_EMAIL/PASSWORD)."""
    applied, admin_email = asyncio.run(_migrate())
    if applied:
        console.print(f"[bold green]Applied:[/bold green] {', '.join(applied)}")
    else:
        console.print("Schema up to date")
    if admin_email:
        console.print(f"Created admin [bold]{admin_email}[/bold]")


async def _create_admin(email: str, password: str, full_name: str) -> bool:
    from securevote.deps import get_db, get_user_service

    db = get_db()
    await db.init()
    try:
        await db.migrate()
        _, created = await db.run(
            get_user_service().ensure_admin, email, password, full_name=full_name,
        )
        return created
    finally:
        await db.close()


@app.command("create-admin")
def create_admin(
    email: str = typer.Argument(..., help="Admin email address"),
    password: str = typer.Option(..., prompt=True, hide_input=True, confirmation_prompt=True),
    full_name: str = typer.Option("Admin User", help="Display name"),
):
    """Create an admin account."""
    from securevote.common.exceptions import SecureVoteError

    try:
        created = asyncio.run(_create_admin(email, password, full_name))
    except SecureVoteError as e:
        console.print(f"[bold red]{e.code}[/bold red]: {e.message}")
        raise typer.Exit(1)

    if created:
        console.print(f"[bold green]Created admin[/bold green] {email}")
    else:
        console.print(f"[yellow]{email} already exists[/yellow]")


@app.command()
def health(
    url: str = typer.Option("http://localhost:8080", help="Server URL"),
):
    """Check SecureVote server health."""
    import httpx

    try:
        resp = httpx.get(f"{url}/health", timeout=5)
        data = resp.json()
        console.print(
            f"[bold green]{data['status']}[/bold green]: db {data['database']}, v{data['version']}"
        )
    except (httpx.HTTPError, ValueError, KeyError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
