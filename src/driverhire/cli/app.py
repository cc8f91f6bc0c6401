from __future__ import annotations

import json

import typer
import uvicorn

from driverhire.api.app import create_app
from driverhire.config import get_settings
from driverhire.core.auth import register_user
from driverhire.db.init import init_database
from driverhire.db.repositories import Repository
from driverhire.db.session import SessionLocal
from driverhire.errors import DuplicateError, ValidationFailed
from driverhire.logging_config import configure_logging

app = typer.Typer(help="DriverHire CLI")
user_app = typer.Typer(help="Manage user accounts and roles")
jobs_app = typer.Typer(help="Job posting commands")
applications_app = typer.Typer(help="Application commands")

app.add_typer(user_app, name="user")
app.add_typer(jobs_app, name="jobs")
app.add_typer(applications_app, name="applications")

_INITIALIZED = False


def ensure_initialized() -> None:
    global _INITIALIZED
    if _INITIALIZED:
        return
    init_database()
    _INITIALIZED = True


@app.command("init")
def init_cmd() -> None:
    """Initialize database, storage directories, and the bootstrap manager."""
    configure_logging()
    result = init_database()
    typer.echo(json.dumps({"ok": True, **result}, indent=2))


@user_app.command("create")
def user_create(
    email: str = typer.Option(..., "--email"),
    password: str = typer.Option(..., "--password", prompt=True, hide_input=True),
    full_name: str = typer.Option("", "--full-name"),
    manager: bool = typer.Option(False, "--manager", help="Also grant the manager role"),
) -> None:
    configure_logging()
    ensure_initialized()
    with SessionLocal() as db:
        repo = Repository(db)
        try:
            user = register_user(repo, email=email, password=password, full_name=full_name)
        except (ValidationFailed, DuplicateError) as exc:
            raise typer.BadParameter(str(exc)) from exc
        if manager:
            repo.add_user_role(user.id, "manager")
        roles = [row.role for row in repo.get_user_roles(user.id)]
        typer.echo(json.dumps({"id": user.id, "email": user.email, "roles": roles}, indent=2))


@user_app.command("grant-role")
def user_grant_role(
    email: str = typer.Option(..., "--email"),
    role: str = typer.Option("manager", "--role"),
) -> None:
    configure_logging()
    ensure_initialized()
    if role not in {"candidate", "manager"}:
        raise typer.BadParameter(f"unknown role '{role}'")
    with SessionLocal() as db:
        repo = Repository(db)
        user = repo.get_user_by_email(email)
        if not user:
            raise typer.BadParameter(f"user {email} not found")
        repo.add_user_role(user.id, role)
        roles = [row.role for row in repo.get_user_roles(user.id)]
        typer.echo(json.dumps({"id": user.id, "email": user.email, "roles": roles}, indent=2))


@jobs_app.command("list")
def jobs_list(include_inactive: bool = typer.Option(False, "--include-inactive")) -> None:
    configure_logging()
    ensure_initialized()
    with SessionLocal() as db:
        repo = Repository(db)
        jobs = repo.get_jobs(include_inactive=include_inactive)
        typer.echo(
            json.dumps(
                [
                    {
                        "id": job.id,
                        "title": job.title,
                        "is_active": job.is_active,
                        "questions": len(repo.get_job_questions(job.id)),
                        "created_at": job.created_at.isoformat() if job.created_at else None,
                    }
                    for job in jobs
                ],
                indent=2,
            )
        )


@applications_app.command("list")
def applications_list(status: str | None = typer.Option(None, "--status")) -> None:
    configure_logging()
    ensure_initialized()
    with SessionLocal() as db:
        repo = Repository(db)
        rows = [row for row in repo.get_all_applications() if status is None or row.status == status]
        typer.echo(
            json.dumps(
                [
                    {
                        "id": row.id,
                        "job_id": row.job_id,
                        "candidate_id": row.candidate_id,
                        "status": row.status,
                        "submitted_at": row.submitted_at.isoformat() if row.submitted_at else None,
                        "reviewed_at": row.reviewed_at.isoformat() if row.reviewed_at else None,
                    }
                    for row in rows
                ],
                indent=2,
            )
        )


@app.command("serve")
def serve(
    host: str | None = typer.Option(None, "--host"),
    port: int | None = typer.Option(None, "--port"),
) -> None:
    configure_logging()
    ensure_initialized()
    settings = get_settings()
    app_instance = create_app()
    uvicorn.run(app_instance, host=host or settings.app_host, port=port or settings.app_port)
