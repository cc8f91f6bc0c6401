from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile
from fastapi.responses import FileResponse, HTMLResponse, RedirectResponse, Response
from fastapi.templating import Jinja2Templates
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from driverhire.api.deps import get_db, get_optional_session, require_page_manager, require_page_session
from driverhire.config import get_settings
from driverhire.core import addresses, authorizations, background, contacts, dashboards, employment, jobs, review
from driverhire.core.applications import answers_from_form, submit_application
from driverhire.core.auth import authenticate, register_user
from driverhire.core.documents import UPLOAD_SLOTS, DocumentService, format_file_size
from driverhire.core.security import create_access_token
from driverhire.core.session import SessionContext
from driverhire.core.wizard import ALL_FIELDS, EQUIPMENT_TYPES, PROFILE_WIZARD_STEPS, ProfileWizard
from driverhire.db.repositories import Repository
from driverhire.errors import DuplicateError, NotFoundError, PermissionDenied, StorageError, ValidationFailed
from driverhire.types import AddressHistoryInput, EmergencyContactInput, EmploymentInput

logger = logging.getLogger(__name__)

router = APIRouter(tags=["web"])
templates = Jinja2Templates(
    directory=str(Path(__file__).resolve().parents[1] / "web" / "templates")
)
templates.env.filters["status_label"] = review.status_label
templates.env.filters["file_size"] = format_file_size
static_dir = Path(__file__).resolve().parents[1] / "web" / "static"

CANDIDATE_STATUS_FILTERS = ("all", dashboards.NO_APPLICATIONS, *review.APPLICATION_STATUSES)
APPLICATION_STATUS_FILTERS = ("all", *review.APPLICATION_STATUSES)


async def posted_form(request: Request) -> dict[str, Any]:
    """Flatten the posted form; repeated keys (checkbox groups) become lists."""
    form = await request.form()
    data: dict[str, Any] = {}
    for key in form.keys():
        values = form.getlist(key)
        data[key] = values if len(values) > 1 else values[0]
    return data


def _render(
    request: Request,
    name: str,
    context: dict[str, Any],
    *,
    session: SessionContext | None = None,
    status_code: int = 200,
) -> HTMLResponse:
    return templates.TemplateResponse(request, name, {"session": session, **context}, status_code=status_code)


def _not_found(request: Request, message: str, session: SessionContext | None = None) -> HTMLResponse:
    return _render(request, "not_found.html", {"message": message}, session=session, status_code=404)


def _redirect(url: str) -> RedirectResponse:
    return RedirectResponse(url=url, status_code=303)


def _safe_return_to(value: str | None) -> str:
    if value and value.startswith("/") and not value.startswith("//"):
        return value
    return "/dashboard"


def _signed_in(url: str, user_id: int) -> RedirectResponse:
    settings = get_settings()
    response = _redirect(url)
    response.set_cookie(
        settings.session_cookie_name,
        create_access_token(user_id),
        max_age=settings.access_token_expire_minutes * 60,
        httponly=True,
        samesite="lax",
    )
    return response


def _parse_form(model: type[BaseModel], form: Mapping[str, Any]) -> Any:
    data = {key: (None if value == "" else value) for key, value in form.items() if key in model.model_fields}
    try:
        return model.model_validate(data)
    except PydanticValidationError as exc:
        first = exc.errors()[0]
        name = str(first["loc"][0]) if first.get("loc") else None
        if name and data.get(name) is None:
            raise ValidationFailed("Please fill out this field.", field=name) from exc
        raise ValidationFailed("Please review the highlighted field.", field=name) from exc


def _icon_response(*filenames: str) -> Response:
    for filename in filenames:
        icon_path = static_dir / filename
        if icon_path.is_file():
            return FileResponse(icon_path)
    return Response(status_code=204)


@router.get("/favicon.ico", include_in_schema=False)
def favicon() -> Response:
    return _icon_response("favicon.ico", "favicon.png", "favicon.svg")


@router.get("/apple-touch-icon.png", include_in_schema=False)
def apple_touch_icon() -> Response:
    return _icon_response("apple-touch-icon.png", "apple-touch-icon.svg")


@router.get("/apple-touch-icon-precomposed.png", include_in_schema=False)
def apple_touch_icon_precomposed() -> Response:
    return _icon_response(
        "apple-touch-icon-precomposed.png",
        "apple-touch-icon.png",
        "apple-touch-icon.svg",
    )


# public pages & auth


@router.get("/", response_class=HTMLResponse)
def home(request: Request, session: SessionContext | None = Depends(get_optional_session)) -> HTMLResponse:
    return _render(request, "home.html", {}, session=session)


@router.get("/login", response_class=HTMLResponse)
def login_page(request: Request, returnTo: str = "/dashboard") -> HTMLResponse:
    return _render(request, "login.html", {"return_to": _safe_return_to(returnTo), "error": None, "email": ""})


@router.post("/login")
def login(
    request: Request,
    email: str = Form(""),
    password: str = Form(""),
    return_to: str = Form("/dashboard"),
    db: Session = Depends(get_db),
):
    user = authenticate(Repository(db), email=email, password=password)
    if not user:
        return _render(
            request,
            "login.html",
            {"return_to": _safe_return_to(return_to), "error": "Invalid login credentials", "email": email},
            status_code=400,
        )
    logger.info("User signed in user_id=%s", user.id)
    return _signed_in(_safe_return_to(return_to), user.id)


@router.get("/signup", response_class=HTMLResponse)
def signup_page(request: Request) -> HTMLResponse:
    return _render(request, "signup.html", {"error": None, "email": "", "full_name": ""})


@router.post("/signup")
def signup(
    request: Request,
    full_name: str = Form(""),
    email: str = Form(""),
    password: str = Form(""),
    db: Session = Depends(get_db),
):
    try:
        user = register_user(Repository(db), email=email, password=password, full_name=full_name)
    except (ValidationFailed, DuplicateError) as exc:
        return _render(
            request,
            "signup.html",
            {"error": str(exc), "email": email, "full_name": full_name},
            status_code=400,
        )
    return _signed_in("/dashboard", user.id)


@router.api_route("/logout", methods=["GET", "POST"])
def logout() -> RedirectResponse:
    response = _redirect("/")
    response.delete_cookie(get_settings().session_cookie_name)
    return response


@router.get("/dashboard", response_class=HTMLResponse)
def dashboard(
    request: Request,
    session: SessionContext = Depends(require_page_session),
    db: Session = Depends(get_db),
) -> HTMLResponse:
    repo = Repository(db)
    if session.is_manager:
        return _render(
            request,
            "dashboard.html",
            {
                "jobs": repo.get_jobs(include_inactive=True),
                "applications": repo.get_all_applications(),
                "candidates": repo.get_all_candidates(),
            },
            session=session,
        )

    profile = repo.get_profile(session.user_id)
    return _render(
        request,
        "dashboard.html",
        {
            "profile_complete": bool(profile and profile.profile_completed_at),
            "sections": dashboards.onboarding_sections(repo, session.user_id),
            "applications": dashboards.application_rows(repo, repo.get_applications(session.user_id)),
        },
        session=session,
    )


# profile wizard


def _render_wizard(
    request: Request,
    session: SessionContext,
    wizard: ProfileWizard,
    *,
    error: str | None = None,
    error_field: str | None = None,
    status_code: int = 200,
) -> HTMLResponse:
    return _render(
        request,
        "profile_wizard.html",
        {
            "wizard": wizard,
            "steps": PROFILE_WIZARD_STEPS,
            "all_fields": ALL_FIELDS,
            "equipment_types": EQUIPMENT_TYPES,
            "error": error,
            "error_field": error_field,
        },
        session=session,
        status_code=status_code,
    )


@router.get("/profile/create", response_class=HTMLResponse)
def profile_wizard(
    request: Request,
    session: SessionContext = Depends(require_page_session),
    db: Session = Depends(get_db),
) -> HTMLResponse:
    wizard = ProfileWizard.from_profile(Repository(db).get_profile(session.user_id))
    return _render_wizard(request, session, wizard)


@router.post("/profile/create")
def profile_wizard_post(
    request: Request,
    form: dict[str, Any] = Depends(posted_form),
    session: SessionContext = Depends(require_page_session),
    db: Session = Depends(get_db),
):
    try:
        step = int(form.get("step") or 1)
    except ValueError:
        step = 1
    wizard = ProfileWizard(step=min(max(step, 1), len(PROFILE_WIZARD_STEPS)))
    action = form.get("action", "next")

    if action == "back":
        wizard.back(form)
        return _render_wizard(request, session, wizard)

    try:
        if action != "submit" or not wizard.is_final:
            wizard.advance(form)
            return _render_wizard(request, session, wizard)
        wizard.merge(form)
        wizard.submit(Repository(db), session.user_id)
    except ValidationFailed as exc:
        return _render_wizard(request, session, wizard, error=exc.message, error_field=exc.field, status_code=400)
    except SQLAlchemyError:
        logger.exception("Profile save failed user_id=%s", session.user_id)
        db.rollback()
        return _render_wizard(
            request,
            session,
            wizard,
            error="Failed to save profile. Please try again.",
            status_code=500,
        )
    return _redirect("/profile/employment-history")


# employment & address history


def _render_employment(
    request: Request,
    session: SessionContext,
    repo: Repository,
    *,
    edit_id: int | None = None,
    error: str | None = None,
    status_code: int = 200,
) -> HTMLResponse:
    recent, cdl = employment.partition_history(repo.get_employment_history(session.user_id))
    editing = repo.get_employment(edit_id) if edit_id else None
    if editing and editing.user_id != session.user_id:
        editing = None
    return _render(
        request,
        "employment_history.html",
        {
            "recent": recent,
            "cdl": cdl,
            "addresses": repo.get_address_history(session.user_id),
            "editing": editing,
            "error": error,
        },
        session=session,
        status_code=status_code,
    )


@router.get("/profile/employment-history", response_class=HTMLResponse)
def employment_history(
    request: Request,
    edit: int | None = None,
    session: SessionContext = Depends(require_page_session),
    db: Session = Depends(get_db),
) -> HTMLResponse:
    return _render_employment(request, session, Repository(db), edit_id=edit)


@router.post("/profile/employment-history")
def add_employment(
    request: Request,
    form: dict[str, Any] = Depends(posted_form),
    session: SessionContext = Depends(require_page_session),
    db: Session = Depends(get_db),
):
    repo = Repository(db)
    try:
        data = _parse_form(EmploymentInput, form)
        employment.add_employment(repo, session.user_id, data, is_cdl=form.get("bucket") == "cdl")
    except ValidationFailed as exc:
        return _render_employment(request, session, repo, error=exc.message, status_code=400)
    except SQLAlchemyError:
        logger.exception("Employment save failed user_id=%s", session.user_id)
        db.rollback()
        return _render_employment(
            request, session, repo, error="Failed to save employment history. Please try again.", status_code=500
        )
    return _redirect("/profile/employment-history")


@router.post("/profile/employment-history/{employment_id}")
def update_employment(
    employment_id: int,
    request: Request,
    form: dict[str, Any] = Depends(posted_form),
    session: SessionContext = Depends(require_page_session),
    db: Session = Depends(get_db),
):
    repo = Repository(db)
    try:
        employment.update_employment(repo, session.user_id, employment_id, _parse_form(EmploymentInput, form))
    except NotFoundError:
        return _not_found(request, "Employment record not found", session)
    except ValidationFailed as exc:
        return _render_employment(request, session, repo, edit_id=employment_id, error=exc.message, status_code=400)
    except SQLAlchemyError:
        logger.exception("Employment update failed employment_id=%s", employment_id)
        db.rollback()
        return _render_employment(
            request,
            session,
            repo,
            edit_id=employment_id,
            error="Failed to save employment history. Please try again.",
            status_code=500,
        )
    return _redirect("/profile/employment-history")


@router.post("/profile/employment-history/{employment_id}/delete")
def delete_employment(
    employment_id: int,
    request: Request,
    session: SessionContext = Depends(require_page_session),
    db: Session = Depends(get_db),
):
    repo = Repository(db)
    try:
        employment.delete_employment(repo, session.user_id, employment_id)
    except NotFoundError:
        return _not_found(request, "Employment record not found", session)
    except SQLAlchemyError:
        logger.exception("Employment delete failed employment_id=%s", employment_id)
        db.rollback()
        return _render_employment(
            request, session, repo, error="Failed to delete employment history. Please try again.", status_code=500
        )
    return _redirect("/profile/employment-history")


@router.post("/profile/address-history")
def add_address(
    request: Request,
    form: dict[str, Any] = Depends(posted_form),
    session: SessionContext = Depends(require_page_session),
    db: Session = Depends(get_db),
):
    repo = Repository(db)
    try:
        addresses.add_address(repo, session.user_id, _parse_form(AddressHistoryInput, form))
    except ValidationFailed as exc:
        return _render_employment(request, session, repo, error=exc.message, status_code=400)
    except SQLAlchemyError:
        logger.exception("Address save failed user_id=%s", session.user_id)
        db.rollback()
        return _render_employment(
            request, session, repo, error="Failed to save address history. Please try again.", status_code=500
        )
    return _redirect("/profile/employment-history")


@router.post("/profile/address-history/{address_id}/delete")
def delete_address(
    address_id: int,
    request: Request,
    session: SessionContext = Depends(require_page_session),
    db: Session = Depends(get_db),
):
    repo = Repository(db)
    try:
        addresses.delete_address(repo, session.user_id, address_id)
    except NotFoundError:
        return _not_found(request, "Address record not found", session)
    except SQLAlchemyError:
        logger.exception("Address delete failed address_id=%s", address_id)
        db.rollback()
        return _render_employment(
            request, session, repo, error="Failed to delete address history. Please try again.", status_code=500
        )
    return _redirect("/profile/employment-history")


# background questions


def _render_background(
    request: Request,
    session: SessionContext,
    answers: Mapping[int, Any],
    *,
    error: str | None = None,
    error_field: str | None = None,
    status_code: int = 200,
) -> HTMLResponse:
    return _render(
        request,
        "background_questions.html",
        {
            "questions": list(enumerate(background.BACKGROUND_QUESTIONS, start=1)),
            "answers": answers,
            "error": error,
            "error_field": error_field,
        },
        session=session,
        status_code=status_code,
    )


@router.get("/profile/background-questions", response_class=HTMLResponse)
def background_questions(
    request: Request,
    session: SessionContext = Depends(require_page_session),
    db: Session = Depends(get_db),
) -> HTMLResponse:
    rows = Repository(db).get_background_questions(session.user_id)
    return _render_background(request, session, {row.question_number: row for row in rows})


@router.post("/profile/background-questions")
def save_background_questions(
    request: Request,
    form: dict[str, Any] = Depends(posted_form),
    session: SessionContext = Depends(require_page_session),
    db: Session = Depends(get_db),
):
    repo = Repository(db)
    try:
        answers = background.parse_answers(form)
        background.save_answers(repo, session.user_id, answers)
    except ValidationFailed as exc:
        posted = {
            number: background.BackgroundAnswer(
                number,
                (form.get(f"q{number}") or "") == "yes",
                form.get(f"q{number}_explanation") or None,
            )
            for number in background.QUESTION_NUMBERS
            if form.get(f"q{number}") in {"yes", "no"}
        }
        return _render_background(
            request, session, posted, error=exc.message, error_field=exc.field, status_code=400
        )
    except SQLAlchemyError:
        logger.exception("Background questions save failed user_id=%s", session.user_id)
        db.rollback()
        rows = repo.get_background_questions(session.user_id)
        return _render_background(
            request,
            session,
            {row.question_number: row for row in rows},
            error="Failed to save answers. Please try again.",
            status_code=500,
        )
    return _redirect("/profile/emergency-contacts")


# emergency contacts


def _render_contacts(
    request: Request,
    session: SessionContext,
    repo: Repository,
    *,
    edit_id: int | None = None,
    error: str | None = None,
    status_code: int = 200,
) -> HTMLResponse:
    rows = repo.get_emergency_contacts(session.user_id)
    return _render(
        request,
        "emergency_contacts.html",
        {
            "contacts": rows,
            "can_add": contacts.can_add(rows),
            "max_contacts": contacts.MAX_EMERGENCY_CONTACTS,
            "editing": next((row for row in rows if row.id == edit_id), None),
            "error": error,
        },
        session=session,
        status_code=status_code,
    )


@router.get("/profile/emergency-contacts", response_class=HTMLResponse)
def emergency_contacts(
    request: Request,
    edit: int | None = None,
    session: SessionContext = Depends(require_page_session),
    db: Session = Depends(get_db),
) -> HTMLResponse:
    return _render_contacts(request, session, Repository(db), edit_id=edit)


@router.post("/profile/emergency-contacts")
def add_emergency_contact(
    request: Request,
    form: dict[str, Any] = Depends(posted_form),
    session: SessionContext = Depends(require_page_session),
    db: Session = Depends(get_db),
):
    repo = Repository(db)
    try:
        contacts.add_contact(repo, session.user_id, _parse_form(EmergencyContactInput, form))
    except ValidationFailed as exc:
        return _render_contacts(request, session, repo, error=exc.message, status_code=400)
    except SQLAlchemyError:
        logger.exception("Emergency contact save failed user_id=%s", session.user_id)
        db.rollback()
        return _render_contacts(
            request, session, repo, error="Failed to save contact. Please try again.", status_code=500
        )
    return _redirect("/profile/emergency-contacts")


@router.post("/profile/emergency-contacts/{contact_id}")
def update_emergency_contact(
    contact_id: int,
    request: Request,
    form: dict[str, Any] = Depends(posted_form),
    session: SessionContext = Depends(require_page_session),
    db: Session = Depends(get_db),
):
    repo = Repository(db)
    try:
        contacts.update_contact(repo, session.user_id, contact_id, _parse_form(EmergencyContactInput, form))
    except NotFoundError:
        return _not_found(request, "Emergency contact not found", session)
    except ValidationFailed as exc:
        return _render_contacts(request, session, repo, edit_id=contact_id, error=exc.message, status_code=400)
    except SQLAlchemyError:
        logger.exception("Emergency contact update failed contact_id=%s", contact_id)
        db.rollback()
        return _render_contacts(
            request, session, repo, edit_id=contact_id, error="Failed to save contact. Please try again.", status_code=500
        )
    return _redirect("/profile/emergency-contacts")


@router.post("/profile/emergency-contacts/{contact_id}/delete")
def delete_emergency_contact(
    contact_id: int,
    request: Request,
    session: SessionContext = Depends(require_page_session),
    db: Session = Depends(get_db),
):
    repo = Repository(db)
    try:
        contacts.delete_contact(repo, session.user_id, contact_id)
    except NotFoundError:
        return _not_found(request, "Emergency contact not found", session)
    except SQLAlchemyError:
        logger.exception("Emergency contact delete failed contact_id=%s", contact_id)
        db.rollback()
        return _render_contacts(
            request, session, repo, error="Failed to delete contact. Please try again.", status_code=500
        )
    return _redirect("/profile/emergency-contacts")


# documents


def _render_documents(
    request: Request,
    session: SessionContext,
    service: DocumentService,
    *,
    error: str | None = None,
    status_code: int = 200,
) -> HTMLResponse:
    rows = service.repo.get_documents(session.user_id)
    slots = []
    for document_type, label in UPLOAD_SLOTS:
        # newest first, so the first match is the one shown
        document = next((row for row in rows if row.document_type == document_type), None)
        slots.append(
            {
                "type": document_type,
                "label": label,
                "document": document,
                "url": service.url(document) if document else None,
            }
        )
    return _render(
        request,
        "documents.html",
        {"slots": slots, "error": error},
        session=session,
        status_code=status_code,
    )


@router.get("/profile/documents", response_class=HTMLResponse)
def documents(
    request: Request,
    session: SessionContext = Depends(require_page_session),
    db: Session = Depends(get_db),
) -> HTMLResponse:
    return _render_documents(request, session, DocumentService(Repository(db)))


@router.post("/profile/documents")
def upload_document(
    request: Request,
    document_type: str = Form(...),
    file: UploadFile = File(...),
    session: SessionContext = Depends(require_page_session),
    db: Session = Depends(get_db),
):
    service = DocumentService(Repository(db))
    try:
        service.upload(
            session.user_id,
            file_name=file.filename or "upload",
            content=file.file.read(),
            mime_type=file.content_type,
            document_type=document_type,
        )
    except ValidationFailed as exc:
        return _render_documents(request, session, service, error=exc.message, status_code=400)
    except (StorageError, SQLAlchemyError):
        logger.exception("Document upload failed user_id=%s type=%s", session.user_id, document_type)
        return _render_documents(
            request, session, service, error="Failed to upload document. Please try again.", status_code=500
        )
    return _redirect("/profile/documents")


@router.get("/profile/documents/{document_id}/file")
def document_file(
    document_id: int,
    request: Request,
    session: SessionContext = Depends(require_page_session),
    db: Session = Depends(get_db),
):
    try:
        document, path = DocumentService(Repository(db)).open_for(document_id, session)
    except (NotFoundError, StorageError):
        return _not_found(request, "Document not found", session)
    return FileResponse(path, media_type=document.mime_type, filename=document.file_name)


@router.post("/profile/documents/{document_id}/delete")
def delete_document(
    document_id: int,
    request: Request,
    session: SessionContext = Depends(require_page_session),
    db: Session = Depends(get_db),
):
    service = DocumentService(Repository(db))
    try:
        service.delete(document_id, user_id=session.user_id)
    except NotFoundError:
        return _not_found(request, "Document not found", session)
    except SQLAlchemyError:
        logger.exception("Document delete failed document_id=%s", document_id)
        db.rollback()
        return _render_documents(
            request, session, service, error="Failed to delete document. Please try again.", status_code=500
        )
    return _redirect("/profile/documents")


# authorizations


def _render_authorizations(
    request: Request,
    session: SessionContext,
    repo: Repository,
    *,
    error: str | None = None,
    status_code: int = 200,
) -> HTMLResponse:
    rows = repo.get_authorizations(session.user_id)
    items = [
        {
            "spec": spec,
            "signed": authorizations.is_signed(rows, spec.type),
            "signed_at": authorizations.signed_at(rows, spec.type),
        }
        for spec in authorizations.AUTHORIZATION_TYPES
    ]
    return _render(
        request,
        "authorizations.html",
        {"items": items, "all_signed": authorizations.all_signed(rows), "error": error},
        session=session,
        status_code=status_code,
    )


@router.get("/profile/authorizations", response_class=HTMLResponse)
def authorizations_page(
    request: Request,
    session: SessionContext = Depends(require_page_session),
    db: Session = Depends(get_db),
) -> HTMLResponse:
    return _render_authorizations(request, session, Repository(db))


@router.post("/profile/authorizations/complete")
def complete_profile(
    request: Request,
    session: SessionContext = Depends(require_page_session),
    db: Session = Depends(get_db),
):
    repo = Repository(db)
    try:
        authorizations.complete_profile(repo, session.user_id)
    except ValidationFailed as exc:
        return _render_authorizations(request, session, repo, error=exc.message, status_code=400)
    return _redirect("/dashboard")


@router.post("/profile/authorizations/{authorization_type}/sign")
def sign_authorization(
    authorization_type: str,
    request: Request,
    session: SessionContext = Depends(require_page_session),
    db: Session = Depends(get_db),
):
    repo = Repository(db)
    try:
        authorizations.sign(
            repo,
            session.user_id,
            authorization_type,
            user_agent=request.headers.get("user-agent"),
            ip_address=request.client.host if request.client else None,
        )
    except ValidationFailed:
        return _not_found(request, "Authorization not found", session)
    except SQLAlchemyError:
        logger.exception("Authorization sign failed user_id=%s type=%s", session.user_id, authorization_type)
        db.rollback()
        return _render_authorizations(
            request, session, repo, error="Failed to sign authorization. Please try again.", status_code=500
        )
    return _redirect("/profile/authorizations")


# jobs: candidate side


@router.get("/jobs/browse", response_class=HTMLResponse)
def browse_jobs(
    request: Request,
    q: str = "",
    session: SessionContext | None = Depends(get_optional_session),
    db: Session = Depends(get_db),
) -> HTMLResponse:
    rows = jobs.search_jobs(Repository(db).get_jobs(include_inactive=False), q)
    return _render(request, "job_browse.html", {"jobs": rows, "q": q}, session=session)


@router.get("/applications", response_class=HTMLResponse)
def my_applications(
    request: Request,
    submitted: int = 0,
    session: SessionContext = Depends(require_page_session),
    db: Session = Depends(get_db),
) -> HTMLResponse:
    repo = Repository(db)
    rows = dashboards.application_rows(repo, repo.get_applications(session.user_id))
    return _render(request, "applications.html", {"rows": rows, "submitted": bool(submitted)}, session=session)


# jobs: manager side (static paths before /jobs/{job_id})


@router.get("/jobs", response_class=HTMLResponse)
def manage_jobs(
    request: Request,
    show_inactive: int = 0,
    error: str | None = None,
    session: SessionContext = Depends(require_page_manager),
    db: Session = Depends(get_db),
) -> HTMLResponse:
    rows = Repository(db).get_jobs(include_inactive=bool(show_inactive))
    return _render(
        request,
        "job_list.html",
        {"jobs": rows, "show_inactive": bool(show_inactive), "error": error},
        session=session,
    )


def _render_editor(
    request: Request,
    session: SessionContext,
    editor: jobs.JobEditor,
    *,
    error: str | None = None,
    error_field: str | None = None,
    status_code: int = 200,
) -> HTMLResponse:
    return _render(
        request,
        "job_form.html",
        {
            "editor": editor,
            "question_types": jobs.QUESTION_TYPES,
            "option_types": jobs.OPTION_QUESTION_TYPES,
            "error": error,
            "error_field": error_field,
        },
        session=session,
        status_code=status_code,
    )


def _editor_post(
    request: Request,
    session: SessionContext,
    db: Session,
    form: dict[str, Any],
    job_id: int | None,
):
    repo = Repository(db)
    try:
        editor = jobs.JobEditor.from_form(form, job_id=job_id)
        kind, index, direction = jobs.parse_editor_action(str(form.get("action", "save")))
    except ValidationFailed as exc:
        editor = jobs.JobEditor.from_header(form, job_id=job_id)
        return _render_editor(request, session, editor, error=exc.message, error_field=exc.field, status_code=400)

    if kind == "add_question":
        editor.add_question()
        return _render_editor(request, session, editor)
    if kind == "move":
        editor.move_question(index, direction)
        return _render_editor(request, session, editor)
    if kind == "delete":
        try:
            jobs.delete_question(repo, editor, index)
        except NotFoundError as exc:
            return _render_editor(request, session, editor, error=str(exc), status_code=404)
        except SQLAlchemyError:
            logger.exception("Job question delete failed job_id=%s", job_id)
            db.rollback()
            return _render_editor(
                request, session, editor, error="Failed to delete question. Please try again.", status_code=500
            )
        return _render_editor(request, session, editor)

    try:
        jobs.save_job(repo, editor, user_id=session.user_id)
    except ValidationFailed as exc:
        return _render_editor(request, session, editor, error=exc.message, error_field=exc.field, status_code=400)
    except (SQLAlchemyError, ValueError):
        logger.exception("Job save failed job_id=%s", editor.job_id)
        db.rollback()
        return _render_editor(
            request, session, editor, error="Failed to save job posting. Please try again.", status_code=500
        )
    return _redirect("/jobs")


@router.get("/jobs/create", response_class=HTMLResponse)
def create_job_page(request: Request, session: SessionContext = Depends(require_page_manager)) -> HTMLResponse:
    return _render_editor(request, session, jobs.JobEditor())


@router.post("/jobs/create")
def create_job(
    request: Request,
    form: dict[str, Any] = Depends(posted_form),
    session: SessionContext = Depends(require_page_manager),
    db: Session = Depends(get_db),
):
    return _editor_post(request, session, db, form, job_id=None)


@router.get("/jobs/{job_id}/edit", response_class=HTMLResponse)
def edit_job_page(
    job_id: int,
    request: Request,
    session: SessionContext = Depends(require_page_manager),
    db: Session = Depends(get_db),
) -> HTMLResponse:
    repo = Repository(db)
    job = repo.get_job(job_id)
    if not job:
        return _not_found(request, "Job not found", session)
    return _render_editor(request, session, jobs.JobEditor.from_job(job, repo.get_job_questions(job_id)))


@router.post("/jobs/{job_id}/edit")
def edit_job(
    job_id: int,
    request: Request,
    form: dict[str, Any] = Depends(posted_form),
    session: SessionContext = Depends(require_page_manager),
    db: Session = Depends(get_db),
):
    if not Repository(db).get_job(job_id):
        return _not_found(request, "Job not found", session)
    return _editor_post(request, session, db, form, job_id=job_id)


@router.post("/jobs/{job_id}/toggle")
def toggle_job(
    job_id: int,
    request: Request,
    show_inactive: int = Form(0),
    session: SessionContext = Depends(require_page_manager),
    db: Session = Depends(get_db),
):
    try:
        jobs.toggle_active(Repository(db), job_id)
    except NotFoundError:
        return _not_found(request, "Job not found", session)
    except SQLAlchemyError:
        logger.exception("Job status update failed job_id=%s", job_id)
        db.rollback()
        return _redirect(f"/jobs?show_inactive={show_inactive}&error=Failed+to+update+job+status.")
    return _redirect(f"/jobs?show_inactive={show_inactive}")


@router.post("/jobs/{job_id}/delete")
def delete_job(
    job_id: int,
    request: Request,
    show_inactive: int = Form(0),
    session: SessionContext = Depends(require_page_manager),
    db: Session = Depends(get_db),
):
    try:
        deleted = Repository(db).delete_job(job_id)
    except SQLAlchemyError:
        logger.exception("Job delete failed job_id=%s", job_id)
        db.rollback()
        return _redirect(f"/jobs?show_inactive={show_inactive}&error=Failed+to+delete+job+posting.")
    if not deleted:
        return _not_found(request, "Job not found", session)
    logger.info("Deleted job job_id=%s by user_id=%s", job_id, session.user_id)
    return _redirect(f"/jobs?show_inactive={show_inactive}")


# job detail & apply


def _visible_job(repo: Repository, job_id: int, session: SessionContext | None):
    job = repo.get_job(job_id)
    if not job or (not job.is_active and not (session and session.is_manager)):
        return None
    return job


@router.get("/jobs/{job_id}/public", response_class=HTMLResponse)
def public_job(
    job_id: int,
    request: Request,
    session: SessionContext | None = Depends(get_optional_session),
    db: Session = Depends(get_db),
) -> HTMLResponse:
    job = _visible_job(Repository(db), job_id, session)
    if not job:
        return _not_found(request, "Job not found", session)
    return _render(request, "job_public.html", {"job": job}, session=session)


def _render_job_detail(
    request: Request,
    session: SessionContext,
    repo: Repository,
    job_id: int,
    *,
    answers: Mapping[int, str] | None = None,
    error: str | None = None,
    error_field: str | None = None,
    status_code: int = 200,
) -> HTMLResponse:
    job = _visible_job(repo, job_id, session)
    if not job:
        return _not_found(request, "Job not found", session)
    if session.is_manager:
        return _render(request, "manager_blocked.html", {"job": job}, session=session, status_code=403)
    return _render(
        request,
        "job_detail.html",
        {
            "job": job,
            "questions": repo.get_job_questions(job_id),
            "answers": answers or {},
            "has_applied": repo.find_application(session.user_id, job_id) is not None,
            "error": error,
            "error_field": error_field,
        },
        session=session,
        status_code=status_code,
    )


@router.get("/jobs/{job_id}", response_class=HTMLResponse)
def job_detail(
    job_id: int,
    request: Request,
    session: SessionContext = Depends(require_page_session),
    db: Session = Depends(get_db),
) -> HTMLResponse:
    return _render_job_detail(request, session, Repository(db), job_id)


@router.get("/jobs/{job_id}/apply", response_class=HTMLResponse)
def apply_page(
    job_id: int,
    request: Request,
    session: SessionContext = Depends(require_page_session),
    db: Session = Depends(get_db),
) -> HTMLResponse:
    return _render_job_detail(request, session, Repository(db), job_id)


@router.post("/jobs/{job_id}/apply")
def apply(
    job_id: int,
    request: Request,
    form: dict[str, Any] = Depends(posted_form),
    session: SessionContext = Depends(require_page_session),
    db: Session = Depends(get_db),
):
    repo = Repository(db)
    answers = answers_from_form(repo.get_job_questions(job_id), form)
    try:
        submit_application(repo, session, job_id, answers)
    except PermissionDenied:
        return _render_job_detail(request, session, repo, job_id)
    except NotFoundError:
        return _not_found(request, "Job not found", session)
    except (ValidationFailed, DuplicateError) as exc:
        field = exc.field if isinstance(exc, ValidationFailed) else None
        code = 400 if isinstance(exc, ValidationFailed) else 409
        return _render_job_detail(
            request, session, repo, job_id, answers=answers, error=str(exc), error_field=field, status_code=code
        )
    except SQLAlchemyError:
        logger.exception("Application submit failed job_id=%s candidate_id=%s", job_id, session.user_id)
        db.rollback()
        return _render_job_detail(
            request,
            session,
            repo,
            job_id,
            answers=answers,
            error="Failed to submit application. Please try again.",
            status_code=500,
        )
    return _redirect("/applications?submitted=1")


# manager dashboards


@router.get("/manager/candidates", response_class=HTMLResponse)
def candidates_dashboard(
    request: Request,
    search: str = "",
    status: str = "all",
    session: SessionContext = Depends(require_page_manager),
    db: Session = Depends(get_db),
) -> HTMLResponse:
    rows = dashboards.filter_candidates(dashboards.candidate_rows(Repository(db)), search=search, status=status)
    return _render(
        request,
        "manager_candidates.html",
        {"rows": rows, "search": search, "status": status, "status_filters": CANDIDATE_STATUS_FILTERS},
        session=session,
    )


@router.get("/manager/candidates/{candidate_id}", response_class=HTMLResponse)
def candidate_detail(
    candidate_id: int,
    request: Request,
    session: SessionContext = Depends(require_page_manager),
    db: Session = Depends(get_db),
) -> HTMLResponse:
    repo = Repository(db)
    try:
        detail = dashboards.candidate_detail(repo, candidate_id, DocumentService(repo))
    except NotFoundError:
        return _not_found(request, "Candidate not found", session)
    return _render(
        request,
        "manager_candidate_detail.html",
        {
            "detail": detail,
            "background_questions": background.BACKGROUND_QUESTIONS,
            "authorization_types": authorizations.AUTHORIZATION_TYPES,
        },
        session=session,
    )


@router.get("/manager/applications", response_class=HTMLResponse)
def applications_dashboard(
    request: Request,
    search: str = "",
    status: str = "all",
    job: str = "all",
    session: SessionContext = Depends(require_page_manager),
    db: Session = Depends(get_db),
) -> HTMLResponse:
    all_rows = dashboards.application_rows(Repository(db))
    rows = dashboards.filter_applications(all_rows, search=search, status=status, job_id=job)
    return _render(
        request,
        "manager_applications.html",
        {
            "rows": rows,
            "search": search,
            "status": status,
            "job": job,
            "status_filters": APPLICATION_STATUS_FILTERS,
            "job_choices": dashboards.job_choices(all_rows),
        },
        session=session,
    )


def _render_review(
    request: Request,
    session: SessionContext,
    repo: Repository,
    application_id: int,
    *,
    message: str | None = None,
    error: str | None = None,
    status_code: int = 200,
) -> HTMLResponse:
    application = repo.get_application(application_id)
    if not application:
        return _not_found(request, "Application not found", session)
    answers = {row.question_id: row.answer for row in repo.get_application_answers(application_id)}
    return _render(
        request,
        "manager_application_review.html",
        {
            "application": application,
            "job": repo.get_job(application.job_id),
            "candidate": repo.get_candidate(application.candidate_id),
            "questions": repo.get_job_questions(application.job_id),
            "answers": answers,
            "actions": review.available_actions(application.status),
            "message": message,
            "error": error,
        },
        session=session,
        status_code=status_code,
    )


@router.get("/manager/applications/{application_id}", response_class=HTMLResponse)
def application_review_page(
    application_id: int,
    request: Request,
    updated: int = 0,
    session: SessionContext = Depends(require_page_manager),
    db: Session = Depends(get_db),
) -> HTMLResponse:
    message = "Application status updated successfully!" if updated else None
    return _render_review(request, session, Repository(db), application_id, message=message)


@router.post("/manager/applications/{application_id}/review")
def review_application(
    application_id: int,
    request: Request,
    status: str = Form(...),
    notes: str = Form(""),
    session: SessionContext = Depends(require_page_manager),
    db: Session = Depends(get_db),
):
    repo = Repository(db)
    try:
        review.review_application(repo, session, application_id, target=status, notes=notes)
    except NotFoundError:
        return _not_found(request, "Application not found", session)
    except ValidationFailed as exc:
        return _render_review(request, session, repo, application_id, error=exc.message, status_code=400)
    except SQLAlchemyError:
        logger.exception("Application review failed application_id=%s", application_id)
        db.rollback()
        return _render_review(
            request,
            session,
            repo,
            application_id,
            error="Failed to update application status. Please try again.",
            status_code=500,
        )
    return _redirect(f"/manager/applications/{application_id}?updated=1")
