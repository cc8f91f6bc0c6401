from __future__ import annotations

from fastapi import APIRouter, Depends, File, Form, HTTPException, Request, Response, UploadFile, status
from fastapi.responses import FileResponse
from sqlalchemy.orm import Session

from driverhire.api.deps import get_db, require_manager, require_session
from driverhire.api.schemas import (
    AddressHistoryResponse,
    ApplicationAnswerResponse,
    ApplicationCreateRequest,
    ApplicationDetailResponse,
    ApplicationResponse,
    ApplicationSummaryResponse,
    AuthorizationResponse,
    AuthorizationSetResponse,
    BackgroundAnswerRequest,
    BackgroundQuestionResponse,
    BackgroundSetResponse,
    CandidateSummaryResponse,
    DocumentResponse,
    EmergencyContactResponse,
    EmploymentResponse,
    JobCreateRequest,
    JobDetailResponse,
    JobQuestionResponse,
    JobQuestionUpdateRequest,
    JobResponse,
    JobUpdateRequest,
    MeResponse,
    ProfileResponse,
    ProfileUpdateRequest,
    ReviewRequest,
    SignInRequest,
    SignUpRequest,
    TokenResponse,
)
from driverhire.core import addresses, authorizations, background, contacts, dashboards, employment, review
from driverhire.core.applications import submit_application
from driverhire.core.auth import authenticate, register_user
from driverhire.core.documents import DocumentService
from driverhire.core.security import create_access_token
from driverhire.core.session import SessionContext
from driverhire.db.models import Application, Document, JobQuestion
from driverhire.db.repositories import Repository
from driverhire.errors import DuplicateError, NotFoundError, PermissionDenied, StorageError
from driverhire.types import (
    AddressHistoryInput,
    EmergencyContactInput,
    EmploymentInput,
    JobInput,
    JobQuestionInput,
)

router = APIRouter(prefix="/api", tags=["api"])


def _http_error(exc: Exception) -> HTTPException:
    if isinstance(exc, NotFoundError):
        return HTTPException(status_code=404, detail=str(exc))
    if isinstance(exc, PermissionDenied):
        return HTTPException(status_code=403, detail=str(exc))
    if isinstance(exc, DuplicateError):
        return HTTPException(status_code=409, detail=str(exc))
    if isinstance(exc, StorageError):
        return HTTPException(status_code=502, detail=str(exc))
    return HTTPException(status_code=400, detail=str(exc))


def _question_response(row: JobQuestion) -> JobQuestionResponse:
    return JobQuestionResponse(
        id=row.id,
        job_id=row.job_id,
        question=row.question,
        question_type=row.question_type,
        required=row.required,
        order=row.order,
        options=row.option_list or None,
    )


def _document_response(row: Document) -> DocumentResponse:
    return DocumentResponse.model_validate(row).model_copy(update={"url": f"/api/documents/{row.id}/file"})


def _application_detail(repo: Repository, application: Application) -> ApplicationDetailResponse:
    answers = [ApplicationAnswerResponse.model_validate(row) for row in repo.get_application_answers(application.id)]
    return ApplicationDetailResponse.model_validate(application).model_copy(update={"answers": answers})


def _background_response(repo: Repository, user_id: int) -> BackgroundSetResponse:
    rows = repo.get_background_questions(user_id)
    return BackgroundSetResponse(
        complete=background.is_complete(rows),
        answers=[
            BackgroundQuestionResponse(
                id=row.id,
                question_number=row.question_number,
                question=background.BACKGROUND_QUESTIONS[row.question_number - 1],
                answer=row.answer,
                explanation=row.explanation,
            )
            for row in rows
        ],
    )


# auth


@router.post("/auth/signup", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
def sign_up(payload: SignUpRequest, db: Session = Depends(get_db)) -> TokenResponse:
    try:
        user = register_user(Repository(db), email=payload.email, password=payload.password, full_name=payload.full_name)
    except ValueError as exc:
        raise _http_error(exc) from exc
    return TokenResponse(access_token=create_access_token(user.id))


@router.post("/auth/login", response_model=TokenResponse)
def sign_in(payload: SignInRequest, db: Session = Depends(get_db)) -> TokenResponse:
    user = authenticate(Repository(db), email=payload.email, password=payload.password)
    if not user:
        raise HTTPException(status_code=401, detail="Invalid login credentials")
    return TokenResponse(access_token=create_access_token(user.id))


@router.get("/me", response_model=MeResponse)
def me(session: SessionContext = Depends(require_session)) -> MeResponse:
    return MeResponse(
        user_id=session.user_id,
        email=session.email,
        full_name=session.full_name,
        account=session.account.kind,
    )


# candidate profile


@router.get("/profile", response_model=ProfileResponse)
def get_profile(session: SessionContext = Depends(require_session), db: Session = Depends(get_db)) -> ProfileResponse:
    profile = Repository(db).get_profile(session.user_id)
    if not profile:
        raise HTTPException(status_code=404, detail="Profile not found")
    return ProfileResponse.model_validate(profile)


@router.patch("/profile", response_model=ProfileResponse)
def update_profile(
    payload: ProfileUpdateRequest,
    session: SessionContext = Depends(require_session),
    db: Session = Depends(get_db),
) -> ProfileResponse:
    try:
        profile = Repository(db).update_profile(session.user_id, payload.model_dump(exclude_unset=True))
    except ValueError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return ProfileResponse.model_validate(profile)


@router.post("/profile/complete", response_model=ProfileResponse)
def complete_profile(session: SessionContext = Depends(require_session), db: Session = Depends(get_db)) -> ProfileResponse:
    repo = Repository(db)
    try:
        authorizations.complete_profile(repo, session.user_id)
    except ValueError as exc:
        raise _http_error(exc) from exc
    return ProfileResponse.model_validate(repo.get_profile(session.user_id))


# employment & address history


@router.get("/employment", response_model=list[EmploymentResponse])
def list_employment(
    cdl_only: bool = False,
    session: SessionContext = Depends(require_session),
    db: Session = Depends(get_db),
) -> list[EmploymentResponse]:
    repo = Repository(db)
    rows = repo.get_cdl_employment_history(session.user_id) if cdl_only else repo.get_employment_history(session.user_id)
    return [EmploymentResponse.model_validate(row) for row in rows]


@router.post("/employment", response_model=EmploymentResponse, status_code=status.HTTP_201_CREATED)
def add_employment(
    payload: EmploymentInput,
    is_cdl: bool = False,
    session: SessionContext = Depends(require_session),
    db: Session = Depends(get_db),
) -> EmploymentResponse:
    try:
        row = employment.add_employment(Repository(db), session.user_id, payload, is_cdl=is_cdl)
    except ValueError as exc:
        raise _http_error(exc) from exc
    return EmploymentResponse.model_validate(row)


@router.put("/employment/{employment_id}", response_model=EmploymentResponse)
def update_employment(
    employment_id: int,
    payload: EmploymentInput,
    session: SessionContext = Depends(require_session),
    db: Session = Depends(get_db),
) -> EmploymentResponse:
    try:
        row = employment.update_employment(Repository(db), session.user_id, employment_id, payload)
    except ValueError as exc:
        raise _http_error(exc) from exc
    return EmploymentResponse.model_validate(row)


@router.delete("/employment/{employment_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_employment(
    employment_id: int,
    session: SessionContext = Depends(require_session),
    db: Session = Depends(get_db),
) -> Response:
    try:
        employment.delete_employment(Repository(db), session.user_id, employment_id)
    except ValueError as exc:
        raise _http_error(exc) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/address-history", response_model=list[AddressHistoryResponse])
def list_addresses(
    session: SessionContext = Depends(require_session), db: Session = Depends(get_db)
) -> list[AddressHistoryResponse]:
    return [AddressHistoryResponse.model_validate(row) for row in Repository(db).get_address_history(session.user_id)]


@router.post("/address-history", response_model=AddressHistoryResponse, status_code=status.HTTP_201_CREATED)
def add_address(
    payload: AddressHistoryInput,
    session: SessionContext = Depends(require_session),
    db: Session = Depends(get_db),
) -> AddressHistoryResponse:
    try:
        row = addresses.add_address(Repository(db), session.user_id, payload)
    except ValueError as exc:
        raise _http_error(exc) from exc
    return AddressHistoryResponse.model_validate(row)


@router.put("/address-history/{address_id}", response_model=AddressHistoryResponse)
def update_address(
    address_id: int,
    payload: AddressHistoryInput,
    session: SessionContext = Depends(require_session),
    db: Session = Depends(get_db),
) -> AddressHistoryResponse:
    try:
        row = addresses.update_address(Repository(db), session.user_id, address_id, payload)
    except ValueError as exc:
        raise _http_error(exc) from exc
    return AddressHistoryResponse.model_validate(row)


@router.delete("/address-history/{address_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_address(
    address_id: int,
    session: SessionContext = Depends(require_session),
    db: Session = Depends(get_db),
) -> Response:
    try:
        addresses.delete_address(Repository(db), session.user_id, address_id)
    except ValueError as exc:
        raise _http_error(exc) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# background questions & emergency contacts


@router.get("/background-questions", response_model=BackgroundSetResponse)
def get_background(
    session: SessionContext = Depends(require_session), db: Session = Depends(get_db)
) -> BackgroundSetResponse:
    return _background_response(Repository(db), session.user_id)


@router.put("/background-questions", response_model=BackgroundSetResponse)
def save_background(
    payload: list[BackgroundAnswerRequest],
    session: SessionContext = Depends(require_session),
    db: Session = Depends(get_db),
) -> BackgroundSetResponse:
    repo = Repository(db)
    answers = [background.BackgroundAnswer(item.question_number, item.answer, item.explanation) for item in payload]
    try:
        background.save_answers(repo, session.user_id, answers)
    except ValueError as exc:
        raise _http_error(exc) from exc
    return _background_response(repo, session.user_id)


@router.get("/emergency-contacts", response_model=list[EmergencyContactResponse])
def list_contacts(
    session: SessionContext = Depends(require_session), db: Session = Depends(get_db)
) -> list[EmergencyContactResponse]:
    rows = Repository(db).get_emergency_contacts(session.user_id)
    return [EmergencyContactResponse.model_validate(row) for row in rows]


@router.post("/emergency-contacts", response_model=EmergencyContactResponse, status_code=status.HTTP_201_CREATED)
def add_contact(
    payload: EmergencyContactInput,
    session: SessionContext = Depends(require_session),
    db: Session = Depends(get_db),
) -> EmergencyContactResponse:
    try:
        row = contacts.add_contact(Repository(db), session.user_id, payload)
    except ValueError as exc:
        raise _http_error(exc) from exc
    return EmergencyContactResponse.model_validate(row)


@router.put("/emergency-contacts/{contact_id}", response_model=EmergencyContactResponse)
def update_contact(
    contact_id: int,
    payload: EmergencyContactInput,
    session: SessionContext = Depends(require_session),
    db: Session = Depends(get_db),
) -> EmergencyContactResponse:
    try:
        row = contacts.update_contact(Repository(db), session.user_id, contact_id, payload)
    except ValueError as exc:
        raise _http_error(exc) from exc
    return EmergencyContactResponse.model_validate(row)


@router.delete("/emergency-contacts/{contact_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_contact(
    contact_id: int,
    session: SessionContext = Depends(require_session),
    db: Session = Depends(get_db),
) -> Response:
    try:
        contacts.delete_contact(Repository(db), session.user_id, contact_id)
    except ValueError as exc:
        raise _http_error(exc) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# documents & authorizations


@router.get("/documents", response_model=list[DocumentResponse])
def list_documents(
    session: SessionContext = Depends(require_session), db: Session = Depends(get_db)
) -> list[DocumentResponse]:
    repo = Repository(db)
    return [_document_response(row) for row in repo.get_documents(session.user_id)]


@router.post("/documents", response_model=DocumentResponse, status_code=status.HTTP_201_CREATED)
def upload_document(
    file: UploadFile = File(...),
    document_type: str = Form(...),
    session: SessionContext = Depends(require_session),
    db: Session = Depends(get_db),
) -> DocumentResponse:
    service = DocumentService(Repository(db))
    try:
        row = service.upload(
            session.user_id,
            file_name=file.filename or "upload",
            content=file.file.read(),
            mime_type=file.content_type,
            document_type=document_type,
        )
    except (ValueError, StorageError) as exc:
        raise _http_error(exc) from exc
    return _document_response(row)


@router.get("/documents/{document_id}/file")
def download_document(
    document_id: int,
    session: SessionContext = Depends(require_session),
    db: Session = Depends(get_db),
) -> FileResponse:
    try:
        document, path = DocumentService(Repository(db)).open_for(document_id, session)
    except (NotFoundError, StorageError) as exc:
        raise HTTPException(status_code=404, detail=f"document {document_id} not found") from exc
    return FileResponse(path, media_type=document.mime_type, filename=document.file_name)


@router.delete("/documents/{document_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_document(
    document_id: int,
    session: SessionContext = Depends(require_session),
    db: Session = Depends(get_db),
) -> Response:
    try:
        DocumentService(Repository(db)).delete(document_id, user_id=session.user_id)
    except ValueError as exc:
        raise _http_error(exc) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/authorizations", response_model=AuthorizationSetResponse)
def list_authorizations(
    session: SessionContext = Depends(require_session), db: Session = Depends(get_db)
) -> AuthorizationSetResponse:
    rows = Repository(db).get_authorizations(session.user_id)
    return AuthorizationSetResponse(
        all_signed=authorizations.all_signed(rows),
        authorizations=[AuthorizationResponse.model_validate(row) for row in rows],
    )


@router.post("/authorizations/{authorization_type}/sign", response_model=AuthorizationResponse)
def sign_authorization(
    authorization_type: str,
    request: Request,
    session: SessionContext = Depends(require_session),
    db: Session = Depends(get_db),
) -> AuthorizationResponse:
    try:
        row = authorizations.sign(
            Repository(db),
            session.user_id,
            authorization_type,
            user_agent=request.headers.get("user-agent"),
            ip_address=request.client.host if request.client else None,
        )
    except ValueError as exc:
        raise _http_error(exc) from exc
    return AuthorizationResponse.model_validate(row)


# jobs & applications


@router.get("/jobs", response_model=list[JobResponse])
def list_jobs(
    include_inactive: bool = False,
    session: SessionContext = Depends(require_session),
    db: Session = Depends(get_db),
) -> list[JobResponse]:
    rows = Repository(db).get_jobs(include_inactive=include_inactive and session.is_manager)
    return [JobResponse.model_validate(row) for row in rows]


@router.get("/jobs/{job_id}", response_model=JobDetailResponse)
def get_job(
    job_id: int,
    session: SessionContext = Depends(require_session),
    db: Session = Depends(get_db),
) -> JobDetailResponse:
    repo = Repository(db)
    job = repo.get_job(job_id)
    if not job or (not job.is_active and not session.is_manager):
        raise HTTPException(status_code=404, detail="Job not found")
    detail = JobDetailResponse.model_validate(job)
    detail.questions = [_question_response(row) for row in repo.get_job_questions(job_id)]
    return detail


@router.get("/applications", response_model=list[ApplicationDetailResponse])
def list_applications(
    session: SessionContext = Depends(require_session), db: Session = Depends(get_db)
) -> list[ApplicationDetailResponse]:
    repo = Repository(db)
    return [_application_detail(repo, row) for row in repo.get_applications(session.user_id)]


@router.post("/applications", response_model=ApplicationDetailResponse, status_code=status.HTTP_201_CREATED)
def create_application(
    payload: ApplicationCreateRequest,
    session: SessionContext = Depends(require_session),
    db: Session = Depends(get_db),
) -> ApplicationDetailResponse:
    repo = Repository(db)
    try:
        application = submit_application(repo, session, payload.job_id, payload.answers)
    except ValueError as exc:
        raise _http_error(exc) from exc
    return _application_detail(repo, application)


# manager


@router.post("/jobs", response_model=JobDetailResponse, status_code=status.HTTP_201_CREATED)
def create_job(
    payload: JobCreateRequest,
    session: SessionContext = Depends(require_manager),
    db: Session = Depends(get_db),
) -> JobDetailResponse:
    repo = Repository(db)
    job = repo.create_job(session.user_id, JobInput.model_validate(payload.model_dump()).model_dump())
    for index, question in enumerate(payload.questions):
        values = question.model_dump()
        values["order"] = index
        repo.create_job_question(job.id, values)
    detail = JobDetailResponse.model_validate(job)
    detail.questions = [_question_response(row) for row in repo.get_job_questions(job.id)]
    return detail


@router.patch("/jobs/{job_id}", response_model=JobResponse)
def update_job(
    job_id: int,
    payload: JobUpdateRequest,
    _: SessionContext = Depends(require_manager),
    db: Session = Depends(get_db),
) -> JobResponse:
    try:
        job = Repository(db).update_job(job_id, payload.model_dump(exclude_unset=True))
    except ValueError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return JobResponse.model_validate(job)


@router.delete("/jobs/{job_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_job(
    job_id: int,
    _: SessionContext = Depends(require_manager),
    db: Session = Depends(get_db),
) -> Response:
    if not Repository(db).delete_job(job_id):
        raise HTTPException(status_code=404, detail="Job not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/jobs/{job_id}/questions", response_model=JobQuestionResponse, status_code=status.HTTP_201_CREATED)
def add_job_question(
    job_id: int,
    payload: JobQuestionInput,
    _: SessionContext = Depends(require_manager),
    db: Session = Depends(get_db),
) -> JobQuestionResponse:
    repo = Repository(db)
    if not repo.get_job(job_id):
        raise HTTPException(status_code=404, detail="Job not found")
    return _question_response(repo.create_job_question(job_id, payload.model_dump()))


@router.patch("/jobs/{job_id}/questions/{question_id}", response_model=JobQuestionResponse)
def update_job_question(
    job_id: int,
    question_id: int,
    payload: JobQuestionUpdateRequest,
    _: SessionContext = Depends(require_manager),
    db: Session = Depends(get_db),
) -> JobQuestionResponse:
    repo = Repository(db)
    question = repo.get_job_question(question_id)
    if not question or question.job_id != job_id:
        raise HTTPException(status_code=404, detail="Question not found")
    return _question_response(repo.update_job_question(question_id, payload.model_dump(exclude_unset=True)))


@router.delete("/jobs/{job_id}/questions/{question_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_job_question(
    job_id: int,
    question_id: int,
    _: SessionContext = Depends(require_manager),
    db: Session = Depends(get_db),
) -> Response:
    repo = Repository(db)
    question = repo.get_job_question(question_id)
    if not question or question.job_id != job_id:
        raise HTTPException(status_code=404, detail="Question not found")
    repo.delete_job_question(question_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/manager/candidates", response_model=list[CandidateSummaryResponse])
def list_candidates(
    search: str = "",
    status_filter: str = "all",
    _: SessionContext = Depends(require_manager),
    db: Session = Depends(get_db),
) -> list[CandidateSummaryResponse]:
    rows = dashboards.filter_candidates(dashboards.candidate_rows(Repository(db)), search=search, status=status_filter)
    return [
        CandidateSummaryResponse(
            user_id=row.profile.user_id,
            full_name=row.profile.full_name,
            email=row.profile.email,
            phone=row.profile.phone,
            status=row.status,
            profile_completed_at=row.profile.profile_completed_at,
        )
        for row in rows
    ]


@router.get("/manager/candidates/{candidate_id}", response_model=ProfileResponse)
def get_candidate(
    candidate_id: int,
    _: SessionContext = Depends(require_manager),
    db: Session = Depends(get_db),
) -> ProfileResponse:
    profile = Repository(db).get_candidate(candidate_id)
    if not profile:
        raise HTTPException(status_code=404, detail="Candidate not found")
    return ProfileResponse.model_validate(profile)


@router.get("/manager/applications", response_model=list[ApplicationSummaryResponse])
def list_all_applications(
    search: str = "",
    status_filter: str = "all",
    job_id: str = "all",
    _: SessionContext = Depends(require_manager),
    db: Session = Depends(get_db),
) -> list[ApplicationSummaryResponse]:
    rows = dashboards.filter_applications(
        dashboards.application_rows(Repository(db)),
        search=search,
        status=status_filter,
        job_id=job_id,
    )
    return [
        ApplicationSummaryResponse(
            application=ApplicationResponse.model_validate(row.application),
            job_title=row.job.title if row.job else None,
            candidate_name=row.candidate.full_name if row.candidate else None,
            candidate_email=row.candidate.email if row.candidate else None,
        )
        for row in rows
    ]


@router.get("/manager/applications/{application_id}", response_model=ApplicationDetailResponse)
def get_application(
    application_id: int,
    _: SessionContext = Depends(require_manager),
    db: Session = Depends(get_db),
) -> ApplicationDetailResponse:
    repo = Repository(db)
    application = repo.get_application(application_id)
    if not application:
        raise HTTPException(status_code=404, detail="Application not found")
    return _application_detail(repo, application)


@router.post("/manager/applications/{application_id}/review", response_model=ApplicationResponse)
def review_application(
    application_id: int,
    payload: ReviewRequest,
    session: SessionContext = Depends(require_manager),
    db: Session = Depends(get_db),
) -> ApplicationResponse:
    try:
        application = review.review_application(
            Repository(db), session, application_id, target=payload.status, notes=payload.notes
        )
    except ValueError as exc:
        raise _http_error(exc) from exc
    return ApplicationResponse.model_validate(application)
