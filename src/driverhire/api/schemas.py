from __future__ import annotations

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field

from driverhire.types import (
    ApplicationStatus,
    AuthorizationType,
    DocumentType,
    JobInput,
    JobQuestionInput,
    QuestionType,
)


class ORMModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)


class SignUpRequest(BaseModel):
    email: str
    password: str
    full_name: str = ""


class SignInRequest(BaseModel):
    email: str
    password: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"


class MeResponse(BaseModel):
    user_id: int
    email: str
    full_name: str
    account: str


class ProfileResponse(ORMModel):
    id: int
    user_id: int
    full_name: str | None
    email: str
    phone: str | None
    ssn: str | None
    date_of_birth: date | None
    present_address_street: str | None
    present_address_city: str | None
    present_address_state: str | None
    present_address_zip: str | None
    cdl_number: str | None
    cdl_state: str | None
    cdl_expiration_date: date | None
    driving_experience_years: int | None
    driving_experience_miles: int | None
    driving_experience_equipment: list[str] | None
    profile_completed_at: datetime | None
    created_at: datetime
    updated_at: datetime


class ProfileUpdateRequest(BaseModel):
    full_name: str | None = None
    email: str | None = None
    phone: str | None = None
    ssn: str | None = None
    date_of_birth: date | None = None
    present_address_street: str | None = None
    present_address_city: str | None = None
    present_address_state: str | None = None
    present_address_zip: str | None = None
    cdl_number: str | None = None
    cdl_state: str | None = None
    cdl_expiration_date: date | None = None
    driving_experience_years: int | None = Field(default=None, ge=0)
    driving_experience_miles: int | None = Field(default=None, ge=0)
    driving_experience_equipment: list[str] | None = None


class EmploymentResponse(ORMModel):
    id: int
    user_id: int
    company_name: str
    company_address_street: str | None
    company_address_city: str | None
    company_address_state: str | None
    company_address_zip: str | None
    supervisor_name: str | None
    supervisor_phone: str | None
    supervisor_email: str | None
    start_date: date
    end_date: date | None
    reason_for_leaving: str | None
    cdl_required: bool
    is_cdl_employment: bool


class AddressHistoryResponse(ORMModel):
    id: int
    user_id: int
    street: str
    city: str
    state: str
    zip: str
    start_date: date
    end_date: date | None


class BackgroundAnswerRequest(BaseModel):
    question_number: int = Field(ge=1, le=9)
    answer: bool
    explanation: str | None = None


class BackgroundQuestionResponse(ORMModel):
    id: int
    question_number: int
    question: str = ""
    answer: bool
    explanation: str | None


class BackgroundSetResponse(BaseModel):
    complete: bool
    answers: list[BackgroundQuestionResponse]


class EmergencyContactResponse(ORMModel):
    id: int
    user_id: int
    full_name: str
    address_street: str | None
    address_city: str
    address_state: str
    address_zip: str
    relationship: str
    phone: str
    order: int


class DocumentResponse(ORMModel):
    id: int
    user_id: int
    document_type: DocumentType
    file_name: str
    file_path: str
    file_size: int | None
    mime_type: str | None
    uploaded_at: datetime
    url: str = ""


class AuthorizationResponse(ORMModel):
    id: int
    authorization_type: AuthorizationType
    signed: bool
    signed_at: datetime | None
    user_agent: str | None


class AuthorizationSetResponse(BaseModel):
    all_signed: bool
    authorizations: list[AuthorizationResponse]


class JobQuestionResponse(ORMModel):
    id: int
    job_id: int
    question: str
    question_type: QuestionType
    required: bool
    order: int
    options: list[str] | None = None


class JobResponse(ORMModel):
    id: int
    title: str
    description: str
    requirements: str | None
    created_by: int
    is_active: bool
    created_at: datetime
    updated_at: datetime


class JobDetailResponse(JobResponse):
    questions: list[JobQuestionResponse] = Field(default_factory=list)


class JobCreateRequest(JobInput):
    questions: list[JobQuestionInput] = Field(default_factory=list)


class JobUpdateRequest(BaseModel):
    title: str | None = None
    description: str | None = None
    requirements: str | None = None
    is_active: bool | None = None


class JobQuestionUpdateRequest(BaseModel):
    question: str | None = None
    question_type: QuestionType | None = None
    required: bool | None = None
    order: int | None = None
    options: list[str] | None = None


class ApplicationCreateRequest(BaseModel):
    job_id: int
    answers: dict[int, str] = Field(default_factory=dict)


class ApplicationResponse(ORMModel):
    id: int
    job_id: int
    candidate_id: int
    status: ApplicationStatus
    submitted_at: datetime
    reviewed_at: datetime | None
    reviewed_by: int | None
    notes: str | None


class ApplicationAnswerResponse(ORMModel):
    id: int
    application_id: int
    question_id: int
    answer: str


class ApplicationDetailResponse(ApplicationResponse):
    answers: list[ApplicationAnswerResponse] = Field(default_factory=list)


class ReviewRequest(BaseModel):
    status: ApplicationStatus
    notes: str | None = None


class CandidateSummaryResponse(BaseModel):
    user_id: int
    full_name: str | None
    email: str
    phone: str | None
    status: str
    profile_completed_at: datetime | None


class ApplicationSummaryResponse(BaseModel):
    application: ApplicationResponse
    job_title: str | None
    candidate_name: str | None
    candidate_email: str | None
