from __future__ import annotations

from datetime import date
from typing import Literal

from pydantic import BaseModel, Field, field_validator

ApplicationStatus = Literal[
    "submitted",
    "under_review",
    "approved",
    "rejected",
    "more_info_requested",
]
DocumentType = Literal["resume", "cdl_license", "certification", "other"]
AuthorizationType = Literal[
    "applicant_certification",
    "fmcsa_clearinghouse",
    "hireright_background",
    "psp_authorization",
]
QuestionType = Literal["text", "textarea", "select", "checkbox"]
RoleName = Literal["candidate", "manager"]


class ProfileFormData(BaseModel):
    full_name: str = ""
    email: str = ""
    phone: str = ""
    ssn: str = ""
    date_of_birth: date | None = None

    present_address_street: str = ""
    present_address_city: str = ""
    present_address_state: str = ""
    present_address_zip: str = ""

    cdl_number: str = ""
    cdl_state: str = ""
    cdl_expiration_date: date | None = None

    driving_experience_years: int | None = None
    driving_experience_miles: int | None = None
    driving_experience_equipment: list[str] = Field(default_factory=list)


class EmploymentInput(BaseModel):
    company_name: str
    company_address_street: str | None = None
    company_address_city: str | None = None
    company_address_state: str | None = None
    company_address_zip: str | None = None
    supervisor_name: str | None = None
    supervisor_phone: str | None = None
    supervisor_email: str | None = None
    start_date: date
    end_date: date | None = None
    reason_for_leaving: str | None = None
    cdl_required: bool = False


class AddressHistoryInput(BaseModel):
    street: str
    city: str
    state: str
    zip: str
    start_date: date
    end_date: date | None = None


class EmergencyContactInput(BaseModel):
    full_name: str
    address_street: str | None = None
    address_city: str
    address_state: str
    address_zip: str
    relationship: str
    phone: str


class JobInput(BaseModel):
    title: str
    description: str
    requirements: str | None = None
    is_active: bool = True


class JobQuestionInput(BaseModel):
    question: str
    question_type: QuestionType = "text"
    required: bool = False
    order: int = 0
    options: list[str] | None = None

    @field_validator("options")
    @classmethod
    def strip_options(cls, value: list[str] | None) -> list[str] | None:
        if value is None:
            return None
        return [item.strip() for item in value if item and item.strip()]
