from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from driverhire.db.models import (
    AddressHistory,
    Application,
    ApplicationAnswer,
    Authorization,
    BackgroundQuestion,
    Document,
    EmergencyContact,
    EmploymentHistory,
    Job,
    JobQuestion,
    Profile,
    User,
    UserRole,
    serialize_options,
)

PROFILE_FIELDS = frozenset(
    {
        "full_name",
        "email",
        "phone",
        "ssn",
        "date_of_birth",
        "present_address_street",
        "present_address_city",
        "present_address_state",
        "present_address_zip",
        "cdl_number",
        "cdl_state",
        "cdl_expiration_date",
        "driving_experience_years",
        "driving_experience_miles",
        "driving_experience_equipment",
    }
)
JOB_FIELDS = frozenset({"title", "description", "requirements", "is_active"})
JOB_QUESTION_FIELDS = frozenset({"question", "question_type", "required", "order", "options"})
EMPLOYMENT_FIELDS = frozenset(
    {
        "company_name",
        "company_address_street",
        "company_address_city",
        "company_address_state",
        "company_address_zip",
        "supervisor_name",
        "supervisor_phone",
        "supervisor_email",
        "start_date",
        "end_date",
        "reason_for_leaving",
        "cdl_required",
        "is_cdl_employment",
    }
)
ADDRESS_FIELDS = frozenset({"street", "city", "state", "zip", "start_date", "end_date"})
CONTACT_FIELDS = frozenset(
    {
        "full_name",
        "address_street",
        "address_city",
        "address_state",
        "address_zip",
        "relationship",
        "phone",
        "order",
    }
)


def _pick(values: dict[str, Any], allowed: frozenset[str]) -> dict[str, Any]:
    return {key: value for key, value in values.items() if key in allowed}


class Repository:
    def __init__(self, session: Session):
        self.session = session

    def _save(self, obj: Any) -> Any:
        self.session.add(obj)
        self.session.commit()
        self.session.refresh(obj)
        return obj

    # users & roles

    def create_user(self, *, email: str, password_hash: str, full_name: str = "") -> User:
        return self._save(User(email=email.strip().lower(), password_hash=password_hash, full_name=full_name))

    def get_user(self, user_id: int) -> User | None:
        return self.session.get(User, user_id)

    def get_user_by_email(self, email: str) -> User | None:
        return self.session.scalar(select(User).where(User.email == email.strip().lower()))

    def get_user_roles(self, user_id: int) -> list[UserRole]:
        statement = select(UserRole).where(UserRole.user_id == user_id).order_by(UserRole.id.asc())
        return list(self.session.scalars(statement).all())

    def get_user_role(self, user_id: int) -> UserRole | None:
        roles = self.get_user_roles(user_id)
        return roles[0] if roles else None

    def add_user_role(self, user_id: int, role: str) -> UserRole:
        existing = self.session.scalar(
            select(UserRole).where(UserRole.user_id == user_id, UserRole.role == role)
        )
        if existing:
            return existing
        return self._save(UserRole(user_id=user_id, role=role))

    # profiles

    def create_profile(self, user_id: int, *, email: str, full_name: str | None = None) -> Profile:
        return self._save(Profile(user_id=user_id, email=email, full_name=full_name or None))

    def get_profile(self, user_id: int) -> Profile | None:
        return self.session.scalar(select(Profile).where(Profile.user_id == user_id))

    def update_profile(self, user_id: int, updates: dict[str, Any]) -> Profile:
        profile = self.get_profile(user_id)
        if not profile:
            raise ValueError(f"profile for user {user_id} not found")
        for key, value in _pick(updates, PROFILE_FIELDS).items():
            setattr(profile, key, value)
        self.session.commit()
        self.session.refresh(profile)
        return profile

    def mark_profile_completed(self, user_id: int) -> Profile:
        profile = self.get_profile(user_id)
        if not profile:
            raise ValueError(f"profile for user {user_id} not found")
        profile.profile_completed_at = datetime.now(UTC)
        self.session.commit()
        self.session.refresh(profile)
        return profile

    def get_all_candidates(self) -> list[Profile]:
        statement = select(Profile).order_by(Profile.created_at.desc(), Profile.id.desc())
        return list(self.session.scalars(statement).all())

    def get_candidate(self, user_id: int) -> Profile | None:
        return self.get_profile(user_id)

    # jobs

    def get_jobs(self, include_inactive: bool = False) -> list[Job]:
        statement = select(Job).order_by(Job.created_at.desc(), Job.id.desc())
        if not include_inactive:
            statement = statement.where(Job.is_active.is_(True))
        return list(self.session.scalars(statement).all())

    def get_job(self, job_id: int) -> Job | None:
        return self.session.get(Job, job_id)

    def create_job(self, user_id: int, values: dict[str, Any]) -> Job:
        return self._save(Job(created_by=user_id, **_pick(values, JOB_FIELDS)))

    def update_job(self, job_id: int, updates: dict[str, Any]) -> Job:
        job = self.session.get(Job, job_id)
        if not job:
            raise ValueError(f"job {job_id} not found")
        for key, value in _pick(updates, JOB_FIELDS).items():
            setattr(job, key, value)
        self.session.commit()
        self.session.refresh(job)
        return job

    def delete_job(self, job_id: int) -> bool:
        job = self.session.get(Job, job_id)
        if not job:
            return False
        self.session.delete(job)
        self.session.commit()
        return True

    def get_job_questions(self, job_id: int) -> list[JobQuestion]:
        statement = (
            select(JobQuestion)
            .where(JobQuestion.job_id == job_id)
            .order_by(JobQuestion.order.asc(), JobQuestion.id.asc())
        )
        return list(self.session.scalars(statement).all())

    def get_job_question(self, question_id: int) -> JobQuestion | None:
        return self.session.get(JobQuestion, question_id)

    def create_job_question(self, job_id: int, values: dict[str, Any]) -> JobQuestion:
        data = _pick(values, JOB_QUESTION_FIELDS)
        data["options"] = serialize_options(data.get("options"))
        return self._save(JobQuestion(job_id=job_id, **data))

    def update_job_question(self, question_id: int, updates: dict[str, Any]) -> JobQuestion:
        question = self.session.get(JobQuestion, question_id)
        if not question:
            raise ValueError(f"job question {question_id} not found")
        data = _pick(updates, JOB_QUESTION_FIELDS)
        if "options" in data:
            data["options"] = serialize_options(data["options"])
        for key, value in data.items():
            setattr(question, key, value)
        self.session.commit()
        self.session.refresh(question)
        return question

    def delete_job_question(self, question_id: int) -> bool:
        result = self.session.execute(delete(JobQuestion).where(JobQuestion.id == question_id))
        self.session.commit()
        return bool(result.rowcount)

    # applications

    def get_applications(self, candidate_id: int) -> list[Application]:
        statement = (
            select(Application)
            .where(Application.candidate_id == candidate_id)
            .order_by(Application.submitted_at.desc(), Application.id.desc())
        )
        return list(self.session.scalars(statement).all())

    def get_all_applications(self) -> list[Application]:
        statement = select(Application).order_by(Application.submitted_at.desc(), Application.id.desc())
        return list(self.session.scalars(statement).all())

    def get_application(self, application_id: int) -> Application | None:
        return self.session.get(Application, application_id)

    def find_application(self, candidate_id: int, job_id: int) -> Application | None:
        return self.session.scalar(
            select(Application).where(
                Application.candidate_id == candidate_id,
                Application.job_id == job_id,
            )
        )

    def create_application(self, candidate_id: int, job_id: int) -> Application:
        return self._save(Application(candidate_id=candidate_id, job_id=job_id, status="submitted"))

    def update_application_review(
        self,
        application_id: int,
        *,
        status: str,
        reviewed_by: int,
        notes: str | None,
    ) -> Application:
        application = self.session.get(Application, application_id)
        if not application:
            raise ValueError(f"application {application_id} not found")
        application.status = status
        application.reviewed_at = datetime.now(UTC)
        application.reviewed_by = reviewed_by
        application.notes = notes
        self.session.commit()
        self.session.refresh(application)
        return application

    def get_application_answers(self, application_id: int) -> list[ApplicationAnswer]:
        statement = select(ApplicationAnswer).where(ApplicationAnswer.application_id == application_id)
        return list(self.session.scalars(statement).all())

    def upsert_application_answer(self, application_id: int, question_id: int, answer: str) -> ApplicationAnswer:
        existing = self.session.scalar(
            select(ApplicationAnswer).where(
                ApplicationAnswer.application_id == application_id,
                ApplicationAnswer.question_id == question_id,
            )
        )
        if existing:
            existing.answer = answer
            obj = existing
        else:
            obj = ApplicationAnswer(application_id=application_id, question_id=question_id, answer=answer)
            self.session.add(obj)
        self.session.commit()
        self.session.refresh(obj)
        return obj

    # employment history

    def get_employment_history(self, user_id: int) -> list[EmploymentHistory]:
        statement = (
            select(EmploymentHistory)
            .where(EmploymentHistory.user_id == user_id)
            .order_by(EmploymentHistory.start_date.desc(), EmploymentHistory.id.desc())
        )
        return list(self.session.scalars(statement).all())

    def get_cdl_employment_history(self, user_id: int) -> list[EmploymentHistory]:
        statement = (
            select(EmploymentHistory)
            .where(EmploymentHistory.user_id == user_id, EmploymentHistory.is_cdl_employment.is_(True))
            .order_by(EmploymentHistory.start_date.desc(), EmploymentHistory.id.desc())
        )
        return list(self.session.scalars(statement).all())

    def get_employment(self, employment_id: int) -> EmploymentHistory | None:
        return self.session.get(EmploymentHistory, employment_id)

    def add_employment_history(self, user_id: int, values: dict[str, Any]) -> EmploymentHistory:
        return self._save(EmploymentHistory(user_id=user_id, **_pick(values, EMPLOYMENT_FIELDS)))

    def update_employment_history(self, employment_id: int, updates: dict[str, Any]) -> EmploymentHistory:
        row = self.session.get(EmploymentHistory, employment_id)
        if not row:
            raise ValueError(f"employment record {employment_id} not found")
        for key, value in _pick(updates, EMPLOYMENT_FIELDS).items():
            setattr(row, key, value)
        self.session.commit()
        self.session.refresh(row)
        return row

    def delete_employment_history(self, employment_id: int) -> bool:
        result = self.session.execute(delete(EmploymentHistory).where(EmploymentHistory.id == employment_id))
        self.session.commit()
        return bool(result.rowcount)

    # address history

    def get_address_history(self, user_id: int) -> list[AddressHistory]:
        statement = (
            select(AddressHistory)
            .where(AddressHistory.user_id == user_id)
            .order_by(AddressHistory.start_date.desc(), AddressHistory.id.desc())
        )
        return list(self.session.scalars(statement).all())

    def get_address(self, address_id: int) -> AddressHistory | None:
        return self.session.get(AddressHistory, address_id)

    def add_address_history(self, user_id: int, values: dict[str, Any]) -> AddressHistory:
        return self._save(AddressHistory(user_id=user_id, **_pick(values, ADDRESS_FIELDS)))

    def update_address_history(self, address_id: int, updates: dict[str, Any]) -> AddressHistory:
        row = self.session.get(AddressHistory, address_id)
        if not row:
            raise ValueError(f"address record {address_id} not found")
        for key, value in _pick(updates, ADDRESS_FIELDS).items():
            setattr(row, key, value)
        self.session.commit()
        self.session.refresh(row)
        return row

    def delete_address_history(self, address_id: int) -> bool:
        result = self.session.execute(delete(AddressHistory).where(AddressHistory.id == address_id))
        self.session.commit()
        return bool(result.rowcount)

    # background questions

    def get_background_questions(self, user_id: int) -> list[BackgroundQuestion]:
        statement = (
            select(BackgroundQuestion)
            .where(BackgroundQuestion.user_id == user_id)
            .order_by(BackgroundQuestion.question_number.asc())
        )
        return list(self.session.scalars(statement).all())

    def upsert_background_question(
        self,
        user_id: int,
        question_number: int,
        answer: bool,
        explanation: str | None = None,
    ) -> BackgroundQuestion:
        existing = self.session.scalar(
            select(BackgroundQuestion).where(
                BackgroundQuestion.user_id == user_id,
                BackgroundQuestion.question_number == question_number,
            )
        )
        if existing:
            existing.answer = answer
            existing.explanation = explanation
            obj = existing
        else:
            obj = BackgroundQuestion(
                user_id=user_id,
                question_number=question_number,
                answer=answer,
                explanation=explanation,
            )
            self.session.add(obj)
        self.session.commit()
        self.session.refresh(obj)
        return obj

    # emergency contacts

    def get_emergency_contacts(self, user_id: int) -> list[EmergencyContact]:
        statement = (
            select(EmergencyContact)
            .where(EmergencyContact.user_id == user_id)
            .order_by(EmergencyContact.order.asc(), EmergencyContact.id.asc())
        )
        return list(self.session.scalars(statement).all())

    def get_emergency_contact(self, contact_id: int) -> EmergencyContact | None:
        return self.session.get(EmergencyContact, contact_id)

    def add_emergency_contact(self, user_id: int, values: dict[str, Any]) -> EmergencyContact:
        return self._save(EmergencyContact(user_id=user_id, **_pick(values, CONTACT_FIELDS)))

    def update_emergency_contact(self, contact_id: int, updates: dict[str, Any]) -> EmergencyContact:
        row = self.session.get(EmergencyContact, contact_id)
        if not row:
            raise ValueError(f"emergency contact {contact_id} not found")
        for key, value in _pick(updates, CONTACT_FIELDS).items():
            setattr(row, key, value)
        self.session.commit()
        self.session.refresh(row)
        return row

    def delete_emergency_contact(self, contact_id: int) -> bool:
        result = self.session.execute(delete(EmergencyContact).where(EmergencyContact.id == contact_id))
        self.session.commit()
        return bool(result.rowcount)

    # documents

    def get_documents(self, user_id: int) -> list[Document]:
        statement = (
            select(Document)
            .where(Document.user_id == user_id)
            .order_by(Document.uploaded_at.desc(), Document.id.desc())
        )
        return list(self.session.scalars(statement).all())

    def get_document(self, document_id: int) -> Document | None:
        return self.session.get(Document, document_id)

    def create_document(
        self,
        *,
        user_id: int,
        document_type: str,
        file_name: str,
        file_path: str,
        file_size: int | None,
        mime_type: str | None,
    ) -> Document:
        return self._save(
            Document(
                user_id=user_id,
                document_type=document_type,
                file_name=file_name,
                file_path=file_path,
                file_size=file_size,
                mime_type=mime_type,
            )
        )

    def delete_document(self, document_id: int) -> bool:
        result = self.session.execute(delete(Document).where(Document.id == document_id))
        self.session.commit()
        return bool(result.rowcount)

    # authorizations

    def get_authorizations(self, user_id: int) -> list[Authorization]:
        statement = (
            select(Authorization)
            .where(Authorization.user_id == user_id)
            .order_by(Authorization.created_at.asc(), Authorization.id.asc())
        )
        return list(self.session.scalars(statement).all())

    def sign_authorization(
        self,
        user_id: int,
        authorization_type: str,
        *,
        user_agent: str | None = None,
        ip_address: str | None = None,
    ) -> Authorization:
        existing = self.session.scalar(
            select(Authorization).where(
                Authorization.user_id == user_id,
                Authorization.authorization_type == authorization_type,
            )
        )
        if existing and existing.signed:
            return existing

        obj = existing or Authorization(user_id=user_id, authorization_type=authorization_type)
        obj.signed = True
        obj.signed_at = datetime.now(UTC)
        obj.user_agent = user_agent
        obj.ip_address = ip_address
        return self._save(obj)
