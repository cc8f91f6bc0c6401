"""Multi-step profile wizard.

The wizard collects the candidate's personal, address, CDL and driving
experience details over four steps. Only the fields of the step being left
are validated when advancing; values from every step travel with the form
until the last step, which persists everything with a single profile update.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from driverhire.db.models import Profile
from driverhire.db.repositories import Repository
from driverhire.errors import ValidationFailed
from driverhire.types import ProfileFormData

logger = logging.getLogger(__name__)

EQUIPMENT_TYPES: tuple[str, ...] = (
    "Straight Truck",
    "Tractor-Trailer",
    "Flatbed",
    "Refrigerated",
    "Tanker",
    "Double/Triple",
    "Bus",
    "Other",
)

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+$")


@dataclass(frozen=True, slots=True)
class WizardField:
    name: str
    label: str
    input_type: str = "text"
    required: bool = True


@dataclass(frozen=True, slots=True)
class WizardStep:
    number: int
    title: str
    fields: tuple[WizardField, ...]


PROFILE_WIZARD_STEPS: tuple[WizardStep, ...] = (
    WizardStep(
        1,
        "Personal Information",
        (
            WizardField("full_name", "Full Name"),
            WizardField("email", "Email", "email"),
            WizardField("phone", "Phone", "tel"),
            WizardField("ssn", "Social Security Number"),
            WizardField("date_of_birth", "Date of Birth", "date"),
        ),
    ),
    WizardStep(
        2,
        "Present Address",
        (
            WizardField("present_address_street", "Street Address"),
            WizardField("present_address_city", "City"),
            WizardField("present_address_state", "State"),
            WizardField("present_address_zip", "ZIP Code"),
        ),
    ),
    WizardStep(
        3,
        "CDL Information",
        (
            WizardField("cdl_number", "CDL Number"),
            WizardField("cdl_state", "CDL State"),
            WizardField("cdl_expiration_date", "CDL Expiration Date", "date"),
        ),
    ),
    WizardStep(
        4,
        "Driving Experience",
        (
            WizardField("driving_experience_years", "Years of Experience", "number"),
            WizardField("driving_experience_miles", "Total Miles Driven", "number"),
            WizardField("driving_experience_equipment", "Equipment Types", "checkbox", required=False),
        ),
    ),
)
TOTAL_STEPS = len(PROFILE_WIZARD_STEPS)
ALL_FIELDS: tuple[WizardField, ...] = tuple(f for step in PROFILE_WIZARD_STEPS for f in step.fields)


def get_step(number: int) -> WizardStep:
    if number < 1 or number > TOTAL_STEPS:
        raise ValueError(f"wizard step {number} out of range")
    return PROFILE_WIZARD_STEPS[number - 1]


def _field_message(wizard_field: WizardField, raw: Any) -> str | None:
    value = "" if raw is None else str(raw).strip()
    if not value:
        return "Please fill out this field." if wizard_field.required else None
    if wizard_field.input_type == "email" and not _EMAIL_RE.match(value):
        return f"Please include an '@' in the email address. '{value}' is missing an '@'."
    if wizard_field.input_type == "date":
        try:
            date.fromisoformat(value)
        except ValueError:
            return "Please enter a valid date."
    if wizard_field.input_type == "number":
        if not value.isdigit():
            return "Please enter a whole number of 0 or more."
    return None


def validate_step(number: int, form: Mapping[str, Any]) -> None:
    """Check the required inputs of one step and raise on the first invalid one."""
    for wizard_field in get_step(number).fields:
        if wizard_field.input_type == "checkbox":
            continue
        message = _field_message(wizard_field, form.get(wizard_field.name))
        if message:
            raise ValidationFailed(message, field=wizard_field.name)


@dataclass(slots=True)
class ProfileWizard:
    step: int = 1
    values: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_profile(cls, profile: Profile | None) -> "ProfileWizard":
        wizard = cls()
        if profile is None:
            return wizard
        for wizard_field in ALL_FIELDS:
            value = getattr(profile, wizard_field.name, None)
            if value is None:
                continue
            if isinstance(value, date):
                value = value.isoformat()
            wizard.values[wizard_field.name] = value
        return wizard

    @property
    def current(self) -> WizardStep:
        return get_step(self.step)

    @property
    def is_final(self) -> bool:
        return self.step == TOTAL_STEPS

    @property
    def percent_complete(self) -> int:
        return round(self.step / TOTAL_STEPS * 100)

    @property
    def equipment(self) -> list[str]:
        raw = self.values.get("driving_experience_equipment") or []
        if isinstance(raw, str):
            raw = [raw]
        return [item for item in raw if item in EQUIPMENT_TYPES]

    def merge(self, form: Mapping[str, Any]) -> None:
        for wizard_field in ALL_FIELDS:
            if wizard_field.name in form:
                self.values[wizard_field.name] = form[wizard_field.name]

    def advance(self, form: Mapping[str, Any]) -> None:
        self.merge(form)
        validate_step(self.step, self.values)
        if not self.is_final:
            self.step += 1

    def back(self, form: Mapping[str, Any]) -> None:
        self.merge(form)
        self.step = max(1, self.step - 1)

    def to_form_data(self) -> ProfileFormData:
        data = dict(self.values)
        for key in ("date_of_birth", "cdl_expiration_date"):
            if not data.get(key):
                data[key] = None
        for key in ("driving_experience_years", "driving_experience_miles"):
            raw = data.get(key)
            data[key] = int(raw) if raw not in (None, "") else None
        data["driving_experience_equipment"] = self.equipment
        try:
            return ProfileFormData.model_validate(data)
        except PydanticValidationError as exc:
            first = exc.errors()[0]
            name = str(first["loc"][0]) if first.get("loc") else None
            raise ValidationFailed("Please review the highlighted field.", field=name) from exc

    def submit(self, repo: Repository, user_id: int) -> Profile:
        """Re-check every step, then persist the whole accumulated form at once.

        On failure the wizard is moved to the step holding the invalid field.
        """
        for number in range(1, TOTAL_STEPS + 1):
            try:
                validate_step(number, self.values)
            except ValidationFailed:
                self.step = number
                raise
        payload = self.to_form_data().model_dump()
        profile = repo.update_profile(user_id, payload)
        logger.info("Profile wizard saved user_id=%s", user_id)
        return profile
