from datetime import date

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.exc import SQLAlchemyError

from driverhire.core import addresses, contacts, employment
from driverhire.db.repositories import Repository
from driverhire.db.session import SessionLocal
from driverhire.types import AddressHistoryInput, EmergencyContactInput, EmploymentInput

EMPLOYMENT_FORM = {"company_name": "Freight Co", "start_date": "2018-01-01"}
ADDRESS_FORM = {"street": "2 Oak Ave", "city": "Peoria", "state": "IL", "zip": "61602", "start_date": "2012-05-01"}
CONTACT_FORM = {
    "full_name": "Sam Spouse",
    "address_city": "Springfield",
    "address_state": "IL",
    "address_zip": "62701",
    "relationship": "Spouse",
    "phone": "555-0101",
}


def _seed_rows(user_id: int) -> dict[str, int]:
    with SessionLocal() as db:
        repo = Repository(db)
        job = employment.add_employment(
            repo, user_id, EmploymentInput(company_name="Local Co", start_date=date(2015, 1, 1)), is_cdl=False
        )
        address = addresses.add_address(
            repo,
            user_id,
            AddressHistoryInput(street="1 Main St", city="Springfield", state="IL", zip="62701", start_date=date(2010, 1, 1)),
        )
        contact = contacts.add_contact(repo, user_id, EmergencyContactInput(**CONTACT_FORM))
        return {"employment": job.id, "address": address.id, "contact": contact.id}


def _failing(*args, **kwargs):
    raise SQLAlchemyError("database is locked")


@pytest.mark.parametrize(
    ("repo_method", "path", "form", "message"),
    [
        ("update_employment_history", "/profile/employment-history/{employment}", EMPLOYMENT_FORM,
         "Failed to save employment history."),
        ("delete_employment_history", "/profile/employment-history/{employment}/delete", {},
         "Failed to delete employment history."),
        ("add_address_history", "/profile/address-history", ADDRESS_FORM, "Failed to save address history."),
        ("delete_address_history", "/profile/address-history/{address}/delete", {},
         "Failed to delete address history."),
        ("update_emergency_contact", "/profile/emergency-contacts/{contact}", CONTACT_FORM, "Failed to save contact."),
        ("delete_emergency_contact", "/profile/emergency-contacts/{contact}/delete", {}, "Failed to delete contact."),
    ],
)
def test_database_failure_on_profile_write_renders_error(
    client: TestClient, make_account, login, monkeypatch, repo_method, path, form, message
) -> None:
    user_id = make_account("driver@example.com")
    ids = _seed_rows(user_id)
    login(client, "driver@example.com")
    monkeypatch.setattr(Repository, repo_method, _failing)

    response = client.post(path.format(**ids), data=form, follow_redirects=False)

    assert response.status_code == 500
    assert message in response.text
    assert "Please try again." in response.text
