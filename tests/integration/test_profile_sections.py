from datetime import date

import pytest

from driverhire.core import addresses, background, contacts, employment
from driverhire.core.auth import register_user
from driverhire.core.authorizations import AUTHORIZATION_KEYS, complete_profile, sign
from driverhire.core.background import BackgroundAnswer
from driverhire.db.repositories import Repository
from driverhire.errors import NotFoundError, ValidationFailed
from driverhire.types import AddressHistoryInput, EmergencyContactInput, EmploymentInput


def _user(repo: Repository, email: str = "cand@example.com") -> int:
    return register_user(repo, email=email, password="secret123").id


def _contact(name: str) -> EmergencyContactInput:
    return EmergencyContactInput(
        full_name=name,
        address_city="Springfield",
        address_state="IL",
        address_zip="62701",
        relationship="Friend",
        phone="555-0100",
    )


def test_employment_buckets_follow_creation_flag(repo: Repository) -> None:
    user_id = _user(repo)
    employment.add_employment(
        repo, user_id, EmploymentInput(company_name="Local Co", start_date=date(2015, 1, 1)), is_cdl=False
    )
    cdl_row = employment.add_employment(
        repo, user_id, EmploymentInput(company_name="Freight Co", start_date=date(2018, 1, 1)), is_cdl=True
    )
    assert cdl_row.cdl_required is True

    # editing never moves a record between buckets
    employment.update_employment(
        repo, user_id, cdl_row.id, EmploymentInput(company_name="Freight Co LLC", start_date=date(2018, 1, 1))
    )
    recent, cdl = employment.partition_history(repo.get_employment_history(user_id))
    assert [row.company_name for row in recent] == ["Local Co"]
    assert [row.company_name for row in cdl] == ["Freight Co LLC"]


def test_employment_dates_and_ownership(repo: Repository) -> None:
    owner = _user(repo)
    other = _user(repo, "other@example.com")
    with pytest.raises(ValidationFailed):
        employment.add_employment(
            repo,
            owner,
            EmploymentInput(company_name="X", start_date=date(2020, 1, 1), end_date=date(2019, 1, 1)),
            is_cdl=False,
        )
    row = employment.add_employment(
        repo, owner, EmploymentInput(company_name="X", start_date=date(2020, 1, 1)), is_cdl=False
    )
    with pytest.raises(NotFoundError):
        employment.delete_employment(repo, other, row.id)
    assert employment.delete_employment(repo, owner, row.id) is True


def test_address_history_add_and_delete(repo: Repository) -> None:
    owner = _user(repo)
    other = _user(repo, "other@example.com")
    data = AddressHistoryInput(street="2 Oak Ave", city="Peoria", state="IL", zip="61602", start_date=date(2012, 5, 1))
    row = addresses.add_address(repo, owner, data)

    with pytest.raises(NotFoundError):
        addresses.delete_address(repo, other, row.id)
    assert [r.city for r in repo.get_address_history(owner)] == ["Peoria"]
    addresses.delete_address(repo, owner, row.id)
    assert repo.get_address_history(owner) == []


def test_contacts_cap_and_gapped_order(repo: Repository) -> None:
    user_id = _user(repo)
    first = contacts.add_contact(repo, user_id, _contact("First"))
    contacts.add_contact(repo, user_id, _contact("Second"))
    contacts.delete_contact(repo, user_id, first.id)
    third = contacts.add_contact(repo, user_id, _contact("Third"))
    contacts.add_contact(repo, user_id, _contact("Fourth"))

    # order is the list length at insert time, so a gap can repeat an order value
    assert third.order == 1
    with pytest.raises(ValidationFailed):
        contacts.add_contact(repo, user_id, _contact("Fifth"))
    assert len(repo.get_emergency_contacts(user_id)) == 3


def test_background_answers_overwrite_and_complete(repo: Repository) -> None:
    user_id = _user(repo)
    background.save_answers(repo, user_id, [BackgroundAnswer(n, False) for n in range(1, 9)])
    assert not background.is_complete(repo.get_background_questions(user_id))

    background.save_answers(repo, user_id, [BackgroundAnswer(9, True, "Yes, fully")])
    assert background.is_complete(repo.get_background_questions(user_id))

    with pytest.raises(ValidationFailed):
        background.save_answers(repo, user_id, [BackgroundAnswer(10, False)])


def test_profile_completion_requires_all_signatures(repo: Repository) -> None:
    user_id = _user(repo)
    with pytest.raises(ValidationFailed):
        complete_profile(repo, user_id)

    for key in sorted(AUTHORIZATION_KEYS):
        sign(repo, user_id, key, user_agent="pytest", ip_address="127.0.0.1")
    complete_profile(repo, user_id)

    assert repo.get_profile(user_id).profile_completed_at is not None
    with pytest.raises(ValidationFailed):
        sign(repo, user_id, "w9_tax_form")
