from fastapi.testclient import TestClient

from driverhire.db.repositories import Repository
from driverhire.db.session import SessionLocal

STEPS = [
    {
        "full_name": "Dana Driver",
        "email": "dana@example.com",
        "phone": "555-0100",
        "ssn": "123-45-6789",
        "date_of_birth": "1985-04-12",
    },
    {
        "present_address_street": "1 Main St",
        "present_address_city": "Springfield",
        "present_address_state": "IL",
        "present_address_zip": "62701",
    },
    {"cdl_number": "D1234567", "cdl_state": "IL", "cdl_expiration_date": "2030-01-01"},
    {
        "driving_experience_years": "8",
        "driving_experience_miles": "600000",
        "driving_experience_equipment": ["", "Flatbed", "Tanker"],
    },
]


def test_wizard_walks_four_steps_and_saves_once(client: TestClient, make_account, login) -> None:
    user_id = make_account("dana@example.com")
    login(client, "dana@example.com")

    page = client.get("/profile/create")
    assert page.status_code == 200
    assert "Personal Information" in page.text

    carried: dict = {}
    for number, values in enumerate(STEPS[:3], start=1):
        carried.update(values)
        response = client.post("/profile/create", data={**carried, "step": str(number), "action": "next"})
        assert response.status_code == 200
        assert f'name="step" value="{number + 1}"' in response.text

    # nothing is written before the final submit
    with SessionLocal() as db:
        assert Repository(db).get_profile(user_id).cdl_number is None

    carried.update(STEPS[3])
    submitted = client.post(
        "/profile/create",
        data={**carried, "step": "4", "action": "submit"},
        follow_redirects=False,
    )
    assert submitted.status_code == 303
    assert submitted.headers["location"] == "/profile/employment-history"

    with SessionLocal() as db:
        profile = Repository(db).get_profile(user_id)
        assert profile.cdl_number == "D1234567"
        assert profile.driving_experience_years == 8
        assert profile.driving_experience_equipment == ["Flatbed", "Tanker"]
        assert profile.date_of_birth.isoformat() == "1985-04-12"


def test_wizard_blocks_next_on_missing_field(client: TestClient, make_account, login) -> None:
    make_account("dana@example.com")
    login(client, "dana@example.com")

    response = client.post(
        "/profile/create",
        data={**STEPS[0], "phone": "", "step": "1", "action": "next"},
    )
    assert response.status_code == 400
    assert "Please fill out this field." in response.text
    assert 'name="step" value="1"' in response.text


def test_wizard_back_skips_validation(client: TestClient, make_account, login) -> None:
    make_account("dana@example.com")
    login(client, "dana@example.com")

    response = client.post("/profile/create", data={**STEPS[0], "step": "2", "action": "back"})
    assert response.status_code == 200
    assert 'name="step" value="1"' in response.text


def test_final_submit_without_earlier_steps_saves_nothing(client: TestClient, make_account, login) -> None:
    user_id = make_account("dana@example.com")
    login(client, "dana@example.com")

    response = client.post("/profile/create", data={**STEPS[3], "step": "4", "action": "submit"})
    assert response.status_code == 400
    assert 'name="step" value="1"' in response.text

    with SessionLocal() as db:
        profile = Repository(db).get_profile(user_id)
        assert profile.driving_experience_years is None
        assert profile.ssn is None
