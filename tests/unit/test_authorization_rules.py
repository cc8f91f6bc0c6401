from types import SimpleNamespace

from driverhire.core.authorizations import AUTHORIZATION_KEYS, AUTHORIZATION_TYPES, all_signed, is_signed


def _row(kind: str, signed: bool = True) -> SimpleNamespace:
    return SimpleNamespace(authorization_type=kind, signed=signed, signed_at=None)


def test_four_fixed_authorization_types() -> None:
    assert len(AUTHORIZATION_TYPES) == 4
    assert AUTHORIZATION_KEYS == {
        "applicant_certification",
        "fmcsa_clearinghouse",
        "hireright_background",
        "psp_authorization",
    }
    assert all(spec.content for spec in AUTHORIZATION_TYPES)


def test_all_signed_needs_every_key_signed() -> None:
    rows = [_row(key) for key in AUTHORIZATION_KEYS]
    assert all_signed(rows)
    assert not all_signed(rows[:3])


def test_unsigned_row_does_not_count() -> None:
    rows = [_row(key) for key in AUTHORIZATION_KEYS if key != "psp_authorization"]
    rows.append(_row("psp_authorization", signed=False))
    assert not is_signed(rows, "psp_authorization")
    assert not all_signed(rows)
