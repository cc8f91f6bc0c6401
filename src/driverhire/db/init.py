from __future__ import annotations

from pathlib import Path

from driverhire.config import get_settings
from driverhire.db.base import Base
from driverhire.db.session import SessionLocal, engine
from driverhire.db import models  # noqa: F401
from driverhire.db.seed import seed_bootstrap_manager


def ensure_data_directories() -> None:
    settings = get_settings()
    paths: list[Path] = [
        settings.data_dir,
        settings.storage_dir,
        settings.bucket_dir,
    ]
    for path in paths:
        path.mkdir(parents=True, exist_ok=True)


def init_database() -> dict[str, int]:
    ensure_data_directories()
    Base.metadata.create_all(bind=engine)

    with SessionLocal() as session:
        inserted = seed_bootstrap_manager(session)
    return {"seeded_managers": inserted}
