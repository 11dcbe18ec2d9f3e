from __future__ import annotations

import os
from pathlib import Path
from typing import Iterator, Optional

from sqlalchemy.engine import Engine
from sqlmodel import Session, SQLModel, create_engine


DB_URL_ENV = "STUDIO_SEATING_DB_URL"
DATA_DIR_ENV = "STUDIO_SEATING_DATA_DIR"


def _default_db_url() -> str:
    # Keep data out of git by default.
    data_dir = Path(os.environ.get(DATA_DIR_ENV, Path.cwd() / "data"))
    data_dir.mkdir(parents=True, exist_ok=True)
    db_path = data_dir / "studio_seating.db"
    return f"sqlite:///{db_path}"


def database_url() -> str:
    return os.environ.get(DB_URL_ENV) or _default_db_url()


def make_engine(url: Optional[str] = None) -> Engine:
    url = url or database_url()
    # request handlers run on a thread pool; sqlite connections must be shareable
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    return create_engine(url, echo=False, connect_args=connect_args)


engine = make_engine()


def init_db(bind: Optional[Engine] = None) -> None:
    from . import models  # noqa: F401 - ensure models are registered

    SQLModel.metadata.create_all(bind or engine)


def get_session() -> Iterator[Session]:
    with Session(engine) as session:
        yield session
