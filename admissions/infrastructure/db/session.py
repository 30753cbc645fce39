from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from admissions.config.config import settings
from admissions.infrastructure.db.models import Base


def make_engine(url: str | None = None, echo: bool | None = None) -> Engine:
    if url is None:
        settings.data_dir.mkdir(parents=True, exist_ok=True)
        url = settings.database_url
    connect_args = {}
    if url.startswith("sqlite"):
        # concurrent submissions wait on the write lock instead of failing at once
        connect_args["timeout"] = 30
        # transfers run on worker threads
        connect_args["check_same_thread"] = False
    engine = create_engine(
        url,
        echo=settings.db_echo if echo is None else echo,
        future=True,
        connect_args=connect_args,
    )
    Base.metadata.create_all(engine)  # just in case
    return engine


def make_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(bind=engine, future=True, expire_on_commit=False)
