from __future__ import annotations

from contextlib import contextmanager

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from autoinspect.models import Base


@pytest.fixture
def testing_session_local():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    yield TestingSessionLocal
    engine.dispose()


@pytest.fixture
def session_factory(testing_session_local):
    @contextmanager
    def _get_db_session():
        session = testing_session_local()
        try:
            yield session
        finally:
            session.close()

    return _get_db_session


@pytest.fixture
def db_session(testing_session_local):
    session = testing_session_local()
    yield session
    session.close()
