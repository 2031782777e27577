from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import crud
from init_db import DEMO_MEMBERS, init_db_data


def test_seed_is_idempotent():
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    first = init_db_data(TestingSession, bind=engine)
    second = init_db_data(TestingSession, bind=engine)

    assert len(first) == len(DEMO_MEMBERS)
    assert second == []
    db = TestingSession()
    try:
        members = crud.select_all_members(db)
        assert [m.email for m in members] == [m["email"] for m in reversed(DEMO_MEMBERS)]
        assert all(m.created_at is not None for m in members)
    finally:
        db.close()
