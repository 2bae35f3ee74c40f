from __future__ import annotations

from typing import Dict, List

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from flipbook import config, main
from flipbook.errors import StorageError
from flipbook.repositories import InMemoryLinkRepository
from flipbook.sql_models import Base

CEILING = 4096


class FakeBlobStore:
    """Records puts and deletes instead of talking to MinIO."""

    def __init__(self, fail_put: bool = False, fail_delete: bool = False) -> None:
        self.objects: Dict[str, bytes] = {}
        self.deleted: List[str] = []
        self.fail_put = fail_put
        self.fail_delete = fail_delete

    def put(self, key: str, content: bytes, content_type: str) -> str:
        if self.fail_put:
            raise StorageError()
        self.objects[key] = content
        return f"https://blobs.example.com/flipbook/{key}"

    def delete(self, key: str) -> None:
        if self.fail_delete:
            raise StorageError()
        self.deleted.append(key)
        self.objects.pop(key, None)


@pytest.fixture()
def db_session() -> Session:
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def blobs() -> FakeBlobStore:
    return FakeBlobStore()


@pytest.fixture()
def links() -> InMemoryLinkRepository:
    return InMemoryLinkRepository()


@pytest.fixture()
def test_settings() -> config.Settings:
    return config.Settings(
        MAX_UPLOAD_BYTES=CEILING,
        FRONTEND_URL="https://flipbook.example.com",
        USE_POSTGRES=False,
    )


@pytest.fixture()
def client(test_settings, blobs, links):
    main.app.dependency_overrides[main.get_settings] = lambda: test_settings
    main.app.dependency_overrides[main.get_blob_store] = lambda: blobs
    main.app.dependency_overrides[main.get_link_repository] = lambda: links
    with TestClient(main.app) as test_client:
        yield test_client
    main.app.dependency_overrides.clear()
