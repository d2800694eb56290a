import io
import os
from typing import Dict, Optional

# アプリ import 前に設定（settings はモジュール読み込み時に確定する）
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("RUN_CREATE_ALL", "false")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("PUBLIC_BASE_URL", "")

import pytest
from fastapi.testclient import TestClient
from PIL import Image
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from marketplace.core.rate_limit import LoginRateLimiter
from marketplace.core.security import create_access_token
from marketplace.db.seed import seed_categories
from marketplace.db.session import enable_sqlite_foreign_keys, get_db
from marketplace.dependencies.auth import get_login_limiter
from marketplace.dependencies.services import get_blob_store
from marketplace.main import app
from marketplace.models import Base
from marketplace.schemas.vehicle import VehicleIn
from marketplace.services.auth_service import AuthService
from marketplace.services.vehicle_service import VehicleService
from marketplace.storage import Blob

ADMIN_USERNAME = "admin"
ADMIN_PASSWORD = "correct-horse-battery"


class InMemoryBlobStore:
    """テスト用 BlobStore（dict に保持）"""

    def __init__(self) -> None:
        self.blobs: Dict[str, Blob] = {}
        self.deleted = []

    def put(self, key: str, data: bytes, content_type: str) -> None:
        self.blobs[key] = Blob(data=data, content_type=content_type)

    def get(self, key: str) -> Optional[Blob]:
        return self.blobs.get(key)

    def delete(self, key: str) -> None:
        self.deleted.append(key)
        self.blobs.pop(key, None)


@pytest.fixture()
def engine():
    # 1接続を共有する in-memory SQLite（テストごとに作り直し）
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_foreign_keys(eng)
    Base.metadata.create_all(bind=eng)
    try:
        yield eng
    finally:
        eng.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@pytest.fixture()
def db_session(session_factory):
    db = session_factory()
    seed_categories(db)
    try:
        yield db
    finally:
        db.close()


@pytest.fixture()
def blob_store():
    return InMemoryBlobStore()


@pytest.fixture()
def login_limiter():
    # テストごとにカウントを空にする
    return LoginRateLimiter(max_attempts=5, window_seconds=15 * 60)


@pytest.fixture()
def client(session_factory, db_session, blob_store, login_limiter):
    def _get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_blob_store] = lambda: blob_store
    app.dependency_overrides[get_login_limiter] = lambda: login_limiter
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture()
def admin_user(db_session):
    return AuthService(db_session).set_password(ADMIN_USERNAME, ADMIN_PASSWORD)


@pytest.fixture()
def auth_headers(admin_user):
    token, _ = create_access_token(str(admin_user.id), username=admin_user.username, role=admin_user.role)
    return {"Authorization": f"Bearer {token}"}


def make_image_bytes(fmt: str = "PNG", size=(640, 480), color=(200, 30, 30)) -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", size, color).save(buf, format=fmt)
    return buf.getvalue()


@pytest.fixture()
def png_bytes():
    return make_image_bytes("PNG")


def vehicle_payload(**overrides):
    data = {
        "category": "flatbed",
        "make": "いすゞ",
        "model": "エルフ",
        "year": 2018,
        "mileage": 85000,
        "price": 2_500_000,
        "engineType": "4JJ1",
        "dimensions": {"length": 4.69, "width": 1.7, "height": 2.0},
        "condition": "良好",
        "features": ["パワーゲート", "ETC"],
        "descriptionJa": "ワンオーナー車",
        "descriptionEn": "Single owner",
    }
    data.update(overrides)
    return data


@pytest.fixture()
def make_vehicle(db_session):
    service = VehicleService(db_session)

    def _make(**overrides):
        return service.create_vehicle(VehicleIn.model_validate(vehicle_payload(**overrides)))

    return _make


@pytest.fixture()
def image_factory():
    return make_image_bytes


@pytest.fixture()
def payload_factory():
    return vehicle_payload


@pytest.fixture()
def admin_credentials():
    return {"username": ADMIN_USERNAME, "password": ADMIN_PASSWORD}
