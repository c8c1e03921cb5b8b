"""Shared fixtures and utilities for tests."""

import os
import tempfile

# Settings are read at import time, so the environment is prepared first
os.environ.setdefault("APP_ENV", "development")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///" + os.path.join(tempfile.gettempdir(), "careers-test.db"))
os.environ.setdefault("JWT_SECRET_KEY", "test-jwt-secret-key-min-32-chars-long-for-security")
os.environ.setdefault("JWT_ALGORITHM", "HS256")
os.environ.setdefault("ACCESS_TOKEN_EXPIRE_MINUTES", "60")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="careers-test-uploads-"))
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("JSON_LOGS", "false")

import httpx
import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from api.dependencies import get_recaptcha_verifier, get_resume_storage
from api.main import app
from core.security import create_access_token, hash_password
from core.storage.local import LocalStorage
from database.engine import Base, build_engine, get_db
from database.models import Admin, Job, Position, Question, QuestionOption, QuestionType

ADMIN_EMAIL = "admin@company.com"
ADMIN_PASSWORD = "admin123"


class FakeRecaptchaVerifier:
    """Verifier double that records tokens and returns a fixed verdict."""

    def __init__(self, result: bool = True):
        self.result = result
        self.calls = []

    async def verify(self, token, remote_ip=None):
        self.calls.append((token, remote_ip))
        return self.result


def make_pdf(text: str = "Resume") -> bytes:
    """Create a minimal PDF document."""
    return (
        b"%PDF-1.4\n"
        b"1 0 obj<</Type/Catalog/Pages 2 0 R>>endobj\n"
        b"2 0 obj<</Type/Pages/Kids[3 0 R]/Count 1>>endobj\n"
        b"3 0 obj<</Type/Page/Parent 2 0 R/MediaBox[0 0 612 792]/Contents 4 0 R>>endobj\n"
        b"4 0 obj<</Length 44>>stream\nBT /F1 12 Tf 100 700 Td ("
        + text.encode()
        + b") Tj ET\nendstream endobj\n"
        b"trailer<</Size 5/Root 1 0 R>>\n%%EOF"
    )


# ==================== Database ==================== #

@pytest.fixture
async def engine(tmp_path):
    """Fresh SQLite database per test."""
    test_engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield test_engine

    await test_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


# ==================== Application ==================== #

@pytest.fixture
def recaptcha():
    return FakeRecaptchaVerifier()


@pytest.fixture
def storage(tmp_path):
    return LocalStorage(str(tmp_path / "uploads"))


@pytest.fixture
async def client(session_factory, recaptcha, storage):
    """HTTP client bound to the app with database, CAPTCHA and storage overridden."""

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_recaptcha_verifier] = lambda: recaptcha
    app.dependency_overrides[get_resume_storage] = lambda: storage

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as test_client:
        yield test_client

    app.dependency_overrides.clear()


# ==================== Seed data ==================== #

@pytest.fixture
async def admin(db_session):
    admin = Admin(
        email=ADMIN_EMAIL,
        password=hash_password(ADMIN_PASSWORD, rounds=4),
        is_first_login=True,
    )
    db_session.add(admin)
    await db_session.commit()
    return admin


@pytest.fixture
def auth_headers(admin):
    token = create_access_token(admin.id, admin.email)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
async def position(db_session):
    position = Position(title="Backend Engineer", level="Senior", salary_range="$120k - $150k")
    db_session.add(position)
    await db_session.commit()
    return position


@pytest.fixture
async def job(db_session, position):
    """Active job with a required text question and an optional single choice question."""
    job = Job(
        title="Senior Backend Engineer",
        description="Build and run our APIs.",
        slug="senior-backend-engineer",
        requires_resume=False,
        position_id=position.id,
        questions=[
            Question(
                label="Why do you want to join?",
                type=QuestionType.LONG_TEXT,
                is_required=True,
                order=0,
            ),
            Question(
                label="Preferred work mode",
                type=QuestionType.SINGLE_CHOICE,
                is_required=False,
                order=1,
                options=[
                    QuestionOption(label="Remote", order_index=0),
                    QuestionOption(label="On-site", order_index=1),
                    QuestionOption(label="Hybrid", order_index=2, is_active=False),
                ],
            ),
        ],
    )
    db_session.add(job)
    await db_session.commit()
    return job


@pytest.fixture
async def resume_job(db_session, position):
    """Active job that requires a resume and has no questions."""
    job = Job(
        title="Product Designer",
        description="Design delightful products.",
        slug="product-designer",
        requires_resume=True,
        position_id=position.id,
    )
    db_session.add(job)
    await db_session.commit()
    return job


@pytest.fixture
def text_question(job):
    return job.questions[0]


@pytest.fixture
def choice_question(job):
    return job.questions[1]


@pytest.fixture
def resume_pdf():
    return make_pdf("Jane Doe - Resume")
