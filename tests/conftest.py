import os

os.environ["ENV"] = "test"
os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")

import uuid
from datetime import datetime, UTC

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.main import app
from app.db import Base, get_db
from app.models.project import Project, ProjectAssignment, ProjectStatus
from app.models.skill import Skill
from app.models.user import User, UserRole
from app.services.auth import get_current_user

# Use SQLite in-memory for test DB
TEST_DATABASE_URL = "sqlite+pysqlite:///:memory:"
# For in-memory SQLite we must use a StaticPool so multiple connections share the
# same in-memory database (TestClient requests vs test DB setup).
engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    try:
        db = TestingSessionLocal()
        yield db
    finally:
        db.close()


app.dependency_overrides[get_db] = override_get_db


@pytest.fixture(autouse=True)
def setup_test_db():
    # recreate schema for each test to ensure isolation
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    app.dependency_overrides.pop(get_current_user, None)
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def db_session():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.rollback()
        db.close()


def _make_user(db, name, role=UserRole.employee, coach=None, department=None):
    user = User(
        id=str(uuid.uuid4()),
        full_name=name,
        email=f"user+{uuid.uuid4().hex[:8]}@example.com",
        role=role,
        department=department,
        coach_id=coach.id if coach else None,
        created_at=datetime.now(UTC),
    )
    db.add(user)
    db.commit()
    return user


@pytest.fixture
def coach(db_session):
    return _make_user(db_session, "Claire Coach", role=UserRole.coach)


@pytest.fixture
def employee(db_session, coach):
    return _make_user(db_session, "Emma Employee", coach=coach, department="Consulting")


@pytest.fixture
def referent(db_session):
    return _make_user(db_session, "Remy Referent")


@pytest.fixture
def admin(db_session):
    return _make_user(db_session, "Ada Admin", role=UserRole.admin)


@pytest.fixture
def make_user(db_session):
    def _make(name, role=UserRole.employee, coach=None, department=None):
        return _make_user(db_session, name, role=role, coach=coach, department=department)
    return _make


@pytest.fixture
def make_assignment(db_session, referent):
    """Project (with the shared referent) plus one employee assignment."""
    def _make(employee, status=ProjectStatus.in_progress, title="Data platform migration", author=None):
        project = Project(
            title=title,
            client_name="Acme",
            status=status,
            author_id=author.id if author else None,
            referent_id=referent.id,
        )
        db_session.add(project)
        db_session.flush()
        assignment = ProjectAssignment(project_id=project.id, employee_id=employee.id, role_on_project="Consultant")
        db_session.add(assignment)
        db_session.commit()
        return assignment
    return _make


@pytest.fixture
def assignment(make_assignment, employee):
    return make_assignment(employee)


@pytest.fixture
def skills(db_session):
    items = [
        Skill(description="Lead client workshops", theme_name="Facilitation"),
        Skill(description="Design data pipelines", theme_name="Data engineering"),
        Skill(description="Mentor junior consultants", theme_name=None),
    ]
    db_session.add_all(items)
    db_session.commit()
    return items


class MockUser:
    def __init__(self, id, full_name, role):
        self.id = id
        self.full_name = full_name
        self.role = role


@pytest.fixture
def login():
    """Route requests through ``get_current_user`` as the given user."""
    def _login(user):
        # Detached stand-in so request threads never touch the fixture session
        snapshot = MockUser(user.id, user.full_name, user.role)
        app.dependency_overrides[get_current_user] = lambda: snapshot
        return user
    return _login


# --- Email sending mock (autouse) ---
@pytest.fixture(autouse=True)
def mock_email_send(monkeypatch):
    """Prevent real SendGrid network calls; record what would have been sent."""
    from app.services import email as email_mod
    sent = []

    def _fake_send_email(to_email, subject, html_content, plain_content, from_email=None):
        sent.append({"to": to_email, "subject": subject, "plain": plain_content})
        return True

    monkeypatch.setattr(email_mod, 'send_email', _fake_send_email)
    yield sent


def smart_objective(description, **extra):
    data = {
        "type": "smart_custom",
        "skill_description": description,
        "smart_statement": f"Improve {description.lower()}",
        "specific": "Scoped to the current client",
        "measurable": "Reviewed by the referent",
        "achievable": "Within normal workload",
        "relevant": "Needed on the project",
        "time_bound": "By project end",
    }
    data.update(extra)
    return data


def self_entries(objective_set, scores):
    return [
        {
            "objective_id": o["id"],
            "score": score,
            "comment": "Went well overall",
            "achievements": "Shipped the agreed scope",
            "learnings": "Plan client reviews earlier",
        }
        for o, score in zip(objective_set.objectives, scores)
    ]


def referent_entries(objective_set, scores):
    return [
        {
            "objective_id": o["id"],
            "score": score,
            "comment": "Solid contribution",
            "observed_achievements": "Delivered on time",
            "overall_performance": "Meets expectations",
        }
        for o, score in zip(objective_set.objectives, scores)
    ]


@pytest.fixture
def submitted_set(db_session, make_assignment):
    """Submitted objective set on a finished project."""
    from app.services.objectives import create_or_replace_objectives

    def _make(employee, count=3, title="Data platform migration"):
        assignment = make_assignment(employee, status=ProjectStatus.finished, title=title)
        objectives = [smart_objective(f"Skill {i + 1}") for i in range(count)]
        return create_or_replace_objectives(db_session, employee.id, assignment.id, objectives, as_draft=False)
    return _make
