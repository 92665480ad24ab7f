import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from schooldesk.api.deps import get_db
from schooldesk.core.security import create_access_token
from schooldesk.crud.comment_sheet import CommentSheetRepository
from schooldesk.db import init_db
from schooldesk.db.models import Attendance, SchoolClass, Student, TeacherCommentSheet, User
from schooldesk.main import app
from schooldesk.services.storage import LocalBlobStore, get_blob_store


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine):
    session = sessionmaker(bind=engine, autocommit=False, autoflush=False)()
    yield session
    session.close()


@pytest.fixture
def teacher(db):
    user = User(username="sarah", full_name="Sarah Miller", role="teacher")
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def school_class(db, teacher):
    school_class = SchoolClass(name="Sunshine Kids", teacher_id=teacher.id, schedule="Mon/Wed 16:00-17:00", color="#ffcc00")
    db.add(school_class)
    db.commit()
    db.refresh(school_class)
    return school_class


@pytest.fixture
def students(db, school_class):
    rows = [
        Student(name="Aiko", class_id=school_class.id, student_type="regular"),
        Student(name="Ben", class_id=school_class.id, student_type="regular"),
        Student(name="Chika", class_id=school_class.id, student_type="trial"),
        Student(name="Daichi", class_id=school_class.id, student_type="makeup"),
        Student(name="Emi", class_id=school_class.id, student_type="regular", active=False),
    ]
    db.add_all(rows)
    db.commit()
    for row in rows:
        db.refresh(row)
    return rows


@pytest.fixture
def add_attendance(db):
    def _add(student, date, status, class_id=None):
        record = Attendance(student_id=student.id, class_id=class_id or student.class_id, date=date, status=status)
        db.add(record)
        db.commit()
        return record
    return _add


@pytest.fixture
def add_sheet(db):
    def _add(school_class, teacher, date, model=TeacherCommentSheet, **texts):
        sheet = model(class_id=school_class.id, teacher_id=teacher.id, date=date, **texts)
        db.add(sheet)
        db.commit()
        db.refresh(sheet)
        return sheet
    return _add


@pytest.fixture
def repo():
    return CommentSheetRepository()


@pytest.fixture
def store(tmp_path):
    return LocalBlobStore(str(tmp_path / "storage"), "http://testserver", 3600)


@pytest.fixture
def client(db, store):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_blob_store] = lambda: store
    app.state.lesson_repository = CommentSheetRepository()
    yield TestClient(app)
    app.dependency_overrides.clear()
    app.state.lesson_repository = None


@pytest.fixture
def auth_headers(teacher):
    token = create_access_token(data={"sub": str(teacher.id)})
    return {"Authorization": f"Bearer {token}"}
