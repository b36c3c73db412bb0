"""
Test configuration and fixtures
"""
from datetime import datetime

import mongomock
import pytest

from portal import create_app
from portal.stores import (
    COURSES,
    PAYMENTS,
    PROGRAMS,
    STUDENTS,
    CourseCatalogStore,
    GradeSubmissionStore,
    PaymentStore,
    RegistrationStore,
    SettingsStore,
    StudentStore,
)

# Regular/100 total used by the admission letter fallback figure
LETTER_FEE_TABLE = {
    'Regular': {
        '100': {'total': 4310.00, 'installments': [2155.00, 2155.00]},
    },
    'Weekend': {},
}


@pytest.fixture
def db():
    """Fresh in-memory database per test"""
    return mongomock.MongoClient().db


@pytest.fixture
def app(db):
    app = create_app({'TESTING': True, 'LOG_LEVEL': 'WARNING'}, db=db)
    yield app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def student_store(db):
    return StudentStore(db)


@pytest.fixture
def payment_store(db):
    return PaymentStore(db)


@pytest.fixture
def registration_store(db):
    return RegistrationStore(db)


@pytest.fixture
def catalog_store(db):
    return CourseCatalogStore(db)


@pytest.fixture
def submission_store(db):
    return GradeSubmissionStore(db)


@pytest.fixture
def settings_store(db):
    return SettingsStore(db)


def add_student(db, student_id='stu1', level='100', study_mode='Regular', program='BSc. Agriculture'):
    db[STUDENTS].insert_one({
        '_id': student_id,
        'program': program,
        'level': level,
        'study_mode': study_mode,
        'registration_number': f'UCAES{student_id.upper()}',
    })


def add_payment(db, student_id, amount, academic_year='2025/2026', semester=None):
    db[PAYMENTS].insert_one({
        'student_id': student_id,
        'amount': amount,
        'academic_year': academic_year,
        'semester': semester,
        'paid_at': datetime(2025, 9, 1),
    })


def add_course(db, code, level='200', semester='First Semester', program='BSc. Agriculture', credits=3):
    db[COURSES].insert_one({
        'code': code,
        'title': f'{code} title',
        'credits': credits,
        'level': level,
        'semester': semester,
        'program': program,
    })


def add_program(db, program_id, name, courses_per_level=None):
    document = {'_id': program_id, 'name': name}
    if courses_per_level is not None:
        document['courses_per_level'] = courses_per_level
    db[PROGRAMS].insert_one(document)
