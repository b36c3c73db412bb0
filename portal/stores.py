"""
MongoDB-backed stores.

Each store wraps one collection and hands back decoded records from
portal.models. Queries accept either string ids or ObjectId-shaped ids,
since documents written by the older portals use both.
"""

import logging
from datetime import datetime, timezone

from bson import ObjectId
from pydantic import ValidationError
from pymongo import ASCENDING, DESCENDING
from pymongo.errors import PyMongoError

from portal.cache import TTLCache
from portal.config import SystemConfig
from portal.exceptions import InvalidTransitionError, RecordShapeError, StoreUnavailableError
from portal.grading import advance_status
from portal.models import (
    AcademicPeriod,
    CourseCatalogEntry,
    CourseRegistration,
    GradeSubmission,
    PaymentRecord,
    Program,
    RegistrationStatus,
    Student,
    SubmissionStatus,
    normalize_academic_year,
)

logger = logging.getLogger(__name__)

STUDENTS = 'students'
PAYMENTS = 'payments'
REGISTRATIONS = 'course_registrations'
COURSES = 'academic_courses'
PROGRAMS = 'academic_programs'
GRADE_SUBMISSIONS = 'grade_submissions'
SETTINGS = 'settings'


def id_query(document_id):
    """Match a document by its string id or by the equivalent ObjectId"""
    if ObjectId.is_valid(document_id):
        return {'_id': {'$in': [document_id, ObjectId(document_id)]}}
    return {'_id': document_id}


def student_id_match(student_id):
    """Match a student_id field written as a plain string or as an ObjectId"""
    if ObjectId.is_valid(student_id):
        return {'$in': [student_id, ObjectId(student_id)]}
    return student_id


def year_variants(academic_year):
    """Both spellings of an academic year as stored by the different portals"""
    year = normalize_academic_year(academic_year)
    return [year, year.replace('/', '-')]


def create_indexes(db):
    db[PAYMENTS].create_index([('student_id', ASCENDING), ('academic_year', ASCENDING)])
    db[REGISTRATIONS].create_index([('student_id', ASCENDING), ('academic_year', ASCENDING), ('semester', ASCENDING)])
    db[COURSES].create_index([('code', ASCENDING)], unique=True)
    db[GRADE_SUBMISSIONS].create_index([('course_code', ASCENDING), ('academic_year', ASCENDING), ('semester', ASCENDING)])
    db[GRADE_SUBMISSIONS].create_index([('submitted_at', DESCENDING)])


class MongoStore:
    collection_name = None

    def __init__(self, db):
        self.db = db

    @property
    def collection(self):
        return self.db[self.collection_name]

    def _find(self, query, sort=None):
        try:
            cursor = self.collection.find(query)
            if sort:
                cursor = cursor.sort(sort)
            return list(cursor)
        except PyMongoError as e:
            raise StoreUnavailableError(f"Error reading {self.collection_name}", original_error=e) from e

    def _find_one(self, query):
        try:
            return self.collection.find_one(query)
        except PyMongoError as e:
            raise StoreUnavailableError(f"Error reading {self.collection_name}", original_error=e) from e


class StudentStore(MongoStore):
    collection_name = STUDENTS

    def get_student(self, student_id):
        document = self._find_one(id_query(student_id))
        if document is None:
            return None
        return Student.from_document(self.collection_name, document)


class PaymentStore(MongoStore):
    collection_name = PAYMENTS

    def list_payments(self, student_id, academic_year, period=None):
        """
        Payments by a student toward an academic year.

        With a period, only payments made toward that semester or an earlier
        one count; payments with no semester apply to the whole year.
        """
        documents = self._find(
            {'student_id': student_id_match(student_id), 'academic_year': {'$in': year_variants(academic_year)}},
            sort=[('paid_at', ASCENDING)],
        )
        payments = [PaymentRecord.from_document(self.collection_name, d) for d in documents]
        if period is None:
            return payments
        return [p for p in payments if p.semester is None or p.semester <= period]

    def record_payment(self, student_id, amount, academic_year, semester=None):
        payment = PaymentRecord(
            student_id=student_id,
            amount=amount,
            academic_year=academic_year,
            semester=semester,
            paid_at=datetime.now(timezone.utc),
        )
        result = self.collection.insert_one(payment.model_dump(exclude={'id'}))
        logger.info("Recorded payment of %.2f for %s (%s)", amount, student_id, payment.academic_year)
        return payment.model_copy(update={'id': str(result.inserted_id)})


class CourseCatalogStore(MongoStore):
    """Catalog and program reads, served through an explicit TTL cache"""

    collection_name = COURSES

    def __init__(self, db, cache=None):
        super().__init__(db)
        self.cache = cache if cache is not None else TTLCache(ttl=SystemConfig.CACHE_TTL)

    def list_courses(self):
        return self.cache.get_or_load(('courses',), self._load_courses)

    def get_program(self, program_id):
        return self.cache.get_or_load(('program', program_id), lambda: self._load_program(program_id))

    def _load_courses(self):
        documents = self._find({}, sort=[('code', ASCENDING)])
        return [CourseCatalogEntry.from_document(self.collection_name, d) for d in documents]

    def _load_program(self, program_id):
        try:
            document = self.db[PROGRAMS].find_one(id_query(program_id))
        except PyMongoError as e:
            raise StoreUnavailableError("Error reading academic_programs", original_error=e) from e
        if document is None:
            return None
        return Program.from_document(PROGRAMS, document)

    def invalidate(self):
        self.cache.invalidate()


class RegistrationStore(MongoStore):
    collection_name = REGISTRATIONS

    def find_active(self, student_id, academic_year, semester):
        documents = self._find({
            'student_id': student_id_match(student_id),
            'academic_year': {'$in': year_variants(academic_year)},
            'semester': int(semester),
        })
        for document in documents:
            registration = CourseRegistration.from_document(self.collection_name, document)
            if registration.is_active():
                return registration
        return None

    def create(self, student_id, academic_year, semester, course_codes,
               status=RegistrationStatus.PENDING):
        registration = CourseRegistration(
            student_id=student_id,
            academic_year=academic_year,
            semester=semester,
            courses=list(course_codes),
            status=status,
        )
        document = registration.model_dump(exclude={'id'}, mode='json')
        document['registered_at'] = datetime.now(timezone.utc)
        result = self.collection.insert_one(document)
        return registration.model_copy(update={'id': str(result.inserted_id)})


class GradeSubmissionStore(MongoStore):
    """Append-only log of lecturer grade submissions"""

    collection_name = GRADE_SUBMISSIONS

    def append(self, submission):
        document = submission.model_dump(exclude={'id'}, mode='json')
        document['submitted_at'] = submission.submitted_at or datetime.now(timezone.utc)
        result = self.collection.insert_one(document)
        logger.info("Stored grade submission %s for %s (%d students)",
                    submission.submission_id, submission.course_code, len(submission.grades))
        return submission.model_copy(update={'id': str(result.inserted_id)})

    def get(self, submission_id):
        document = self._find_one({'submission_id': submission_id})
        if document is None:
            return None
        return GradeSubmission.from_document(self.collection_name, document)

    def list_for_course(self, course_code, academic_year, semester):
        documents = self._find({
            'course_code': course_code.upper(),
            'academic_year': {'$in': year_variants(academic_year)},
            'semester': int(semester),
        }, sort=[('submitted_at', ASCENDING)])
        return [GradeSubmission.from_document(self.collection_name, d) for d in documents]

    def already_graded(self, student_id, course_code, academic_year, semester):
        """True when any non-draft submission already carries this student's grade"""
        for submission in self.list_for_course(course_code, academic_year, semester):
            if submission.status == SubmissionStatus.DRAFT:
                continue
            if any(entry.student_id == student_id for entry in submission.grades):
                return True
        return False

    def advance(self, submission_id, target, actor=None):
        """Move a submission one step along draft -> pending_approval -> approved -> published"""
        submission = self.get(submission_id)
        if submission is None:
            return None

        target = advance_status(submission.status, target)

        update = {'status': target.value, 'updated_at': datetime.now(timezone.utc)}
        if target == SubmissionStatus.APPROVED:
            update['approved_by'] = actor
        result = self.collection.update_one(
            {'submission_id': submission_id, 'status': submission.status.value},
            {'$set': update},
        )
        if result.modified_count == 0:
            # Another actor moved it first
            latest = self.get(submission_id)
            raise InvalidTransitionError(latest.status.value, target.value)

        logger.info("Grade submission %s moved %s -> %s by %s",
                    submission_id, submission.status.value, target.value, actor or 'system')
        return submission.model_copy(update={'status': target, 'approved_by': update.get('approved_by', submission.approved_by)})


class SettingsStore(MongoStore):
    collection_name = SETTINGS

    def get_current_period(self):
        """The academic period an administrator has marked as current"""
        document = self._find_one({'_id': 'current_period'})
        if document is None:
            return None
        try:
            return AcademicPeriod.model_validate(document)
        except ValidationError as e:
            raise RecordShapeError(self.collection_name, 'current_period', original_error=e) from e

    def set_current_period(self, academic_year, semester):
        period = AcademicPeriod(academic_year=academic_year, semester=semester)
        self.collection.update_one(
            {'_id': 'current_period'},
            {'$set': {**period.model_dump(), 'updated_at': datetime.now(timezone.utc)}},
            upsert=True,
        )
        return period
