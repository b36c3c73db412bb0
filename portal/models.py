"""
Record types decoded from the document store.

Every document read from MongoDB passes through one of these models; a
document that does not fit is rejected with RecordShapeError instead of
being read field by field with defaults.
"""

import re
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from portal.exceptions import RecordShapeError


# ============== Enums ==============

class StudyMode(str, Enum):
    REGULAR = "Regular"
    WEEKEND = "Weekend"


class RegistrationStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class SubmissionStatus(str, Enum):
    DRAFT = "draft"
    PENDING_APPROVAL = "pending_approval"
    APPROVED = "approved"
    PUBLISHED = "published"


ACADEMIC_YEAR_PATTERN = re.compile(r'^(\d{4})\s*[/-]\s*(\d{4})$')


def normalize_academic_year(value):
    """Return "YYYY/YYYY" for either "YYYY/YYYY" or "YYYY-YYYY"."""
    match = ACADEMIC_YEAR_PATTERN.match(str(value).strip())
    if not match:
        raise ValueError(f"Invalid academic year: {value!r}")
    start, end = match.groups()
    if int(end) != int(start) + 1:
        raise ValueError(f"Academic year must span consecutive years: {value!r}")
    return f"{start}/{end}"


def normalize_study_mode(value):
    if isinstance(value, StudyMode):
        return value
    text = str(value or '').strip().lower()
    for mode in StudyMode:
        if text == mode.value.lower():
            return mode
    return None


class Record(BaseModel):
    model_config = ConfigDict(extra='ignore', populate_by_name=True)

    @classmethod
    def from_document(cls, collection, document):
        data = dict(document)
        document_id = data.pop('_id', None)
        if document_id is not None and 'id' not in data:
            data['id'] = str(document_id)
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise RecordShapeError(collection, document_id, original_error=e) from e


# ============== Records ==============

class AcademicPeriod(BaseModel):
    academic_year: str
    semester: int = Field(..., ge=1, le=3)

    @field_validator('academic_year')
    @classmethod
    def normalize_year(cls, v):
        return normalize_academic_year(v)

    def label(self):
        return f"{self.academic_year} - Semester {self.semester}"


class Student(Record):
    id: str
    program: str
    program_id: Optional[str] = None
    level: str
    study_mode: StudyMode = StudyMode.REGULAR
    registration_number: str

    @field_validator('level', mode='before')
    @classmethod
    def level_as_text(cls, v):
        return str(v).strip()

    @field_validator('study_mode', mode='before')
    @classmethod
    def parse_mode(cls, v):
        mode = normalize_study_mode(v)
        if mode is None:
            raise ValueError(f"Unknown study mode: {v!r}")
        return mode


class FeeStructure(BaseModel):
    model_config = ConfigDict(frozen=True)

    level: str
    study_mode: StudyMode
    total: float = Field(..., gt=0)
    installments: tuple

    @field_validator('installments', mode='before')
    @classmethod
    def as_tuple(cls, v):
        return tuple(float(amount) for amount in v)


class PaymentRecord(Record):
    id: Optional[str] = None
    student_id: str
    amount: float = Field(..., gt=0)
    academic_year: str
    semester: Optional[int] = Field(None, ge=1, le=3)
    paid_at: Optional[datetime] = None

    @field_validator('student_id', mode='before')
    @classmethod
    def student_id_as_text(cls, v):
        return v if v is None else str(v)

    @field_validator('academic_year')
    @classmethod
    def normalize_year(cls, v):
        return normalize_academic_year(v)


class CourseCatalogEntry(Record):
    id: Optional[str] = None
    code: str = Field(..., min_length=1)
    title: str
    credits: int = Field(0, ge=0)
    level: str
    semester: str
    program: str = ''

    @field_validator('code')
    @classmethod
    def uppercase_code(cls, v):
        return v.upper().strip()

    @field_validator('level', 'semester', mode='before')
    @classmethod
    def as_text(cls, v):
        return str(v).strip()


# level -> semester -> year ("all" or "YYYY/YYYY") -> mode -> codes, or a bare code list
CourseMapping = Dict[str, Dict[str, Dict[str, Union[List[str], Dict[str, List[str]]]]]]


class Program(Record):
    id: str
    name: str
    courses_per_level: CourseMapping = Field(default_factory=dict)

    def has_mapping(self):
        return bool(self.courses_per_level)


class CourseRegistration(Record):
    id: Optional[str] = None
    student_id: str
    academic_year: str
    semester: int = Field(..., ge=1, le=3)
    courses: List[str] = Field(default_factory=list)
    status: RegistrationStatus = RegistrationStatus.PENDING

    @field_validator('student_id', mode='before')
    @classmethod
    def student_id_as_text(cls, v):
        return v if v is None else str(v)

    @field_validator('academic_year')
    @classmethod
    def normalize_year(cls, v):
        return normalize_academic_year(v)

    def is_active(self):
        return self.status in (RegistrationStatus.PENDING, RegistrationStatus.APPROVED)


class GradeEntry(BaseModel):
    student_id: str
    student_name: str = ''
    registration_number: str = ''
    assessment: Optional[float] = None
    midsem: Optional[float] = None
    exams: Optional[float] = None
    total: float = 0
    grade: str = ''


class GradeSubmission(Record):
    id: Optional[str] = None
    submission_id: str
    lecturer_id: str
    course_code: str
    academic_year: str
    semester: int = Field(..., ge=1, le=3)
    status: SubmissionStatus = SubmissionStatus.DRAFT
    grades: List[GradeEntry] = Field(default_factory=list)
    submitted_at: Optional[datetime] = None
    approved_by: Optional[str] = None

    @field_validator('academic_year')
    @classmethod
    def normalize_year(cls, v):
        return normalize_academic_year(v)

    @field_validator('course_code')
    @classmethod
    def uppercase_code(cls, v):
        return v.upper().strip()
