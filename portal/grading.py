import math
from dataclasses import dataclass

from portal.config import SystemConfig
from portal.exceptions import InvalidTransitionError
from portal.models import SubmissionStatus

# Grade scale and definitions
GRADE_DESCRIPTIONS = {
    'A': 'Excellent',
    'B+': 'Very Good',
    'B': 'Good',
    'C+': 'Average',
    'C': 'Fair',
    'D+': 'Barely Satisfactory',
    'D': 'Weak Pass',
    'E': 'Fail',
    'F': 'Fail',
}

UNGRADED = ''


@dataclass(frozen=True)
class GradeResult:
    assessment: float
    midsem: float
    exams: float
    total: float
    grade: str

    @property
    def is_graded(self):
        return self.grade != UNGRADED

    def to_dict(self):
        return {
            'assessment': self.assessment,
            'midsem': self.midsem,
            'exams': self.exams,
            'total': self.total,
            'grade': self.grade,
            'remarks': get_remarks(self.grade) if self.is_graded else '',
        }


def _is_unset(value):
    return value is None or (isinstance(value, str) and value.strip() == '')


def clamp_component(value, component):
    """
    Component score as a number within its 0..cap range; unset counts as 0.

    Raises ValueError for text that is not a number and for NaN or infinity.
    """
    if _is_unset(value):
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValueError(f"{component} score must be a number, got {value!r}")
    if not math.isfinite(number):
        raise ValueError(f"{component} score must be a finite number, got {value!r}")
    return max(0.0, min(float(SystemConfig.COMPONENT_LIMITS[component]), number))


def calculate_grade(total):
    """Letter grade for a 0-100 total"""
    if total is None:
        return None
    for grade, minimum in SystemConfig.GRADE_CUTOFFS:
        if total >= minimum:
            return grade
    return 'F'


def compute_grade(assessment, midsem, exams):
    """
    Total and letter grade from the three component scores.

    A component left empty counts as zero, but when all three are empty no
    grade is assigned, so "not yet graded" stays distinct from an F.
    """
    values = {'assessment': assessment, 'midsem': midsem, 'exams': exams}
    clamped = {name: clamp_component(value, name) for name, value in values.items()}
    total = round(sum(clamped.values()), 2)

    if all(_is_unset(value) for value in values.values()):
        grade = UNGRADED
    else:
        grade = calculate_grade(total)

    return GradeResult(total=total, grade=grade, **clamped)


def grade_rank(grade):
    """Higher is better; ungraded and unknown letters rank below F"""
    letters = [letter for letter, _ in reversed(SystemConfig.GRADE_CUTOFFS)]
    if grade in letters:
        return letters.index(grade)
    return -1


def get_grade_description(grade):
    return GRADE_DESCRIPTIONS.get(grade, 'Unknown')


def is_passing_grade(grade):
    return grade in SystemConfig.PASSING_GRADES


def get_remarks(grade):
    """Get remarks based on grade - either 'Proceed' or 'Repeat'"""
    if is_passing_grade(grade):
        return 'Proceed'
    else:
        return 'Repeat'


def grade_point(grade):
    return SystemConfig.GRADE_POINTS.get(grade, 0.0)


def semester_gpa(entries):
    """
    Credit-weighted GPA over (credits, grade) pairs.

    Ungraded entries are skipped; returns 0.0 when nothing is graded.
    """
    total_credits = 0
    total_points = 0.0
    for credits, grade in entries:
        if grade == UNGRADED or not credits:
            continue
        total_credits += credits
        total_points += credits * grade_point(grade)
    if total_credits == 0:
        return 0.0
    return round(total_points / total_credits, 2)


def _band(value, bands):
    for minimum, label in bands:
        if value >= minimum:
            return label
    return bands[-1][1]


def class_standing(gpa):
    return _band(gpa, SystemConfig.CLASS_STANDINGS)


def academic_status(gpa):
    return _band(gpa, SystemConfig.ACADEMIC_STATUSES)


# Lecturer submits, academic affairs approves, then publishes
WORKFLOW = [
    SubmissionStatus.DRAFT,
    SubmissionStatus.PENDING_APPROVAL,
    SubmissionStatus.APPROVED,
    SubmissionStatus.PUBLISHED,
]


def next_status(current):
    current = SubmissionStatus(current)
    index = WORKFLOW.index(current)
    return WORKFLOW[index + 1] if index + 1 < len(WORKFLOW) else None


def advance_status(current, target):
    """Validate a single forward step in the submission workflow"""
    current = SubmissionStatus(current)
    target = SubmissionStatus(target)
    if next_status(current) != target:
        raise InvalidTransitionError(current.value, target.value)
    return target
