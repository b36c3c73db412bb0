import logging
import uuid
from datetime import datetime, timezone
from typing import List, Optional, Union

from flask import Blueprint, jsonify, request
from pydantic import BaseModel, Field, ValidationError, field_validator

from portal.exceptions import InvalidTransitionError
from portal.forms import PeriodForm, SubmissionStatusForm
from portal.grading import (
    academic_status,
    class_standing,
    compute_grade,
    get_grade_description,
    semester_gpa,
)
from portal.models import GradeEntry, GradeSubmission, SubmissionStatus, normalize_academic_year
from portal.utils import form_errors, submission_store

logger = logging.getLogger(__name__)

bp = Blueprint('grades', __name__, url_prefix='/grades')

Score = Optional[Union[float, str]]


class ScoreInput(BaseModel):
    student_id: str = Field(..., min_length=1)
    student_name: str = ''
    registration_number: str = ''
    assessment: Score = None
    midsem: Score = None
    exams: Score = None


class SubmissionRequest(BaseModel):
    lecturer_id: str = Field(..., min_length=1)
    course_code: str = Field(..., min_length=1)
    academic_year: str
    semester: int = Field(..., ge=1, le=3)
    grades: List[ScoreInput]

    @field_validator('academic_year')
    @classmethod
    def normalize_year(cls, v):
        return normalize_academic_year(v)


class CreditGrade(BaseModel):
    credits: int = Field(..., ge=0)
    grade: str


def json_object():
    """The request body when it is a JSON object, else None"""
    data = request.get_json(silent=True)
    if data is None:
        return {}
    return data if isinstance(data, dict) else None


def not_an_object():
    return jsonify({'success': False, 'error': 'Request body must be a JSON object'}), 400


def validation_error(e):
    messages = [f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()]
    return jsonify({'success': False, 'error': '; '.join(messages)}), 400


@bp.route('/compute', methods=['POST'])
def compute():
    """Total and letter grade for one set of component scores"""
    data = json_object()
    if data is None:
        return not_an_object()
    try:
        result = compute_grade(data.get('assessment'), data.get('midsem'), data.get('exams'))
    except ValueError as e:
        return jsonify({'success': False, 'error': str(e)}), 400
    body = result.to_dict()
    body['description'] = get_grade_description(result.grade) if result.is_graded else ''
    return jsonify({'success': True, **body})


@bp.route('/gpa', methods=['POST'])
def gpa():
    """Credit-weighted GPA for a list of {credits, grade} entries"""
    data = json_object()
    if data is None:
        return not_an_object()
    try:
        entries = [CreditGrade.model_validate(e) for e in data.get('courses', [])]
    except ValidationError as e:
        return validation_error(e)

    value = semester_gpa([(e.credits, e.grade) for e in entries])
    return jsonify({
        'success': True,
        'gpa': value,
        'total_credits': sum(e.credits for e in entries if e.grade),
        'class_standing': class_standing(value),
        'academic_status': academic_status(value),
    })


@bp.route('/submissions', methods=['POST'])
def submit_grades():
    """Lecturer submission of a course's grades for academic affairs approval"""
    data = json_object()
    if data is None:
        return not_an_object()
    try:
        payload = SubmissionRequest.model_validate(data)
    except ValidationError as e:
        return validation_error(e)

    try:
        store = submission_store()
        entries = []
        skipped = []
        accepted = set()
        for score in payload.grades:
            result = compute_grade(score.assessment, score.midsem, score.exams)
            if not result.is_graded:
                continue
            if score.student_id in accepted or store.already_graded(
                    score.student_id, payload.course_code, payload.academic_year, payload.semester):
                skipped.append(score.student_id)
                continue
            accepted.add(score.student_id)
            entries.append(GradeEntry(
                student_id=score.student_id,
                student_name=score.student_name,
                registration_number=score.registration_number,
                assessment=result.assessment,
                midsem=result.midsem,
                exams=result.exams,
                total=result.total,
                grade=result.grade,
            ))

        if not entries:
            return jsonify({
                'success': False,
                'error': 'No new grades to submit',
                'skipped': skipped,
            }), 400

        submission = store.append(GradeSubmission(
            submission_id=f"grades_{uuid.uuid4().hex}",
            lecturer_id=payload.lecturer_id,
            course_code=payload.course_code,
            academic_year=payload.academic_year,
            semester=payload.semester,
            status=SubmissionStatus.PENDING_APPROVAL,
            grades=entries,
            submitted_at=datetime.now(timezone.utc),
        ))
        return jsonify({
            'success': True,
            'message': f'Grades for {len(entries)} student(s) submitted for approval',
            'submission_id': submission.submission_id,
            'status': submission.status.value,
            'skipped': skipped,
        }), 201
    except ValueError as e:
        return jsonify({'success': False, 'error': str(e)}), 400
    except Exception as e:
        logger.error("Error submitting grades for %s: %s", payload.course_code, e, exc_info=True)
        return jsonify({'success': False, 'error': str(e)}), 500


@bp.route('/submissions/<submission_id>/status', methods=['POST'])
def update_submission_status(submission_id):
    """Approve or publish a pending submission"""
    form = SubmissionStatusForm()
    if not form.validate():
        return form_errors(form)

    try:
        submission = submission_store().advance(submission_id, form.status.data, actor=form.actor.data or None)
    except InvalidTransitionError as e:
        return jsonify({'success': False, 'error': e.message}), 409

    if submission is None:
        return jsonify({'success': False, 'error': 'Submission not found'}), 404
    return jsonify({'success': True, 'submission_id': submission_id, 'status': submission.status.value})


@bp.route('/submissions/<course_code>')
def list_submissions(course_code):
    form = PeriodForm(request.args)
    if not form.validate():
        return form_errors(form)

    submissions = submission_store().list_for_course(course_code, form.academic_year.data, form.semester.data)
    return jsonify({
        'success': True,
        'submissions': [s.model_dump(mode='json', exclude={'id'}) for s in submissions],
    })
