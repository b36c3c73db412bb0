from flask import Blueprint, jsonify, request

from portal.courses import get_program_courses, normalize_semester
from portal.forms import ProgramCoursesForm
from portal.utils import catalog_store, form_errors

bp = Blueprint('courses', __name__, url_prefix='/courses')


@bp.route('/program/<program_id>')
def program_courses(program_id):
    """Courses a program offers at a level and semester"""
    form = ProgramCoursesForm(request.args)
    if not form.validate():
        return form_errors(form)

    courses = get_program_courses(
        program_id,
        form.level.data,
        form.semester.data,
        catalog_store(),
        year=form.year.data or None,
        study_mode=form.study_mode.data or None,
    )
    return jsonify({
        'success': True,
        'semester': normalize_semester(form.semester.data),
        'total_credits': sum(c.credits for c in courses),
        'courses': [c.model_dump(exclude={'id'}) for c in courses],
    })


@bp.route('/cache', methods=['DELETE'])
def clear_cache():
    """Drop cached catalog and program reads after an administrative edit"""
    store = catalog_store()
    size = len(store.cache)
    store.invalidate()
    return jsonify({'success': True, 'cleared': size})
