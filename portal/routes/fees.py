import logging

from flask import Blueprint, current_app, jsonify, request

from portal.eligibility import payment_progress
from portal.fees import amount_in_words, format_currency, get_fee_structure, installment_due
from portal.forms import FeeStructureForm, PeriodForm
from portal.models import AcademicPeriod
from portal.utils import fee_table, form_errors, payment_store, student_store

logger = logging.getLogger(__name__)

bp = Blueprint('fees', __name__, url_prefix='/fees')


def structure_to_dict(structure):
    return {
        'level': structure.level,
        'study_mode': structure.study_mode.value,
        'total': structure.total,
        'total_display': format_currency(structure.total),
        'total_in_words': amount_in_words(structure.total),
        'installments': list(structure.installments),
        'installments_display': [format_currency(a) for a in structure.installments],
    }


@bp.route('/structure')
def fee_structure():
    form = FeeStructureForm(request.args)
    if not form.validate():
        return form_errors(form)

    structure = get_fee_structure(form.level.data, form.study_mode.data, table=fee_table())
    if structure is None:
        return jsonify({'success': False, 'error': 'No fee data for this level and study mode'}), 404
    return jsonify({'success': True, 'fee_structure': structure_to_dict(structure)})


@bp.route('/progress/<student_id>')
def fee_progress(student_id):
    """Payment progress toward the academic year's fees"""
    form = PeriodForm(request.args)
    if not form.validate():
        return form_errors(form)

    try:
        student = student_store().get_student(student_id)
        if student is None:
            return jsonify({'success': False, 'error': 'Student not found'}), 404

        period = AcademicPeriod(academic_year=form.academic_year.data, semester=form.semester.data)
        progress = payment_progress(student, period, payment_store(), fee_table=fee_table(),
                                    threshold=current_app.config['REGISTRATION_THRESHOLD'])
        if progress is None:
            return jsonify({'success': False, 'error': 'No fee data for this level and study mode'}), 404

        structure = get_fee_structure(student.level, student.study_mode, table=fee_table())
        return jsonify({
            'success': True,
            'academic_year': period.academic_year,
            'semester': period.semester,
            'due_to_date': installment_due(structure, period.semester),
            **progress.to_dict(),
        })
    except Exception as e:
        logger.error("Error computing fee progress for %s: %s", student_id, e, exc_info=True)
        return jsonify({'success': False, 'error': str(e)}), 500
