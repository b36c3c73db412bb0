import logging

from flask import Blueprint, current_app, jsonify, request
from werkzeug.datastructures import MultiDict

from portal.eligibility import can_register
from portal.forms import PeriodForm
from portal.utils import (
    fee_table,
    form_errors,
    payment_store,
    registration_store,
    settings_store,
    student_store,
)

logger = logging.getLogger(__name__)

bp = Blueprint('registration', __name__, url_prefix='/registration')


def period_args():
    """Query args, falling back to the administrator's current period"""
    args = MultiDict(request.args)
    if not args.get('academic_year') or not args.get('semester'):
        current = settings_store().get_current_period()
        if current is not None:
            if not args.get('academic_year'):
                args['academic_year'] = current.academic_year
            if not args.get('semester'):
                args['semester'] = str(current.semester)
    return args


@bp.route('/current-period')
def current_period():
    try:
        period = settings_store().get_current_period()
        if period is None:
            return jsonify({'success': False, 'error': 'No current academic period set'}), 404
        return jsonify({'success': True, 'academic_year': period.academic_year, 'semester': period.semester})
    except Exception as e:
        logger.error("Error loading current period: %s", e, exc_info=True)
        return jsonify({'success': False, 'error': str(e)}), 500


@bp.route('/eligibility/<student_id>')
def eligibility(student_id):
    """Whether a student may register for courses in a period"""
    try:
        form = PeriodForm(period_args())
    except Exception as e:
        logger.error("Error resolving period for %s: %s", student_id, e, exc_info=True)
        return jsonify({'success': False, 'error': 'Unable to resolve academic period'}), 500
    if not form.validate():
        return form_errors(form)

    decision = can_register(
        student_id,
        form.academic_year.data,
        form.semester.data,
        student_store=student_store(),
        payment_store=payment_store(),
        registration_store=registration_store(),
        fee_table=fee_table(),
        threshold=current_app.config['REGISTRATION_THRESHOLD'],
    )
    return jsonify({'success': True, **decision.to_dict()})
