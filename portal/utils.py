from flask import current_app, jsonify

from portal.cache import TTLCache
from portal.stores import (
    CourseCatalogStore,
    GradeSubmissionStore,
    PaymentStore,
    RegistrationStore,
    SettingsStore,
    StudentStore,
)


def get_db():
    return current_app.extensions['portal_db']


def student_store():
    return StudentStore(get_db())


def payment_store():
    return PaymentStore(get_db())


def registration_store():
    return RegistrationStore(get_db())


def submission_store():
    return GradeSubmissionStore(get_db())


def settings_store():
    return SettingsStore(get_db())


def catalog_store():
    """Catalog store sharing one TTL cache for the life of the app"""
    cache = current_app.extensions.get('portal_catalog_cache')
    if cache is None:
        cache = TTLCache(ttl=current_app.config['CACHE_TTL'])
        current_app.extensions['portal_catalog_cache'] = cache
    return CourseCatalogStore(get_db(), cache=cache)


def fee_table():
    return current_app.config['FEE_STRUCTURES']


def form_errors(form, status=400):
    """JSON error response for a form that failed validation"""
    messages = []
    for field, errors in form.errors.items():
        for error in errors:
            messages.append(f"{field}: {error}")
    return jsonify({'success': False, 'error': '; '.join(messages)}), status
