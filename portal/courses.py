"""
Program course resolution.

Courses for a registration context come from the program's structured
mapping when it has one, otherwise from filtering the whole catalog. Each
strategy is named and logged so it is visible which one answered.
"""

import logging
import re

from portal.fees import normalize_level
from portal.models import normalize_academic_year, normalize_study_mode

logger = logging.getLogger(__name__)

FIRST_SEMESTER = 'First Semester'
SECOND_SEMESTER = 'Second Semester'
THIRD_TRIMESTER = 'Third Trimester'

SEMESTER_BY_NUMBER = {
    '1': FIRST_SEMESTER,
    '2': SECOND_SEMESTER,
    '3': THIRD_TRIMESTER,
}

ALL_YEARS = 'all'


def normalize_semester(semester):
    """
    Canonical semester label for "1", "first", "First Semester", "Trimester 3" etc.

    Returns the input stripped when it cannot be recognised.
    """
    text = str(semester if semester is not None else '').strip()
    lower = text.lower()
    if lower in SEMESTER_BY_NUMBER:
        return SEMESTER_BY_NUMBER[lower]
    if 'first' in lower:
        return FIRST_SEMESTER
    if 'second' in lower:
        return SECOND_SEMESTER
    if 'third' in lower:
        return THIRD_TRIMESTER
    if 'trimester' in lower or 'semester' in lower:
        number = re.search(r'\d', lower)
        if number and number.group() in SEMESTER_BY_NUMBER:
            return SEMESTER_BY_NUMBER[number.group()]
    return text


def _mode_codes(mode_map, study_mode):
    if not mode_map:
        return []
    if isinstance(mode_map, list):
        return list(mode_map)
    if study_mode is None:
        return [code for codes in mode_map.values() for code in codes]
    for mode_key, codes in mode_map.items():
        if normalize_study_mode(mode_key) == study_mode:
            return list(codes)
    return []


def _year_key(year):
    try:
        return normalize_academic_year(year)
    except ValueError:
        return str(year).strip()


def codes_from_mapping(program, level, semester, year=None, study_mode=None):
    """Course codes the program mapping lists for a level/semester, or None when it has no entry"""
    level_map = program.courses_per_level.get(normalize_level(level))
    if not level_map:
        return None

    canonical = normalize_semester(semester)
    semester_map = None
    for key, value in level_map.items():
        if normalize_semester(key) == canonical:
            semester_map = value
            break
    if semester_map is None:
        return None

    mode = normalize_study_mode(study_mode) if study_mode else None
    codes = []
    if ALL_YEARS in semester_map:
        codes += _mode_codes(semester_map[ALL_YEARS], mode)
    if year:
        wanted = _year_key(year)
        for key, value in semester_map.items():
            if key != ALL_YEARS and _year_key(key) == wanted:
                codes += _mode_codes(value, mode)
    if not codes:
        for key, value in semester_map.items():
            if key != ALL_YEARS:
                codes += _mode_codes(value, mode)
    return codes


def program_names_match(course_program, program_name):
    a = (course_program or '').strip().lower()
    b = (program_name or '').strip().lower()
    if not a or not b:
        return False
    return a in b or b in a


def filter_catalog(catalog, program_name, level, semester):
    level_key = normalize_level(level)
    canonical = normalize_semester(semester)
    return [
        course for course in catalog
        if program_names_match(course.program, program_name)
        and normalize_level(course.level) == level_key
        and normalize_semester(course.semester) == canonical
    ]


def _dedupe(courses):
    seen = set()
    unique = []
    for course in courses:
        if course.code in seen:
            continue
        seen.add(course.code)
        unique.append(course)
    return unique


def structured_mapping_strategy(program, catalog, level, semester, year, study_mode):
    if not program.has_mapping():
        return None
    codes = codes_from_mapping(program, level, semester, year, study_mode)
    if codes is None:
        return None
    by_code = {course.code: course for course in catalog}
    missing = [code for code in codes if code.upper() not in by_code]
    if missing:
        logger.warning("Program %s maps courses missing from the catalog: %s",
                       program.id, ', '.join(missing))
    return [by_code[code.upper()] for code in codes if code.upper() in by_code]


def catalog_filter_strategy(program, catalog, level, semester, year, study_mode):
    if program.has_mapping():
        return None
    return filter_catalog(catalog, program.name, level, semester)


# Tried in order; the first strategy that returns a list answers.
RESOLUTION_STRATEGIES = [
    ('structured-mapping', structured_mapping_strategy),
    ('catalog-filter', catalog_filter_strategy),
]


def get_program_courses(program_id, level, semester, catalog_store, year=None, study_mode=None):
    """
    Catalog entries that apply to a program, level and semester.

    Never raises: unknown programs and store failures give an empty list.
    """
    try:
        program = catalog_store.get_program(program_id)
        if program is None:
            logger.info("Program %s not found, no courses resolved", program_id)
            return []
        catalog = catalog_store.list_courses()

        for name, strategy in RESOLUTION_STRATEGIES:
            courses = strategy(program, catalog, level, semester, year, study_mode)
            if courses is None:
                logger.debug("Strategy %s did not apply to program %s", name, program_id)
                continue
            courses = _dedupe(courses)
            logger.info("Resolved %d courses for %s level %s %s via %s",
                        len(courses), program.name, level, normalize_semester(semester), name)
            return courses

        logger.info("No course mapping for %s level %s %s",
                    program.name, level, normalize_semester(semester))
        return []
    except Exception as e:
        logger.error("Error resolving courses for program %s: %s", program_id, e, exc_info=True)
        return []
