"""
Unit tests for program course resolution
"""
import pytest

from conftest import add_course, add_program
from portal.courses import get_program_courses, normalize_semester


class TestNormalizeSemester:

    @pytest.mark.parametrize('raw,expected', [
        ('1', 'First Semester'),
        ('first', 'First Semester'),
        ('First Semester', 'First Semester'),
        ('FIRST', 'First Semester'),
        (2, 'Second Semester'),
        ('second semester', 'Second Semester'),
        ('Semester 2', 'Second Semester'),
        ('3', 'Third Trimester'),
        ('Third Trimester', 'Third Trimester'),
        ('Trimester 1', 'First Semester'),
    ])
    def test_equivalent_spellings(self, raw, expected):
        assert normalize_semester(raw) == expected

    def test_unrecognised_is_returned_as_is(self):
        assert normalize_semester(' Summer ') == 'Summer'


class TestStructuredMapping:

    @pytest.fixture(autouse=True)
    def seed(self, db):
        for code in ['AGM251', 'AGM253', 'AGM255', 'AGM257']:
            add_course(db, code)
        add_program(db, 'prog1', 'BSc. Agribusiness Management', {
            '200': {
                '1': {
                    'all': {'Regular': ['AGM251', 'AGM253']},
                },
                'Second Semester': {
                    '2025/2026': {'Regular': ['AGM255'], 'Weekend': ['AGM257']},
                    '2024-2025': ['AGM251'],
                },
            },
        })

    def test_all_year_key_matches_any_year(self, catalog_store):
        for year in [None, '2025/2026', '2019/2020']:
            courses = get_program_courses('prog1', '200', '1', catalog_store, year=year)
            assert [c.code for c in courses] == ['AGM251', 'AGM253']

    def test_semester_label_variants(self, catalog_store):
        courses = get_program_courses('prog1', 'Level 200', 'First Semester', catalog_store)
        assert [c.code for c in courses] == ['AGM251', 'AGM253']

    def test_explicit_year_and_mode(self, catalog_store):
        courses = get_program_courses('prog1', '200', '2', catalog_store,
                                      year='2025-2026', study_mode='weekend')
        assert [c.code for c in courses] == ['AGM257']

    def test_bare_code_list_for_a_year(self, catalog_store):
        courses = get_program_courses('prog1', '200', 'second', catalog_store, year='2024/2025')
        assert [c.code for c in courses] == ['AGM251']

    def test_unknown_year_merges_all_years(self, catalog_store):
        courses = get_program_courses('prog1', '200', '2', catalog_store, year='2030/2031')
        assert {c.code for c in courses} == {'AGM255', 'AGM257', 'AGM251'}

    def test_missing_level_gives_empty_list(self, catalog_store):
        assert get_program_courses('prog1', '400', '1', catalog_store) == []

    def test_unknown_program_gives_empty_list(self, catalog_store):
        assert get_program_courses('nope', '200', '1', catalog_store) == []


class TestCatalogFallback:

    @pytest.fixture(autouse=True)
    def seed(self, db):
        add_program(db, 'prog2', 'BSc. Sustainable Agriculture')
        add_course(db, 'SAG201', level='200', semester='1', program='BSc. Sustainable Agriculture')
        add_course(db, 'SAG203', level='200', semester='First Semester', program='Sustainable Agriculture')
        add_course(db, 'SAG202', level='200', semester='Second Semester', program='BSc. Sustainable Agriculture')
        add_course(db, 'SAG301', level='300', semester='1', program='BSc. Sustainable Agriculture')
        add_course(db, 'ENV201', level='200', semester='1', program='BSc. Environmental Science')

    def test_filters_by_program_level_and_semester(self, catalog_store):
        courses = get_program_courses('prog2', '200', 'first', catalog_store)
        assert [c.code for c in courses] == ['SAG201', 'SAG203']


class TestCaching:

    def test_catalog_reads_are_cached(self, db, catalog_store):
        add_course(db, 'AGM251')
        add_program(db, 'prog1', 'Agribusiness', {'200': {'1': {'all': ['AGM251']}}})
        get_program_courses('prog1', '200', '1', catalog_store)
        add_course(db, 'AGM253')
        db['academic_programs'].update_one({'_id': 'prog1'}, {'$set': {
            'courses_per_level': {'200': {'1': {'all': ['AGM251', 'AGM253']}}}}})

        cached = get_program_courses('prog1', '200', '1', catalog_store)
        assert [c.code for c in cached] == ['AGM251']

        catalog_store.invalidate()
        fresh = get_program_courses('prog1', '200', '1', catalog_store)
        assert [c.code for c in fresh] == ['AGM251', 'AGM253']

    def test_malformed_catalog_fails_closed(self, db, catalog_store):
        add_program(db, 'prog1', 'Agribusiness', {'200': {'1': {'all': ['AGM251']}}})
        db['academic_courses'].insert_one({'code': 'BAD1'})
        assert get_program_courses('prog1', '200', '1', catalog_store) == []
