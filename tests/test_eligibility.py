"""
Unit tests for course registration eligibility
"""
from bson import ObjectId
import pytest

from conftest import LETTER_FEE_TABLE, add_payment, add_student
from portal.eligibility import (
    FEE_STRUCTURE_UNAVAILABLE,
    STUDENT_ID_REQUIRED,
    UNABLE_TO_VERIFY,
    can_register,
    meets_payment_threshold,
)
from portal.exceptions import StoreUnavailableError
from portal.models import RegistrationStatus


def check(student_store, payment_store, student_id='stu1', academic_year='2025/2026', semester=1, **kwargs):
    kwargs.setdefault('fee_table', LETTER_FEE_TABLE)
    return can_register(student_id, academic_year, semester,
                        student_store=student_store, payment_store=payment_store, **kwargs)


class TestThresholdRule:

    def test_just_above_seventy_percent(self):
        assert meets_payment_threshold(3020, 4310.00, 0.7)

    def test_just_below_seventy_percent(self):
        assert not meets_payment_threshold(3000, 4310.00, 0.7)

    def test_exactly_at_threshold(self):
        assert meets_payment_threshold(3017, 4310.00, 0.7)

    def test_monotonic_in_payments(self):
        results = [meets_payment_threshold(amount, 4310.00, 0.7) for amount in range(0, 5000, 50)]
        first_true = results.index(True)
        assert all(results[first_true:])


class TestCanRegister:

    def test_paid_enough(self, db, student_store, payment_store):
        add_student(db)
        add_payment(db, 'stu1', 2000)
        add_payment(db, 'stu1', 1020)
        decision = check(student_store, payment_store)
        assert decision.can_register is True
        assert decision.reason is None

    def test_paid_too_little(self, db, student_store, payment_store):
        add_student(db)
        add_payment(db, 'stu1', 3000)
        decision = check(student_store, payment_store)
        assert decision.can_register is False
        assert '70%' in decision.reason

    def test_new_payment_is_reflected(self, db, student_store, payment_store):
        add_student(db)
        add_payment(db, 'stu1', 3000)
        assert not check(student_store, payment_store).can_register
        add_payment(db, 'stu1', 20)
        assert check(student_store, payment_store).can_register

    def test_payments_for_other_years_do_not_count(self, db, student_store, payment_store):
        add_student(db)
        add_payment(db, 'stu1', 4000, academic_year='2024/2025')
        assert not check(student_store, payment_store).can_register

    def test_year_spellings_are_equivalent(self, db, student_store, payment_store):
        add_student(db)
        add_payment(db, 'stu1', 3100, academic_year='2025-2026')
        assert check(student_store, payment_store, academic_year='2025/2026').can_register

    def test_later_semester_payments_do_not_count_early(self, db, student_store, payment_store):
        add_student(db)
        add_payment(db, 'stu1', 3100, semester=2)
        assert not check(student_store, payment_store, semester=1).can_register
        assert check(student_store, payment_store, semester=2).can_register

    def test_threshold_is_configurable(self, db, student_store, payment_store):
        add_student(db)
        add_payment(db, 'stu1', 2200)
        assert not check(student_store, payment_store).can_register
        assert check(student_store, payment_store, threshold=0.5).can_register

    @pytest.mark.parametrize('student_id', ['', None, '   '])
    def test_missing_student_id(self, student_store, payment_store, student_id):
        decision = check(student_store, payment_store, student_id=student_id)
        assert decision.can_register is False
        assert decision.reason == STUDENT_ID_REQUIRED

    def test_unknown_student(self, student_store, payment_store):
        decision = check(student_store, payment_store, student_id='ghost')
        assert decision.can_register is False
        assert decision.reason == 'student not found'

    def test_missing_fee_structure(self, db, student_store, payment_store):
        add_student(db, study_mode='Weekend')
        add_payment(db, 'stu1', 9000)
        decision = check(student_store, payment_store)
        assert decision.can_register is False
        assert decision.reason == FEE_STRUCTURE_UNAVAILABLE

    def test_invalid_period(self, db, student_store, payment_store):
        add_student(db)
        decision = check(student_store, payment_store, academic_year='2025')
        assert decision.can_register is False
        assert 'invalid academic period' in decision.reason

    def test_third_semester_is_invalid_for_regular_students(self, db, student_store, payment_store):
        add_student(db)
        add_payment(db, 'stu1', 4310)
        decision = check(student_store, payment_store, semester=3)
        assert decision.can_register is False
        assert 'invalid academic period' in decision.reason

    def test_third_trimester_is_valid_for_weekend_students(self, db, student_store, payment_store):
        add_student(db, study_mode='Weekend')
        add_payment(db, 'stu1', 6000)
        assert check(student_store, payment_store, semester=3, fee_table=None).can_register

    def test_payments_stored_against_object_id(self, db, student_store, payment_store):
        oid = ObjectId()
        db['students'].insert_one({'_id': oid, 'program': 'BSc. Agriculture', 'level': '100',
                                   'study_mode': 'Regular', 'registration_number': 'UCAES2'})
        add_payment(db, oid, 4310)
        decision = check(student_store, payment_store, student_id=str(oid))
        assert decision.can_register is True

    def test_existing_registration_blocks(self, db, student_store, payment_store, registration_store):
        add_student(db)
        add_payment(db, 'stu1', 4310)
        registration_store.create('stu1', '2025/2026', 1, ['AGM151'])
        decision = check(student_store, payment_store, registration_store=registration_store)
        assert decision.can_register is False
        assert 'already registered' in decision.reason

    def test_rejected_registration_does_not_block(self, db, student_store, payment_store, registration_store):
        add_student(db)
        add_payment(db, 'stu1', 4310)
        registration_store.create('stu1', '2025/2026', 1, ['AGM151'], status=RegistrationStatus.REJECTED)
        assert check(student_store, payment_store, registration_store=registration_store).can_register

    def test_malformed_payment_fails_closed(self, db, student_store, payment_store):
        add_student(db)
        db['payments'].insert_one({'student_id': 'stu1', 'academic_year': '2025/2026', 'amount': 'lots'})
        decision = check(student_store, payment_store)
        assert decision.can_register is False
        assert decision.reason == UNABLE_TO_VERIFY

    def test_store_failure_never_raises(self, payment_store):
        class BrokenStudentStore:
            def get_student(self, student_id):
                raise StoreUnavailableError("connection refused")

        decision = check(BrokenStudentStore(), payment_store)
        assert decision.can_register is False
        assert decision.reason == UNABLE_TO_VERIFY

    def test_default_fee_table(self, db, student_store, payment_store):
        add_student(db, level='Level 100')
        add_payment(db, 'stu1', 4865)
        assert check(student_store, payment_store, fee_table=None).can_register
