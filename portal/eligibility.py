"""
Course registration eligibility.

A student may register for a semester once cumulative payments toward the
academic year reach the configured fraction of the annual fee. The check
gates a UI affordance, so every failure becomes a negative decision with a
reason instead of an exception.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from portal.config import SystemConfig
from portal.fees import get_fee_structure
from portal.models import AcademicPeriod

logger = logging.getLogger(__name__)

FEE_STRUCTURE_UNAVAILABLE = "fee structure unavailable"
STUDENT_ID_REQUIRED = "student id is required"
UNABLE_TO_VERIFY = "unable to verify registration eligibility"


@dataclass(frozen=True)
class RegistrationDecision:
    can_register: bool
    reason: Optional[str] = None

    def to_dict(self):
        return {'canRegister': self.can_register, 'reason': self.reason}


@dataclass(frozen=True)
class PaymentProgress:
    amount_paid: float
    fee_total: float
    threshold: float

    @property
    def paid_percentage(self):
        return round(self.amount_paid / self.fee_total * 100, 2) if self.fee_total > 0 else 100.0

    @property
    def outstanding(self):
        return round(max(self.fee_total - self.amount_paid, 0.0), 2)

    @property
    def required_amount(self):
        return round(self.threshold * self.fee_total, 2)

    def to_dict(self):
        return {
            'amount_paid': round(self.amount_paid, 2),
            'fee_total': self.fee_total,
            'paid_percentage': self.paid_percentage,
            'outstanding': self.outstanding,
            'required_amount': self.required_amount,
            'threshold_percentage': round(self.threshold * 100, 2),
        }


def invalid_period(academic_year, semester):
    return f"invalid academic period: {academic_year} semester {semester}"


def meets_payment_threshold(sum_payments, fee_total, threshold=None):
    """True when payments cover at least threshold * fee_total"""
    threshold = SystemConfig.REGISTRATION_THRESHOLD if threshold is None else threshold
    return round(sum_payments, 2) >= round(threshold * fee_total, 2)


def payment_progress(student, period, payment_store, fee_table=None, threshold=None, structure=None):
    """Payment progress for a student toward the period's academic year, or None without fee data"""
    threshold = SystemConfig.REGISTRATION_THRESHOLD if threshold is None else threshold
    if structure is None:
        structure = get_fee_structure(student.level, student.study_mode, table=fee_table)
    if structure is None:
        return None
    payments = payment_store.list_payments(student.id, period.academic_year, period.semester)
    return PaymentProgress(
        amount_paid=sum(p.amount for p in payments),
        fee_total=structure.total,
        threshold=threshold,
    )


def can_register(student_id, academic_year, semester, student_store, payment_store,
                 registration_store=None, fee_table=None, threshold=None):
    """
    Decide whether a student may register for courses in a period.

    Checks, in order: a student id was given, the student exists, fee data
    exists for their level and study mode, the semester exists for that study
    mode, no active registration is already on file for the period, and
    payments meet the threshold.
    """
    if not student_id or not str(student_id).strip():
        return RegistrationDecision(False, STUDENT_ID_REQUIRED)

    threshold = SystemConfig.REGISTRATION_THRESHOLD if threshold is None else threshold

    try:
        period = AcademicPeriod(academic_year=academic_year, semester=semester)
    except ValueError as e:
        logger.info("Rejected eligibility check for %s: %s", student_id, e)
        return RegistrationDecision(False, invalid_period(academic_year, semester))

    try:
        student = student_store.get_student(student_id)
        if student is None:
            return RegistrationDecision(False, "student not found")

        structure = get_fee_structure(student.level, student.study_mode, table=fee_table)
        if structure is None:
            return RegistrationDecision(False, FEE_STRUCTURE_UNAVAILABLE)

        # Regular students pay per semester (two), Weekend per trimester (three)
        if period.semester > len(structure.installments):
            return RegistrationDecision(False, invalid_period(academic_year, semester))

        progress = payment_progress(student, period, payment_store,
                                    threshold=threshold, structure=structure)

        if registration_store is not None:
            existing = registration_store.find_active(student.id, period.academic_year, period.semester)
            if existing is not None:
                return RegistrationDecision(
                    False, f"already registered for {period.label()} ({existing.status.value})"
                )

        allowed = meets_payment_threshold(progress.amount_paid, progress.fee_total, threshold)
        logger.info(
            "Eligibility for %s in %s: paid %.2f of %.2f (%.2f%%), threshold %.0f%% -> %s",
            student_id, period.label(), progress.amount_paid, progress.fee_total,
            progress.paid_percentage, threshold * 100, allowed,
        )
        if allowed:
            return RegistrationDecision(True)
        return RegistrationDecision(
            False,
            f"paid {progress.paid_percentage:.2f}% of fees; {threshold * 100:.0f}% required",
        )

    except Exception as e:
        logger.error("Error checking registration eligibility for %s: %s", student_id, e, exc_info=True)
        return RegistrationDecision(False, UNABLE_TO_VERIFY)
