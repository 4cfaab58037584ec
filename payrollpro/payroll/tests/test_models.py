from decimal import Decimal

import pytest

from payrollpro.payroll.exceptions import InvalidStateError
from payrollpro.payroll.exceptions import NegativeNetSalaryError
from payrollpro.payroll.exceptions import PayrollValidationError
from payrollpro.payroll.models import PayrollAdjustment
from payrollpro.payroll.models import PayrollGeneralSetting
from payrollpro.payroll.models import PayrollRecord
from payrollpro.payroll.tests.factories import PayrollRecordFactory
from payrollpro.payroll.tests.factories import SalaryStructureFactory

pytestmark = pytest.mark.django_db


class TestPayrollGeneralSetting:
    def test_load_is_a_singleton(self):
        first = PayrollGeneralSetting.load()
        first.fixed_day_divisor = 26
        first.save()
        assert PayrollGeneralSetting.load().fixed_day_divisor == 26
        assert PayrollGeneralSetting.objects.count() == 1

    def test_days_basis(self):
        policy = PayrollGeneralSetting.load()
        assert policy.days_basis(2024, 2) == 30
        policy.lop_day_basis = PayrollGeneralSetting.LopDayBasis.ACTUAL_DAYS
        assert policy.days_basis(2024, 2) == 29


def test_structure_exposes_gross_and_ctc():
    structure = SalaryStructureFactory()
    assert structure.gross == Decimal("85000.00")
    assert structure.yearly_ctc == Decimal("1020000.00")


class TestAdjustments:
    def test_bonus_raises_net(self):
        record = PayrollRecordFactory()
        record.add_adjustment("Bonus", "5000", "Diwali bonus")
        record.refresh_from_db()
        assert record.total_adjustment == Decimal("5000.00")
        assert record.net_salary == Decimal("83162.50")
        assert record.adjustments.get().signed_amount == Decimal("5000.00")

    def test_penalty_that_would_go_negative_is_rejected(self):
        record = PayrollRecordFactory()
        with pytest.raises(NegativeNetSalaryError):
            record.add_adjustment("Penalty", "100000")
        record.refresh_from_db()
        assert record.net_salary == Decimal("78162.50")
        assert record.total_adjustment == Decimal("0.00")
        assert not PayrollAdjustment.objects.filter(record=record).exists()

    def test_amount_must_be_positive(self):
        record = PayrollRecordFactory()
        with pytest.raises(PayrollValidationError):
            record.add_adjustment("Bonus", "0")

    def test_description_length_limited(self):
        record = PayrollRecordFactory()
        with pytest.raises(PayrollValidationError):
            record.add_adjustment("Bonus", "10", "x" * 201)

    def test_only_pending_records_accept_adjustments(self):
        record = PayrollRecordFactory(status=PayrollRecord.Status.APPROVED)
        with pytest.raises(InvalidStateError):
            record.add_adjustment("Bonus", "10")


class TestLifecycle:
    def test_approve_then_revoke(self, payroll_admin):
        record = PayrollRecordFactory()
        record.approve(actor=payroll_admin)
        assert record.status == PayrollRecord.Status.APPROVED
        assert record.approved_by == payroll_admin
        record.revoke()
        record.refresh_from_db()
        assert record.status == PayrollRecord.Status.PENDING
        assert record.approved_at is None

    def test_cannot_approve_twice(self):
        record = PayrollRecordFactory(status=PayrollRecord.Status.APPROVED)
        with pytest.raises(InvalidStateError):
            record.approve()

    def test_revoke_requires_approved(self):
        record = PayrollRecordFactory()
        with pytest.raises(InvalidStateError):
            record.revoke()

    def test_mark_paid_requires_approved(self):
        record = PayrollRecordFactory()
        with pytest.raises(InvalidStateError):
            record.mark_paid("TXN-1")

    def test_mark_paid_records_payslip(self):
        record = PayrollRecordFactory(status=PayrollRecord.Status.APPROVED)
        record.mark_paid("TXN-1", payslip_url="http://x/p.pdf", payslip_path="p.pdf")
        record.refresh_from_db()
        assert record.status == PayrollRecord.Status.PAID
        assert record.payslip_generated is True
        assert record.paid_at is not None

    def test_paid_record_is_terminal(self):
        record = PayrollRecordFactory(status=PayrollRecord.Status.PAID)
        for transition in (record.approve, record.revoke, record.cancel):
            with pytest.raises(InvalidStateError):
                transition()

    def test_restore_payment_state(self):
        record = PayrollRecordFactory(status=PayrollRecord.Status.APPROVED)
        snapshot = record.payment_state()
        record.mark_paid("TXN-2", payslip_url="http://x/p.pdf", payslip_path="p.pdf")
        record.restore_payment_state(snapshot)
        record.refresh_from_db()
        assert record.status == PayrollRecord.Status.APPROVED
        assert record.transaction_id == ""
        assert record.payslip_generated is False


def test_summary_totals():
    PayrollRecordFactory()
    PayrollRecordFactory(status=PayrollRecord.Status.APPROVED)
    summary = PayrollRecord.objects.for_period("2024-03").summary()
    assert summary["count"] == 2
    assert summary["total_net"] == Decimal("156325.00")
    assert summary["by_status"]["Pending"] == 1
    assert summary["by_status"]["Approved"] == 1
