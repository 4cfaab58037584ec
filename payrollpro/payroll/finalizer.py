"""Paying approved payroll records.

Paying a record renders its payslip, stores it, and moves the record to
Paid. Those three steps run as a compensating pipeline: if any of them
fails, the completed ones are undone in reverse order and the record is
left Approved with no payslip attached. The payment notification runs
once the payment commits and can fail without affecting it.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from dataclasses import field
from typing import Any
from typing import Protocol

from django.conf import settings
from django.core.files.base import ContentFile
from django.core.files.storage import default_storage
from django.core.mail import EmailMultiAlternatives
from django.db import transaction
from django.template.loader import render_to_string
from django.utils import timezone

from payrollpro.audit.utils import log_action
from payrollpro.notifications.models import Notification
from payrollpro.notifications.services import notify_user
from payrollpro.realtime.events.notifications import publish_payroll_event

from .exceptions import ArtifactStorageError
from .exceptions import InvalidStateError
from .exceptions import NotificationDeliveryError
from .exceptions import PayrollError
from .exceptions import RecordNotFound
from .models import PayrollRecord
from .payslip import PayslipRenderer
from .payslip import payslip_filename
from .periods import coerce_period
from .periods import format_period
from .services import get_record

logger = logging.getLogger(__name__)


@dataclass
class Step:
    name: str
    action: Callable[[], Any]
    compensation: Callable[[], Any] | None = None


class CompensatingPipeline:
    """Run steps in order; on failure undo the completed ones in reverse."""

    def __init__(self, steps: list[Step]):
        self.steps = steps

    def run(self) -> None:
        completed: list[Step] = []
        for step in self.steps:
            try:
                step.action()
            except Exception:
                logger.warning("Step %r failed; compensating", step.name)
                self._compensate(completed)
                raise
            completed.append(step)

    def _compensate(self, completed: list[Step]) -> None:
        for step in reversed(completed):
            if step.compensation is None:
                continue
            try:
                step.compensation()
            except Exception:
                logger.exception("Compensation for step %r failed", step.name)


@dataclass(frozen=True)
class StoredArtifact:
    path: str
    url: str


class PayslipStorage:
    """Persist payslip PDFs through a Django storage backend."""

    def __init__(self, storage=None, upload_dir: str | None = None):
        self.storage = storage or default_storage
        self.upload_dir = upload_dir or settings.PAYROLL.get(
            "PAYSLIP_UPLOAD_DIR", "payslips"
        )

    def save(self, name: str, content: bytes) -> StoredArtifact:
        try:
            path = self.storage.save(f"{self.upload_dir}/{name}", ContentFile(content))
        except Exception as exc:
            msg = f"Could not store payslip {name}: {exc}"
            raise ArtifactStorageError(msg) from exc
        try:
            url = self.storage.url(path)
        except Exception as exc:
            self.delete(path)
            msg = f"Could not resolve payslip URL for {name}: {exc}"
            raise ArtifactStorageError(msg) from exc
        return StoredArtifact(path=path, url=url)

    def delete(self, path: str) -> None:
        if path:
            self.storage.delete(path)


class NotificationSink(Protocol):
    def send_payment_notification(self, record: PayrollRecord) -> None:
        """Tell the employee they were paid.

        Raises ``NotificationDeliveryError`` when delivery fails.
        """


class ChannelNotificationSink:
    """E-mail with the payslip link, in-app notifications and an admin push."""

    subject_template = "Payslip for {month}"

    def _send_email(self, record: PayrollRecord) -> None:
        employee = record.employee
        if not employee.email:
            msg = f"{employee.employee_id} has no e-mail address"
            raise NotificationDeliveryError(msg)
        context = {
            "record": record,
            "employee": employee,
            "currency": settings.PAYROLL.get("CURRENCY", "INR"),
            "frontend_url": settings.FRONTEND_URL,
        }
        message = EmailMultiAlternatives(
            subject=self.subject_template.format(month=record.month),
            body=render_to_string("emails/payslip.txt", context),
            from_email=settings.DEFAULT_FROM_EMAIL,
            to=[employee.email],
        )
        message.attach_alternative(
            render_to_string("emails/payslip.html", context), "text/html"
        )
        try:
            message.send(fail_silently=False)
        except Exception as exc:
            msg = f"E-mail to {employee.email} failed: {exc}"
            raise NotificationDeliveryError(msg) from exc

    def send_payment_notification(self, record: PayrollRecord) -> None:
        self._send_email(record)
        user = record.employee.user
        currency = settings.PAYROLL.get("CURRENCY", "INR")
        notify_user(
            user,
            f"Payslip Ready for {record.month}",
            (
                f"Your salary of {currency} {record.net_salary:,.2f} has been "
                "credited. Download your payslip now."
            ),
            Notification.Type.PAYSLIP_READY,
            link=record.payslip_url,
        )
        notify_user(
            user,
            "Salary Credited",
            (
                f"Your salary of {currency} {record.net_salary:,.2f} for "
                f"{record.month} has been successfully credited to your account."
            ),
            Notification.Type.PAYMENT_SUCCESS,
        )
        publish_payroll_event(
            "payroll_paid",
            {
                "record": record.pk,
                "employee_id": record.employee.employee_id,
                "month": record.month,
                "transaction_id": record.transaction_id,
            },
        )


@dataclass
class BatchPaymentResult:
    month: str
    successful: int = 0
    failed: int = 0
    details: list[dict] = field(default_factory=list)

    def as_dict(self) -> dict:
        return {
            "month": self.month,
            "successful": self.successful,
            "failed": self.failed,
            "details": self.details,
        }


def generate_transaction_id(record: PayrollRecord) -> str:
    millis = int(timezone.now().timestamp() * 1000)
    return f"TXN-{millis}-{record.employee.employee_id}"


class PaymentFinalizer:
    def __init__(
        self,
        renderer: PayslipRenderer | None = None,
        storage: PayslipStorage | None = None,
        notifier: NotificationSink | None = None,
    ):
        self.renderer = renderer or PayslipRenderer()
        self.storage = storage or PayslipStorage()
        self.notifier = notifier or ChannelNotificationSink()

    def pay(self, record_id: int, *, actor=None, request=None) -> PayrollRecord:
        """Pay one Approved record.

        Raises ``InvalidStateError`` unless the record is Approved, and
        ``ArtifactGenerationError``/``ArtifactStorageError`` when the payslip
        cannot be produced; in both failure cases the record is unchanged.
        """
        with transaction.atomic():
            record = get_record(record_id, lock=True)
            if record.status != PayrollRecord.Status.APPROVED:
                raise InvalidStateError(
                    "Payroll must be approved before payment",
                    current=record.status,
                    expected=PayrollRecord.Status.APPROVED,
                )
            self._finalize(record)
            log_action(
                "payroll_paid",
                actor=actor,
                message=f"transaction_id={record.transaction_id}",
                model_name="payroll.PayrollRecord",
                record_id=record.pk,
                before={"status": PayrollRecord.Status.APPROVED},
                after={"status": record.status, "payslip_url": record.payslip_url},
                request=request,
            )
        logger.info("Paid %s for %s", record.employee.employee_id, record.month)
        transaction.on_commit(lambda: self._dispatch_notification(record))
        return record

    def _finalize(self, record: PayrollRecord) -> None:
        snapshot = record.payment_state()
        artifact: dict[str, Any] = {}

        def render():
            artifact["content"] = self.renderer.render(record)

        def store():
            stored = self.storage.save(payslip_filename(record), artifact["content"])
            artifact["stored"] = stored

        def discard():
            self.storage.delete(artifact["stored"].path)

        def mark_paid():
            stored = artifact["stored"]
            with transaction.atomic():
                record.mark_paid(
                    generate_transaction_id(record),
                    payslip_url=stored.url,
                    payslip_path=stored.path,
                )

        CompensatingPipeline(
            [
                Step(
                    "snapshot",
                    action=lambda: None,
                    compensation=lambda: record.restore_payment_state(snapshot),
                ),
                Step("render", action=render),
                Step("store", action=store, compensation=discard),
                Step("mark_paid", action=mark_paid),
            ]
        ).run()

    def _dispatch_notification(self, record: PayrollRecord) -> bool:
        try:
            self.notifier.send_payment_notification(record)
        except NotificationDeliveryError as exc:
            logger.warning(
                "Payment notification for record %s failed: %s", record.pk, exc
            )
            return False
        except Exception:  # noqa: BLE001
            logger.warning(
                "Payment notification for record %s failed", record.pk, exc_info=True
            )
            return False
        record.mark_notified()
        return True

    def resend_notification(self, record_id: int) -> PayrollRecord:
        """Retry the payment notification for a Paid record.

        Unlike payment, a failure here is reported to the caller.
        """
        record = get_record(record_id)
        if record.status != PayrollRecord.Status.PAID or not record.payslip_generated:
            raise InvalidStateError(
                "Payslip not yet generated for this employee",
                current=record.status,
                expected=PayrollRecord.Status.PAID,
            )
        self.notifier.send_payment_notification(record)
        record.mark_notified()
        return record

    def pay_batch(self, month, year=None, *, actor=None) -> BatchPaymentResult:
        """Pay every Approved record of a period, continuing past failures."""
        year, month = coerce_period(month, year)
        period = format_period(year, month)
        records = list(
            PayrollRecord.objects.filter(
                month=period, status=PayrollRecord.Status.APPROVED
            )
            .select_related("employee")
            .order_by("employee__employee_id")
        )
        if not records:
            msg = f"No approved payroll records found for {period}"
            raise RecordNotFound(msg)

        result = BatchPaymentResult(month=period)
        for record in records:
            employee_id = record.employee.employee_id
            try:
                paid = self.pay(record.pk, actor=actor)
            except PayrollError as exc:
                logger.warning("Payment for %s %s failed: %s", employee_id, period, exc)
                result.failed += 1
                result.details.append(
                    {
                        "record": record.pk,
                        "employee_id": employee_id,
                        "status": "failed",
                        "error": str(exc),
                        "kind": exc.kind,
                    }
                )
            except Exception as exc:
                logger.warning(
                    "Payment for %s %s failed unexpectedly",
                    employee_id,
                    period,
                    exc_info=True,
                )
                result.failed += 1
                result.details.append(
                    {
                        "record": record.pk,
                        "employee_id": employee_id,
                        "status": "failed",
                        "error": str(exc),
                        "kind": "error",
                    }
                )
            else:
                result.successful += 1
                result.details.append(
                    {
                        "record": paid.pk,
                        "employee_id": employee_id,
                        "status": "paid",
                        "transaction_id": paid.transaction_id,
                        "payslip_url": paid.payslip_url,
                        "notification_sent": paid.notification_sent,
                    }
                )
        return result
