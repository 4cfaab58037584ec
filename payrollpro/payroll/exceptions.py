"""Domain errors raised by the payroll core.

Every error carries a machine-checkable ``kind`` and the HTTP status the
API layer answers with (see ``config.exception_handler``).
"""

from __future__ import annotations


class PayrollError(Exception):
    kind = "payroll_error"
    status_code = 400
    default_message = "Payroll operation failed."

    def __init__(self, message: str | None = None, *, kind: str | None = None):
        super().__init__(message or self.default_message)
        if kind is not None:
            self.kind = kind

    @property
    def message(self) -> str:
        return str(self)

    def as_dict(self) -> dict[str, str]:
        return {"detail": self.message, "kind": self.kind}


class PayrollValidationError(PayrollError):
    kind = "invalid_input"
    status_code = 400
    default_message = "Invalid input."


class RecordNotFound(PayrollValidationError):
    kind = "not_found"
    status_code = 404
    default_message = "Record not found."


class NegativeNetSalaryError(PayrollValidationError):
    kind = "negative_net_salary"
    status_code = 422
    default_message = "Net salary cannot be negative."


class InvalidStateError(PayrollError):
    kind = "invalid_state"
    status_code = 409
    default_message = "Operation not allowed in the current state."

    def __init__(
        self,
        message: str | None = None,
        *,
        current: str | None = None,
        expected: str | None = None,
    ):
        if message is None and current is not None:
            message = f"Record is {current}"
            if expected:
                message += f"; expected {expected}"
        super().__init__(message)
        self.current = current
        self.expected = expected


class NothingToProcessError(PayrollError):
    NO_ACTIVE_EMPLOYEES = "no_active_employees"
    ALREADY_PROCESSED = "already_processed"

    kind = NO_ACTIVE_EMPLOYEES
    status_code = 404
    default_message = "Nothing to process."

    def __init__(
        self,
        message: str | None = None,
        *,
        kind: str | None = None,
        skipped_existing: int = 0,
    ):
        super().__init__(message, kind=kind)
        self.processed = 0
        self.skipped_existing = skipped_existing
        if self.kind == self.ALREADY_PROCESSED:
            self.status_code = 409

    def as_dict(self) -> dict:
        data = super().as_dict()
        if self.kind == self.ALREADY_PROCESSED:
            data.update(processed=self.processed, skipped_existing=self.skipped_existing)
        return data


class ArtifactGenerationError(PayrollError):
    kind = "artifact_generation_failed"
    status_code = 502
    default_message = "Payslip generation failed."


class ArtifactStorageError(PayrollError):
    kind = "artifact_storage_failed"
    status_code = 502
    default_message = "Payslip storage failed."


class NotificationDeliveryError(PayrollError):
    """Never surfaced to API callers; the finalizer logs and swallows it."""

    kind = "notification_failed"
    status_code = 502
    default_message = "Notification delivery failed."
