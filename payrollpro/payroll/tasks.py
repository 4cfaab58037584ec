import logging

from celery import shared_task
from django.contrib.auth import get_user_model

from payrollpro.payroll.exceptions import NothingToProcessError
from payrollpro.payroll.finalizer import PaymentFinalizer
from payrollpro.payroll.periods import current_period
from payrollpro.payroll.services import process_period

logger = logging.getLogger(__name__)


def _actor(actor_id):
    if actor_id is None:
        return None
    return get_user_model().objects.filter(pk=actor_id).first()


@shared_task(name="payroll.process_period")
def process_period_task(month, year=None, actor_id=None) -> dict:
    """Celery task wrapper to run payroll processing for a period."""
    return process_period(month, year, actor=_actor(actor_id)).as_dict()


@shared_task(name="payroll.process_current_month")
def process_current_month_task() -> dict:
    """Process the current month; a month already done is not an error."""
    period = current_period()
    try:
        return process_period(period).as_dict()
    except NothingToProcessError as exc:
        logger.info("Nothing to process for %s: %s", period, exc)
        return {"month": period, "processed": 0, **exc.as_dict()}


@shared_task(name="payroll.pay_period")
def pay_period_task(month, year=None, actor_id=None) -> dict:
    """Pay every approved record of a period."""
    return PaymentFinalizer().pay_batch(month, year, actor=_actor(actor_id)).as_dict()
