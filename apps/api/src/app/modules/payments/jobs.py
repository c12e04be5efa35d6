"""
Payments Background Jobs

Admission approval runs after a payment's verification has committed. If that
step fails (database hiccup, process killed between the two commits) the
payment is verified but its admission is still pending. The reconciliation
job finds those pairs and approves the admissions.

- The job is idempotent: approved admissions drop out of the query
- Each payment is settled in its own session
- One failure does not stop the batch
"""

import logging
from datetime import UTC, datetime
from typing import Any

from apscheduler.triggers.interval import IntervalTrigger

from app.core.config import settings
from app.core.database import async_session_maker
from app.core.scheduler import register_job
from app.modules.payments import repository
from app.modules.payments.models import Payment
from app.modules.payments.service import settle_admission

logger = logging.getLogger(__name__)

RECONCILE_BATCH_SIZE = 100

JOB_ID_RECONCILE_ADMISSIONS = "payments_reconcile_admissions"


async def _reconcile_payment(payment: Payment) -> dict[str, Any]:
    async with async_session_maker() as db:
        admission = await settle_admission(db, payment)

    if admission is None:
        return {
            "payment_id": str(payment.id),
            "admission_id": str(payment.source_id),
            "status": "skipped",
        }

    return {
        "payment_id": str(payment.id),
        "admission_id": str(admission.id),
        "status": "approved",
        "roll_no": admission.roll_no,
    }


async def reconcile_admissions() -> dict[str, Any]:
    """
    Approve admissions whose payment is verified but whose approval never ran.

    Returns:
        Dict with executed_at, per-payment results, total_processed and total_errors
    """
    executed_at = datetime.now(UTC)
    logger.info("Starting admission reconciliation job")

    results: dict[str, Any] = {
        "executed_at": executed_at.isoformat(),
        "settled": [],
        "total_processed": 0,
        "total_errors": 0,
    }

    async with async_session_maker() as db:
        payments = await repository.list_unsettled_admission_payments(
            db, limit=RECONCILE_BATCH_SIZE
        )

    logger.info(f"Found {len(payments)} verified payments with pending admissions")

    for payment in payments:
        try:
            result = await _reconcile_payment(payment)
            results["settled"].append(result)
            if result["status"] == "approved":
                results["total_processed"] += 1
            else:
                results["total_errors"] += 1
        except Exception as e:
            logger.error(f"Error reconciling payment {payment.id}: {e}", exc_info=True)
            results["settled"].append(
                {
                    "payment_id": str(payment.id),
                    "status": "error",
                    "error": str(e),
                }
            )
            results["total_errors"] += 1

    logger.info(
        f"Admission reconciliation completed. "
        f"Approved: {results['total_processed']}, Errors: {results['total_errors']}"
    )

    return results


def register_payment_jobs() -> None:
    """Register payment background jobs. Call before the scheduler starts."""
    interval = settings.reconcile_interval_minutes

    register_job(
        job_id=JOB_ID_RECONCILE_ADMISSIONS,
        func=reconcile_admissions,
        trigger=IntervalTrigger(minutes=interval),
    )
    logger.info(f"Registered job: {JOB_ID_RECONCILE_ADMISSIONS} (interval: {interval} min)")
