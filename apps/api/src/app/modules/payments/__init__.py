"""
Payments Module

The payment ledger. A student pays for one source (an admission fee, a
course or a digital product) through a mobile channel or at the desk, and an
admin verifies or rejects it.

API Endpoints:
- POST /payments - Submit a payment
- GET /payments/methods - Payment numbers (public)
- GET /payments/my/downloads - Verified product purchases
- GET /payments/{id}/receipt - Receipt for a verified payment
- GET /payments, GET /payments/stats - Admin listing and statistics
- PUT /payments/{id}/verify, PUT /payments/{id}/reject - Admin decisions
- DELETE /payments/{id} - Admin removal
- POST /payments/methods, DELETE /payments/methods/{id} - Payment numbers

Verification issues a receipt number from a yearly counter and approves the
linked admission with a roll number.

Background Jobs (via APScheduler):
- reconcile_admissions: approves admissions left pending after their payment
  was verified
"""

from .admin_router import router as admin_router
from .jobs import register_payment_jobs
from .router import router

__all__ = ["router", "admin_router", "register_payment_jobs"]
