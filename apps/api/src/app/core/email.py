"""
Email Service using Resend

Handles notification emails for admissions and payments.

Every sender returns a bool and never raises: a failed email must not fail
the request that triggered it.
"""

import asyncio
import logging
from html import escape

import resend

from app.core.config import settings

logger = logging.getLogger(__name__)

# Initialize Resend with API key
resend.api_key = settings.resend_api_key

EMAIL_FROM = settings.email_from
FRONTEND_URL = settings.frontend_url
CURRENCY = "BDT"

_BASE_STYLE = """
            body { font-family: system-ui, -apple-system, sans-serif; line-height: 1.6; color: #1f2937; }
            .container { max-width: 600px; margin: 0 auto; padding: 40px 20px; }
            .header { color: #1a365d; margin-bottom: 24px; }
            .summary-box { background-color: #f9fafb; border: 1px solid #e5e7eb; padding: 16px; border-radius: 8px; margin: 16px 0; }
            .summary-box ul { margin: 8px 0 0 0; padding-left: 20px; }
            .summary-box li { margin-bottom: 4px; }
            .button { display: inline-block; background-color: #1a365d; color: white; padding: 14px 28px; text-decoration: none; border-radius: 8px; margin: 24px 0; }
            .footer { margin-top: 40px; padding-top: 20px; border-top: 1px solid #e5e7eb; color: #6b7280; font-size: 14px; }
"""


def _render(title: str, body: str) -> str:
    return f"""
    <!DOCTYPE html>
    <html>
    <head>
        <style>{_BASE_STYLE}</style>
    </head>
    <body>
        <div class="container">
            <h1 class="header">{title}</h1>
            {body}
            <div class="footer">
                <p>Technical Training Center</p>
            </div>
        </div>
    </body>
    </html>
    """


async def send_email(
    to_email: str,
    subject: str,
    html_content: str,
) -> bool:
    """
    Send an email using Resend.

    Args:
        to_email: Recipient email address
        subject: Email subject line
        html_content: HTML content of the email

    Returns:
        True if email was sent successfully
    """
    if not resend.api_key:
        logger.warning("RESEND_API_KEY not set - logging email instead of sending")
        logger.info(f"EMAIL TO: {to_email} | SUBJECT: {subject}")
        return True

    try:
        params: resend.Emails.SendParams = {
            "from": EMAIL_FROM,
            "to": [to_email],
            "subject": subject,
            "html": html_content,
        }

        # Run sync Resend call in thread pool to avoid blocking event loop
        email = await asyncio.to_thread(resend.Emails.send, params)
        logger.info(f"Email sent successfully to {to_email}, id: {email['id']}")
        return True
    except Exception as e:
        logger.error(f"Failed to send email to {to_email}: {e}")
        return False


async def send_payment_submitted(
    to_email: str,
    student_name: str,
    item_name: str,
    total_amount: int,
    transaction_id: str | None,
    payment_method: str,
) -> bool:
    """Notify an admin that a student submitted a payment for review."""
    safe_student_name = escape(student_name)
    safe_item_name = escape(item_name)
    safe_transaction_id = escape(transaction_id or "N/A")
    safe_method = escape(payment_method)

    body = f"""
            <p>A new payment is waiting for verification.</p>

            <div class="summary-box">
                <ul>
                    <li><strong>Student:</strong> {safe_student_name}</li>
                    <li><strong>Item:</strong> {safe_item_name}</li>
                    <li><strong>Amount:</strong> {total_amount} {CURRENCY}</li>
                    <li><strong>Method:</strong> {safe_method}</li>
                    <li><strong>TrxID:</strong> {safe_transaction_id}</li>
                </ul>
            </div>

            <a href="{FRONTEND_URL}/admin/payments" class="button">Review Payments</a>
    """
    return await send_email(
        to_email=to_email,
        subject=f"New Payment Received: {safe_transaction_id}",
        html_content=_render("New Payment Submitted", body),
    )


async def send_payment_verified(
    to_email: str,
    student_name: str,
    receipt_no: str,
    item_name: str,
    total_amount: int,
    roll_no: str | None = None,
) -> bool:
    """Send the payment receipt (and roll number for admissions) to the student."""
    safe_student_name = escape(student_name)
    safe_item_name = escape(item_name)
    safe_receipt_no = escape(receipt_no)

    roll_line = f"<li><strong>Roll No:</strong> {escape(roll_no)}</li>" if roll_no else ""

    body = f"""
            <p>Hello {safe_student_name},</p>

            <p>Your payment has been verified. Keep this receipt for your records.</p>

            <div class="summary-box">
                <ul>
                    <li><strong>Receipt No:</strong> {safe_receipt_no}</li>
                    <li><strong>Item:</strong> {safe_item_name}</li>
                    <li><strong>Total Paid:</strong> {total_amount} {CURRENCY}</li>
                    {roll_line}
                </ul>
            </div>

            <a href="{FRONTEND_URL}/dashboard" class="button">Go to Dashboard</a>
    """
    return await send_email(
        to_email=to_email,
        subject=f"Payment Receipt - {safe_receipt_no}",
        html_content=_render("Payment Verified!", body),
    )


async def send_admission_submitted(
    to_email: str,
    student_name: str,
    student_id: str | None,
    course_title: str,
    session: str,
    guardian_phone: str,
) -> bool:
    """Notify an admin that a new admission application was received."""
    body = f"""
            <div class="summary-box">
                <ul>
                    <li><strong>Student Name:</strong> {escape(student_name)}</li>
                    <li><strong>Student ID:</strong> {escape(student_id or "N/A")}</li>
                    <li><strong>Course:</strong> {escape(course_title)}</li>
                    <li><strong>Session:</strong> {escape(session)}</li>
                    <li><strong>Guardian Phone:</strong> {escape(guardian_phone)}</li>
                </ul>
            </div>

            <p>The application is approved automatically once its payment is verified.</p>
    """
    return await send_email(
        to_email=to_email,
        subject=f"New Admission Request: {escape(course_title)}",
        html_content=_render("New Admission Application Received", body),
    )
