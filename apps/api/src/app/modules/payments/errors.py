"""
Payment service errors.

Each error carries a human-readable ``message``, a machine-readable
``error_code`` and the HTTP ``status_code`` routers respond with.
"""

from uuid import UUID


class PaymentServiceError(Exception):
    """Base exception for payment service errors."""

    def __init__(self, message: str, error_code: str, status_code: int = 400):
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        super().__init__(message)


class InvalidPaymentInputError(PaymentServiceError):
    """Raised for missing or malformed submission fields."""

    def __init__(self, message: str):
        super().__init__(message=message, error_code="INVALID_INPUT", status_code=400)


class UnsupportedSourceError(PaymentServiceError):
    def __init__(self, source_type: str):
        super().__init__(
            message=f"Unsupported payment source type: {source_type}",
            error_code="UNSUPPORTED_SOURCE",
            status_code=400,
        )


class SourceNotFoundError(PaymentServiceError):
    """Raised when the paid-for admission, course or product is missing or inactive."""

    def __init__(self, source_type: str):
        super().__init__(
            message=f"{source_type.capitalize()} not found",
            error_code="SOURCE_NOT_FOUND",
            status_code=404,
        )


class AdmissionNotPayableError(PaymentServiceError):
    """Raised when paying for an admission that is no longer pending."""

    def __init__(self, admission_status: str):
        super().__init__(
            message=f"Admission is {admission_status} and cannot be paid for",
            error_code="ADMISSION_NOT_PAYABLE",
            status_code=409,
        )


class DuplicatePaymentError(PaymentServiceError):
    def __init__(self):
        super().__init__(
            message="Payment already submitted or verified",
            error_code="DUPLICATE_PAYMENT",
            status_code=409,
        )


class PaymentNotFoundError(PaymentServiceError):
    def __init__(self, payment_id: UUID | None = None):
        message = f"Payment {payment_id} not found" if payment_id else "Payment not found"
        super().__init__(message=message, error_code="PAYMENT_NOT_FOUND", status_code=404)


class PaymentAlreadyProcessedError(PaymentServiceError):
    """Raised when verifying or rejecting a payment that already left ``pending``."""

    def __init__(self, message: str):
        super().__init__(message=message, error_code="PAYMENT_ALREADY_PROCESSED", status_code=409)


class PaymentAccessDeniedError(PaymentServiceError):
    def __init__(self, message: str = "Not authorized"):
        super().__init__(message=message, error_code="ACCESS_DENIED", status_code=403)


class ReceiptNotFoundError(PaymentServiceError):
    def __init__(self):
        super().__init__(
            message="Receipt not found", error_code="RECEIPT_NOT_FOUND", status_code=404
        )


class PaymentMethodNotFoundError(PaymentServiceError):
    def __init__(self):
        super().__init__(
            message="Method not found", error_code="PAYMENT_METHOD_NOT_FOUND", status_code=404
        )


class ProductNotFoundError(PaymentServiceError):
    def __init__(self):
        super().__init__(
            message="Product not found", error_code="PRODUCT_NOT_FOUND", status_code=404
        )


class PurchaseNotVerifiedError(PaymentServiceError):
    def __init__(self):
        super().__init__(
            message="Purchase not verified or found",
            error_code="PURCHASE_NOT_VERIFIED",
            status_code=403,
        )
