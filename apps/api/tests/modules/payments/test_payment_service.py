"""
Unit tests for the payments service layer.

These tests cover:
- Submission validation order, fee rule and amount freezing
- Duplicate prevention (pre-check and unique index)
- Verification: receipt issuing, admission approval, guard against re-verification
- Rejection
- Receipts and product downloads
"""

from types import SimpleNamespace
from unittest.mock import AsyncMock, patch
from uuid import uuid4

import pytest
from sqlalchemy.exc import IntegrityError

from app.modules.admissions.models import AdmissionStatus
from app.modules.payments import repository as payments_repository
from app.modules.payments.errors import (
    DuplicatePaymentError,
    InvalidPaymentInputError,
    PaymentAccessDeniedError,
    PaymentAlreadyProcessedError,
    PaymentMethodNotFoundError,
    PaymentNotFoundError,
    ProductNotFoundError,
    PurchaseNotVerifiedError,
    ReceiptNotFoundError,
    SourceNotFoundError,
    UnsupportedSourceError,
)
from app.modules.payments.models import PaymentChannel, PaymentSourceType, PaymentStatus
from app.modules.payments.schemas import PaymentCreate, PaymentResponse
from app.modules.payments.service import (
    OFFLINE_ADMISSION_FEE,
    TRANSACTION_FEE,
    compute_transaction_fee,
    delete_payment_method,
    get_product_download,
    get_receipt,
    get_stats,
    reject_payment,
    settle_admission,
    submit_payment,
    verify_payment,
)
from app.modules.payments.sources import ResolvedSource, resolve_source

SERVICE = "app.modules.payments.service"
SOURCES = "app.modules.payments.sources"


@pytest.fixture
def deps():
    """Patch the service's collaborators."""
    with (
        patch(f"{SERVICE}.repository") as repo,
        patch(f"{SERVICE}.resolve_source", new_callable=AsyncMock) as resolve,
        patch(f"{SERVICE}.UserRepository") as users,
        patch(f"{SERVICE}.admissions_repository") as admissions_repo,
        patch(f"{SERVICE}.admissions_service") as admissions_svc,
        patch(f"{SERVICE}.catalog_repository") as catalog_repo,
        patch(f"{SERVICE}.next_receipt_no", new_callable=AsyncMock) as receipt_no,
        patch(f"{SERVICE}.send_payment_submitted", new_callable=AsyncMock) as submitted_email,
        patch(f"{SERVICE}.send_payment_verified", new_callable=AsyncMock) as verified_email,
    ):
        repo.find_active = AsyncMock(return_value=None)
        repo.apply_status = payments_repository.apply_status
        users.list_admins = AsyncMock(return_value=[])
        users.get_by_id = AsyncMock(return_value=None)
        admissions_repo.set_payment_id = AsyncMock()
        admissions_repo.get_with_course = AsyncMock(return_value=None)
        admissions_svc.approve_for_payment = AsyncMock(return_value=None)
        catalog_repo.get_course = AsyncMock(return_value=None)
        catalog_repo.get_product = AsyncMock(return_value=None)
        receipt_no.return_value = "RCP-2026-1001"

        yield SimpleNamespace(
            repo=repo,
            resolve=resolve,
            users=users,
            admissions_repo=admissions_repo,
            admissions_svc=admissions_svc,
            catalog_repo=catalog_repo,
            receipt_no=receipt_no,
            submitted_email=submitted_email,
            verified_email=verified_email,
        )


class TestTransactionFee:
    """Tests for the fee rule."""

    def test_offline_admission_pays_reduced_fee(self):
        fee = compute_transaction_fee(PaymentChannel.OFFLINE, PaymentSourceType.ADMISSION)
        assert fee == OFFLINE_ADMISSION_FEE == 20

    @pytest.mark.parametrize(
        "method", [PaymentChannel.BKASH, PaymentChannel.NAGAD, PaymentChannel.ROCKET]
    )
    def test_mobile_channels_pay_standard_fee(self, method):
        for source_type in PaymentSourceType:
            assert compute_transaction_fee(method, source_type) == TRANSACTION_FEE == 30


class TestSubmitPayment:
    """Tests for submit_payment."""

    @pytest.mark.asyncio
    async def test_product_payment_freezes_price_plus_fee(
        self, mock_db, deps, student, product, product_payment, product_submission
    ):
        """A 200 product via bKash is recorded as 200 + 30 = 230, pending."""
        deps.resolve.return_value = ResolvedSource(amount=200, display_name=product.title)
        deps.repo.create = AsyncMock(return_value=product_payment)

        result = await submit_payment(mock_db, student, product_submission)

        deps.repo.create.assert_called_once_with(
            mock_db,
            user_id=student.id,
            source_type=PaymentSourceType.PRODUCT,
            source_id=product.id,
            amount=200,
            transaction_fee=30,
            payment_method=PaymentChannel.BKASH,
            sender_mobile="01700000000",
            transaction_id="TRX123ABC",
        )
        assert isinstance(result, PaymentResponse)
        assert result.total_amount == 230
        assert result.status == PaymentStatus.PENDING
        deps.admissions_repo.set_payment_id.assert_not_called()

    @pytest.mark.asyncio
    async def test_invalid_method_is_rejected_first(self, mock_db, deps, student):
        """Method is checked before the source id."""
        data = PaymentCreate(payment_method="paypal")

        with pytest.raises(InvalidPaymentInputError) as exc_info:
            await submit_payment(mock_db, student, data)

        assert exc_info.value.message == "Invalid payment method selection"
        assert exc_info.value.status_code == 400
        deps.resolve.assert_not_called()

    @pytest.mark.asyncio
    async def test_missing_method_is_rejected(self, mock_db, deps, student, product):
        data = PaymentCreate(source_type="product", source_id=str(product.id))

        with pytest.raises(InvalidPaymentInputError):
            await submit_payment(mock_db, student, data)

    @pytest.mark.asyncio
    async def test_method_is_case_insensitive(
        self, mock_db, deps, student, product, product_payment
    ):
        deps.resolve.return_value = ResolvedSource(amount=200, display_name=product.title)
        deps.repo.create = AsyncMock(return_value=product_payment)
        data = PaymentCreate(
            source_type="Product", source_id=str(product.id), payment_method="bKash"
        )

        await submit_payment(mock_db, student, data)

        assert deps.repo.create.call_args.kwargs["payment_method"] == PaymentChannel.BKASH
        assert deps.repo.create.call_args.kwargs["source_type"] == PaymentSourceType.PRODUCT

    @pytest.mark.asyncio
    async def test_missing_source_id(self, mock_db, deps, student):
        data = PaymentCreate(payment_method="bkash")

        with pytest.raises(InvalidPaymentInputError) as exc_info:
            await submit_payment(mock_db, student, data)

        assert "sourceId" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_malformed_source_id_is_invalid_input(self, mock_db, deps, student):
        data = PaymentCreate(source_type="product", source_id="abc", payment_method="bkash")

        with pytest.raises(InvalidPaymentInputError) as exc_info:
            await submit_payment(mock_db, student, data)

        assert exc_info.value.status_code == 400
        assert exc_info.value.message == "sourceId is not a valid id"
        deps.resolve.assert_not_called()

    @pytest.mark.asyncio
    async def test_invalid_method_wins_over_malformed_source_id(self, mock_db, deps, student):
        data = PaymentCreate(source_id="abc", payment_method="paypal")

        with pytest.raises(InvalidPaymentInputError) as exc_info:
            await submit_payment(mock_db, student, data)

        assert exc_info.value.message == "Invalid payment method selection"

    @pytest.mark.asyncio
    async def test_cannot_pay_for_another_students_admission(
        self, mock_db, deps, other_student, course, admission
    ):
        """The real resolver refuses the admission, so nothing is created or linked."""
        deps.resolve.side_effect = resolve_source
        deps.repo.create = AsyncMock()
        data = PaymentCreate(source_id=str(admission.id), payment_method="bkash")

        with patch(f"{SOURCES}.admissions_repository") as sources_admissions:
            sources_admissions.get_with_course = AsyncMock(return_value=(admission, course))

            with pytest.raises(SourceNotFoundError):
                await submit_payment(mock_db, other_student, data)

        deps.repo.create.assert_not_called()
        deps.admissions_repo.set_payment_id.assert_not_called()

    @pytest.mark.asyncio
    async def test_admission_id_is_accepted_as_source_id(
        self, mock_db, deps, student, course, admission, admission_payment
    ):
        """Legacy admissionId with no sourceType settles an admission."""
        deps.resolve.return_value = ResolvedSource(amount=course.fee, display_name=course.title)
        deps.repo.create = AsyncMock(return_value=admission_payment)
        data = PaymentCreate(admission_id=str(admission.id), payment_method="nagad")

        await submit_payment(mock_db, student, data)

        deps.resolve.assert_called_once_with(
            mock_db, PaymentSourceType.ADMISSION, admission.id, student.id
        )
        kwargs = deps.repo.create.call_args.kwargs
        assert kwargs["source_type"] == PaymentSourceType.ADMISSION
        assert kwargs["source_id"] == admission.id
        assert kwargs["amount"] == 3000

    @pytest.mark.asyncio
    async def test_admission_payment_is_linked_to_admission(
        self, mock_db, deps, student, course, admission, admission_payment
    ):
        deps.resolve.return_value = ResolvedSource(amount=course.fee, display_name=course.title)
        deps.repo.create = AsyncMock(return_value=admission_payment)
        data = PaymentCreate(source_id=str(admission.id), payment_method="bkash")

        await submit_payment(mock_db, student, data)

        deps.admissions_repo.set_payment_id.assert_called_once_with(
            mock_db, admission.id, admission_payment.id
        )

    @pytest.mark.asyncio
    async def test_admission_amount_ignores_client_amount(
        self, mock_db, deps, student, course, admission, admission_payment
    ):
        deps.resolve.return_value = ResolvedSource(amount=course.fee, display_name=course.title)
        deps.repo.create = AsyncMock(return_value=admission_payment)
        data = PaymentCreate(source_id=str(admission.id), payment_method="bkash", amount=1)

        await submit_payment(mock_db, student, data)

        assert deps.repo.create.call_args.kwargs["amount"] == 3000

    @pytest.mark.asyncio
    async def test_course_amount_uses_client_amount_when_given(
        self, mock_db, deps, student, course, payment_factory
    ):
        deps.resolve.return_value = ResolvedSource(amount=course.fee, display_name=course.title)
        deps.repo.create = AsyncMock(
            return_value=payment_factory(student.id, PaymentSourceType.COURSE, course.id, 1500)
        )
        data = PaymentCreate(
            source_type="course", source_id=str(course.id), payment_method="rocket", amount=1500
        )

        await submit_payment(mock_db, student, data)

        assert deps.repo.create.call_args.kwargs["amount"] == 1500
        assert deps.repo.create.call_args.kwargs["transaction_fee"] == 30

    @pytest.mark.asyncio
    async def test_offline_admission_fee(
        self, mock_db, deps, student, course, admission, payment_factory
    ):
        deps.resolve.return_value = ResolvedSource(amount=course.fee, display_name=course.title)
        deps.repo.create = AsyncMock(
            return_value=payment_factory(
                student.id,
                PaymentSourceType.ADMISSION,
                admission.id,
                3000,
                fee=20,
                method=PaymentChannel.OFFLINE,
            )
        )
        data = PaymentCreate(source_id=str(admission.id), payment_method="offline")

        result = await submit_payment(mock_db, student, data)

        assert deps.repo.create.call_args.kwargs["transaction_fee"] == 20
        assert result.total_amount == 3020

    @pytest.mark.asyncio
    async def test_offline_for_product_is_rejected(self, mock_db, deps, student, product):
        data = PaymentCreate(
            source_type="product", source_id=str(product.id), payment_method="offline"
        )

        with pytest.raises(InvalidPaymentInputError) as exc_info:
            await submit_payment(mock_db, student, data)

        assert "admission" in exc_info.value.message.lower()
        deps.resolve.assert_not_called()

    @pytest.mark.asyncio
    async def test_unsupported_source_type(self, mock_db, deps, student):
        data = PaymentCreate(source_type="donation", source_id=str(uuid4()), payment_method="bkash")

        with pytest.raises(UnsupportedSourceError) as exc_info:
            await submit_payment(mock_db, student, data)

        assert exc_info.value.status_code == 400

    @pytest.mark.asyncio
    async def test_source_not_found_propagates(self, mock_db, deps, student, product_submission):
        deps.resolve.side_effect = SourceNotFoundError("product")

        with pytest.raises(SourceNotFoundError) as exc_info:
            await submit_payment(mock_db, student, product_submission)

        assert exc_info.value.message == "Product not found"
        assert exc_info.value.status_code == 404

    @pytest.mark.asyncio
    async def test_duplicate_active_payment(
        self, mock_db, deps, student, product, product_payment, product_submission
    ):
        deps.resolve.return_value = ResolvedSource(amount=200, display_name=product.title)
        deps.repo.find_active = AsyncMock(return_value=product_payment)
        deps.repo.create = AsyncMock()

        with pytest.raises(DuplicatePaymentError) as exc_info:
            await submit_payment(mock_db, student, product_submission)

        assert exc_info.value.status_code == 409
        deps.repo.create.assert_not_called()

    @pytest.mark.asyncio
    async def test_concurrent_duplicate_hits_unique_index(
        self, mock_db, deps, student, product, product_submission
    ):
        """The partial unique index is the final word when two submissions race."""
        deps.resolve.return_value = ResolvedSource(amount=200, display_name=product.title)
        deps.repo.create = AsyncMock(
            side_effect=IntegrityError("INSERT", {}, Exception("uq_payments_active_source"))
        )

        with pytest.raises(DuplicatePaymentError):
            await submit_payment(mock_db, student, product_submission)

        mock_db.rollback.assert_called_once()

    @pytest.mark.asyncio
    async def test_admins_are_notified(
        self, mock_db, deps, student, product, product_payment, product_submission, admin_model
    ):
        deps.resolve.return_value = ResolvedSource(amount=200, display_name=product.title)
        deps.repo.create = AsyncMock(return_value=product_payment)
        deps.users.list_admins = AsyncMock(return_value=[admin_model])

        await submit_payment(mock_db, student, product_submission)

        deps.submitted_email.assert_called_once_with(
            to_email=admin_model.email,
            student_name=student.name,
            item_name=product.title,
            total_amount=230,
            transaction_id="TRX123ABC",
            payment_method="bkash",
        )

    @pytest.mark.asyncio
    async def test_notification_failure_does_not_fail_submission(
        self, mock_db, deps, student, product, product_payment, product_submission
    ):
        deps.resolve.return_value = ResolvedSource(amount=200, display_name=product.title)
        deps.repo.create = AsyncMock(return_value=product_payment)
        deps.users.list_admins = AsyncMock(side_effect=RuntimeError("db gone"))

        result = await submit_payment(mock_db, student, product_submission)

        assert result.id == product_payment.id


class TestVerifyPayment:
    """Tests for verify_payment."""

    @pytest.mark.asyncio
    async def test_verify_issues_receipt(self, mock_db, deps, admin, product_payment):
        deps.repo.get_by_id_for_update = AsyncMock(return_value=product_payment)

        result = await verify_payment(mock_db, product_payment.id, admin)

        assert result.message == "Verified"
        assert result.receipt_no == "RCP-2026-1001"
        assert product_payment.status == PaymentStatus.VERIFIED
        assert product_payment.receipt_no == "RCP-2026-1001"
        assert product_payment.verified_by == admin.id
        assert product_payment.verified_at is not None
        mock_db.commit.assert_called()
        deps.admissions_svc.approve_for_payment.assert_not_called()

    @pytest.mark.asyncio
    async def test_verify_missing_payment(self, mock_db, deps, admin):
        deps.repo.get_by_id_for_update = AsyncMock(return_value=None)

        with pytest.raises(PaymentNotFoundError):
            await verify_payment(mock_db, uuid4(), admin)

        deps.receipt_no.assert_not_called()

    @pytest.mark.asyncio
    async def test_verify_twice_is_a_conflict(self, mock_db, deps, admin, product_payment):
        """A second verification never draws a second receipt number."""
        product_payment.status = PaymentStatus.VERIFIED
        product_payment.receipt_no = "RCP-2026-1001"
        deps.repo.get_by_id_for_update = AsyncMock(return_value=product_payment)

        with pytest.raises(PaymentAlreadyProcessedError) as exc_info:
            await verify_payment(mock_db, product_payment.id, admin)

        assert exc_info.value.message == "Already verified"
        assert exc_info.value.status_code == 409
        deps.receipt_no.assert_not_called()
        mock_db.rollback.assert_called_once()
        assert product_payment.receipt_no == "RCP-2026-1001"

    @pytest.mark.asyncio
    async def test_rejected_payment_cannot_be_verified(
        self, mock_db, deps, admin, product_payment
    ):
        product_payment.status = PaymentStatus.REJECTED
        deps.repo.get_by_id_for_update = AsyncMock(return_value=product_payment)

        with pytest.raises(PaymentAlreadyProcessedError):
            await verify_payment(mock_db, product_payment.id, admin)

        deps.receipt_no.assert_not_called()

    @pytest.mark.asyncio
    async def test_verify_admission_payment_approves_admission(
        self, mock_db, deps, admin, admission, admission_payment, student_model, course
    ):
        admission.status = AdmissionStatus.APPROVED
        admission.roll_no = "261001"
        deps.repo.get_by_id_for_update = AsyncMock(return_value=admission_payment)
        deps.admissions_svc.approve_for_payment = AsyncMock(return_value=admission)
        deps.admissions_repo.get_with_course = AsyncMock(return_value=(admission, course))
        deps.users.get_by_id = AsyncMock(return_value=student_model)

        result = await verify_payment(mock_db, admission_payment.id, admin)

        assert result.receipt_no == "RCP-2026-1001"
        deps.admissions_svc.approve_for_payment.assert_called_once_with(mock_db, admission.id)
        deps.verified_email.assert_called_once_with(
            to_email=student_model.email,
            student_name=student_model.name,
            receipt_no="RCP-2026-1001",
            item_name=course.title,
            total_amount=3030,
            roll_no="261001",
        )

    @pytest.mark.asyncio
    async def test_admission_approval_failure_keeps_verification(
        self, mock_db, deps, admin, admission_payment, student_model
    ):
        """Approval runs after the commit; its failure is left to reconciliation."""
        deps.repo.get_by_id_for_update = AsyncMock(return_value=admission_payment)
        deps.admissions_svc.approve_for_payment = AsyncMock(side_effect=RuntimeError("deadlock"))
        deps.users.get_by_id = AsyncMock(return_value=student_model)

        result = await verify_payment(mock_db, admission_payment.id, admin)

        assert result.receipt_no == "RCP-2026-1001"
        assert admission_payment.status == PaymentStatus.VERIFIED
        mock_db.rollback.assert_called_once()
        assert deps.verified_email.call_args.kwargs["roll_no"] is None

    @pytest.mark.asyncio
    async def test_email_failure_does_not_fail_verification(
        self, mock_db, deps, admin, product_payment, student_model
    ):
        deps.repo.get_by_id_for_update = AsyncMock(return_value=product_payment)
        deps.users.get_by_id = AsyncMock(return_value=student_model)
        deps.verified_email.side_effect = RuntimeError("smtp down")

        result = await verify_payment(mock_db, product_payment.id, admin)

        assert result.receipt_no == "RCP-2026-1001"


class TestSettleAdmission:
    """Tests for settle_admission."""

    @pytest.mark.asyncio
    async def test_returns_approved_admission(self, mock_db, deps, admission, admission_payment):
        deps.admissions_svc.approve_for_payment = AsyncMock(return_value=admission)

        result = await settle_admission(mock_db, admission_payment)

        assert result is admission

    @pytest.mark.asyncio
    async def test_failure_is_logged_and_rolled_back(self, mock_db, deps, admission_payment):
        deps.admissions_svc.approve_for_payment = AsyncMock(side_effect=RuntimeError("boom"))

        result = await settle_admission(mock_db, admission_payment)

        assert result is None
        mock_db.rollback.assert_called_once()


class TestRejectPayment:
    """Tests for reject_payment."""

    @pytest.mark.asyncio
    async def test_reject_pending(self, mock_db, deps, admin, admission_payment):
        deps.repo.get_by_id_for_update = AsyncMock(return_value=admission_payment)

        result = await reject_payment(mock_db, admission_payment.id, admin)

        assert result.message == "Payment rejected"
        assert admission_payment.status == PaymentStatus.REJECTED
        mock_db.commit.assert_called_once()
        deps.admissions_svc.approve_for_payment.assert_not_called()

    @pytest.mark.asyncio
    async def test_reject_rejected_is_a_no_op(self, mock_db, deps, admin, product_payment):
        product_payment.status = PaymentStatus.REJECTED
        deps.repo.get_by_id_for_update = AsyncMock(return_value=product_payment)

        result = await reject_payment(mock_db, product_payment.id, admin)

        assert result.message == "Payment rejected"
        mock_db.commit.assert_not_called()

    @pytest.mark.asyncio
    async def test_verified_payment_cannot_be_rejected(
        self, mock_db, deps, admin, product_payment
    ):
        product_payment.status = PaymentStatus.VERIFIED
        deps.repo.get_by_id_for_update = AsyncMock(return_value=product_payment)

        with pytest.raises(PaymentAlreadyProcessedError):
            await reject_payment(mock_db, product_payment.id, admin)

        assert product_payment.status == PaymentStatus.VERIFIED

    @pytest.mark.asyncio
    async def test_reject_missing(self, mock_db, deps, admin):
        deps.repo.get_by_id_for_update = AsyncMock(return_value=None)

        with pytest.raises(PaymentNotFoundError):
            await reject_payment(mock_db, uuid4(), admin)


class TestReceipt:
    """Tests for get_receipt."""

    @pytest.fixture
    def verified_payment(self, product_payment):
        product_payment.status = PaymentStatus.VERIFIED
        product_payment.receipt_no = "RCP-2026-1001"
        return product_payment

    @pytest.mark.asyncio
    async def test_owner_gets_receipt(
        self, mock_db, deps, student, student_model, product, verified_payment
    ):
        deps.repo.get_by_id = AsyncMock(return_value=verified_payment)
        deps.users.get_by_id = AsyncMock(return_value=student_model)
        deps.catalog_repo.get_product = AsyncMock(return_value=product)

        receipt = await get_receipt(mock_db, verified_payment.id, student)

        assert receipt.receipt_no == "RCP-2026-1001"
        assert receipt.student_details.student_id == "TCTC-0042"
        assert receipt.payment_details.trx_id == "TRX123ABC"
        assert receipt.payment_details.total == 230
        assert receipt.item_details.item_name == product.title
        assert receipt.item_details.type == "Product"

    @pytest.mark.asyncio
    async def test_admin_gets_any_receipt(self, mock_db, deps, admin, verified_payment):
        deps.repo.get_by_id = AsyncMock(return_value=verified_payment)

        receipt = await get_receipt(mock_db, verified_payment.id, admin)

        assert receipt.student_details.name == "Unknown"
        assert receipt.item_details.item_name == "Digital Product"

    @pytest.mark.asyncio
    async def test_other_student_is_denied(self, mock_db, deps, other_student, verified_payment):
        deps.repo.get_by_id = AsyncMock(return_value=verified_payment)

        with pytest.raises(PaymentAccessDeniedError):
            await get_receipt(mock_db, verified_payment.id, other_student)

    @pytest.mark.asyncio
    async def test_pending_payment_has_no_receipt(self, mock_db, deps, student, product_payment):
        deps.repo.get_by_id = AsyncMock(return_value=product_payment)

        with pytest.raises(ReceiptNotFoundError):
            await get_receipt(mock_db, product_payment.id, student)

    @pytest.mark.asyncio
    async def test_missing_payment(self, mock_db, deps, student):
        deps.repo.get_by_id = AsyncMock(return_value=None)

        with pytest.raises(ReceiptNotFoundError):
            await get_receipt(mock_db, uuid4(), student)


class TestProductDownload:
    """Tests for get_product_download."""

    @pytest.mark.asyncio
    async def test_verified_buyer_gets_file(self, mock_db, deps, student, product):
        deps.catalog_repo.get_product = AsyncMock(return_value=product)
        deps.repo.has_verified_purchase = AsyncMock(return_value=True)

        url = await get_product_download(mock_db, product.id, student)

        assert url == product.file_url
        deps.repo.has_verified_purchase.assert_called_once_with(mock_db, student.id, product.id)

    @pytest.mark.asyncio
    async def test_admin_skips_purchase_check(self, mock_db, deps, admin, product):
        deps.catalog_repo.get_product = AsyncMock(return_value=product)
        deps.repo.has_verified_purchase = AsyncMock()

        url = await get_product_download(mock_db, product.id, admin)

        assert url == product.file_url
        deps.repo.has_verified_purchase.assert_not_called()

    @pytest.mark.asyncio
    async def test_unverified_buyer_is_denied(self, mock_db, deps, student, product):
        deps.catalog_repo.get_product = AsyncMock(return_value=product)
        deps.repo.has_verified_purchase = AsyncMock(return_value=False)

        with pytest.raises(PurchaseNotVerifiedError) as exc_info:
            await get_product_download(mock_db, product.id, student)

        assert exc_info.value.status_code == 403

    @pytest.mark.asyncio
    async def test_missing_product(self, mock_db, deps, student):
        with pytest.raises(ProductNotFoundError):
            await get_product_download(mock_db, uuid4(), student)


class TestHousekeeping:
    """Tests for stats and payment numbers."""

    @pytest.mark.asyncio
    async def test_stats(self, mock_db, deps):
        deps.repo.count_by_status = AsyncMock(
            return_value={PaymentStatus.PENDING: 2, PaymentStatus.VERIFIED: 5}
        )
        deps.repo.sum_verified_income = AsyncMock(return_value=15150)
        deps.repo.count_approved_admissions = AsyncMock(return_value=3)

        stats = await get_stats(mock_db)

        assert stats.pending == 2
        assert stats.verified == 5
        assert stats.rejected == 0
        assert stats.total_income == 15150
        assert stats.approved_admissions == 3

    @pytest.mark.asyncio
    async def test_delete_missing_payment_method(self, mock_db, deps):
        deps.repo.delete_method = AsyncMock(return_value=False)

        with pytest.raises(PaymentMethodNotFoundError) as exc_info:
            await delete_payment_method(mock_db, uuid4())

        assert exc_info.value.message == "Method not found"

    @pytest.mark.asyncio
    async def test_delete_payment_method(self, mock_db, deps):
        deps.repo.delete_method = AsyncMock(return_value=True)

        result = await delete_payment_method(mock_db, uuid4())

        assert result.message == "Payment method removed"
