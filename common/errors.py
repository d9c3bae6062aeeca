"""
Error classes surfaced by the purchase and payment endpoints.

Each class maps to one response status.  Errors raised before a charge
is attempted leave no side effects and are safe to retry client-side;
``ReconciliationError``, ``PaymentOutcomeUnknownError`` and
``PurchaseFollowUpError`` are raised after money may have moved and
must not be retried blindly.
"""
from __future__ import annotations

from rest_framework import status
from rest_framework.exceptions import APIException


class InputError(APIException):
    """Caller-supplied data failed validation."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Invalid input."
    default_code = "invalid_input"


class AuthError(APIException):
    """Caller lacks permission for the requested scope."""

    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "You do not have permission to access these records."
    default_code = "permission_denied"


class PaymentError(APIException):
    """The payment gateway refused the charge (card declined etc)."""

    status_code = status.HTTP_402_PAYMENT_REQUIRED
    default_detail = "The payment could not be completed."
    default_code = "payment_failed"


class ChargeIdMixin:
    """Carries the gateway charge id in the response body."""

    def __init__(self, message, charge_id=None):
        self.charge_id = charge_id
        detail = {"message": str(message)}
        if charge_id:
            detail["charge_id"] = charge_id
        super().__init__(detail=detail)


class PaymentOutcomeUnknownError(ChargeIdMixin, APIException):
    """The gateway did not answer in time; the charge may or may not exist."""

    status_code = status.HTTP_504_GATEWAY_TIMEOUT
    default_detail = "Payment outcome unknown."
    default_code = "payment_outcome_unknown"


class ReconciliationError(ChargeIdMixin, APIException):
    """A charge succeeded but its payment records could not be written."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "Payment was charged but could not be recorded."
    default_code = "payment_not_recorded"


class PurchaseFollowUpError(ChargeIdMixin, APIException):
    """A charge was recorded but a per-person follow-up step failed."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "Payment was recorded but processing did not complete."
    default_code = "purchase_incomplete"
