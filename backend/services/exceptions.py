# services/exceptions.py

"""
PAYMENT SERVICE ERRORS

Domain errors raised by the allocation engine. Every error carries the HTTP
status the API layer answers with; the message is meant for the end user.
"""


class PaymentServiceError(Exception):
    """Base exception for all payment / allocation failures."""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class PaymentValidationError(PaymentServiceError):
    """Bad amount, missing payment method, or an absent / ambiguous target."""


class NotFoundError(PaymentServiceError):
    """A referenced payment, transaction, schedule, customer or PO does not exist."""

    status_code = 404


class PaymentExceedsDebtError(PaymentServiceError):
    """FIFO allocation could not place the full payment amount."""


class AllocationMismatchError(PaymentServiceError):
    """The proposed allocations do not add up to the payment amount."""


class OverAllocationError(PaymentServiceError):
    """A single allocation exceeds the remaining balance of its target."""


class ScheduleExceedsPOTotalError(PaymentServiceError):
    """The schedules of a purchase order would add up to more than its total."""


class ScheduleBelowPaidError(PaymentServiceError):
    """A schedule cannot shrink below what has already been paid against it."""


class ScheduleHasPaymentsError(PaymentServiceError):
    """A schedule with allocations cannot be deleted."""

    status_code = 409
