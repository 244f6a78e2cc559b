# marketplace/domain/errors.py


class MarketplaceError(Exception):
    """Base class for errors raised by the marketplace services."""


class ValidationError(MarketplaceError, ValueError):
    """Missing or malformed input. Nothing is written, the step does not advance."""


class StepOrderError(ValidationError):
    """A checkout step was completed out of order."""


class EmptyCartError(ValidationError):
    """Checkout cannot start (or finish) with an empty cart."""


class NotFoundError(MarketplaceError, LookupError):
    pass


class RemoteFetchError(MarketplaceError):
    """Reference data (addresses, delivery methods) could not be loaded. Retryable."""


class PaymentGatewayError(MarketplaceError):
    """The hosted payment widget failed to load, the gateway rejected the order
    or the buyer dismissed the widget."""


class PaymentVerificationError(MarketplaceError):
    """
    The payment callback signature did not match.
    Money may have moved without a confirmed order, so the buyer is told to
    contact support instead of simply retrying.
    """

    def __init__(self, message: str = "Payment verification failed. Please contact support."):
        super().__init__(message)


class OrderPersistenceError(MarketplaceError):
    """The order transaction failed and was rolled back."""


class CheckoutBusyError(MarketplaceError):
    """An order placement for this checkout is already in flight."""
