class MarketplaceError(Exception):
    status_code: int = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFound(MarketplaceError):
    status_code = 404


class AlreadyBooked(MarketplaceError):
    status_code = 409

    def __init__(self, message: str = "You have already booked/purchased this property."):
        super().__init__(message)


class InvalidSignature(MarketplaceError):
    status_code = 400

    def __init__(self, message: str = "Invalid payment signature"):
        super().__init__(message)


class InvalidTransition(MarketplaceError):
    status_code = 409


class GatewayUnavailable(Exception):
    """Payment gateway could not issue an order; callers fall back locally."""


class SideEffectFailure(Exception):
    """A post-commit cache, receipt or notification step failed."""

    def __init__(
        self,
        step: str,
        target_id: int,
        cause: Exception | None = None,
        target: str = "payment",
    ):
        super().__init__(f"{step} failed for {target} {target_id}: {cause}")
        self.step = step
        self.target = target
        self.target_id = target_id
        self.cause = cause
