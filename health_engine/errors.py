"""Exceptions raised by the health engine."""


class HealthEngineError(Exception):
    """Base class for health engine errors."""


class CustomerNotFoundError(HealthEngineError, LookupError):
    """Customer id is unknown to the profile store."""

    def __init__(self, customer_id: str):
        self.customer_id = customer_id
        super().__init__(f"Customer not found: {customer_id}")


class DependencyError(HealthEngineError):
    """A collaborator (store, insights engine, ...) failed."""

    def __init__(self, source: str, customer_id: str, error: Exception):
        self.source = source
        self.customer_id = customer_id
        super().__init__(f"{source} failed for customer {customer_id}: {error}")
