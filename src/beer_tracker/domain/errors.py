"""Typed errors raised by the tracker core and services."""


class BeerTrackerError(Exception):
    """Base class for application errors."""


class ValidationError(BeerTrackerError):
    """Invalid parameters passed to a computation or service call."""


class NotFoundError(BeerTrackerError):
    """A referenced record does not exist."""


class DataUnavailableError(BeerTrackerError):
    """The backing store could not be reached or rejected the query."""


class InsufficientQuantityError(BeerTrackerError):
    """A purchase lot has no remaining units to consume."""

    def __init__(self, purchase_id: object) -> None:
        super().__init__(f"Purchase {purchase_id} has no remaining units")
        self.purchase_id = purchase_id
