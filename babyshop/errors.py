"""Error taxonomy for the product attributes subsystem."""


class VariationError(Exception):
    """Base class for attribute and variation failures."""


class ValidationError(VariationError):
    """Form data rejected before submission. Carries the first violation."""


class MediaError(ValidationError):
    """An uploaded file or media URL cannot be attached to a variation."""


class PersistenceError(VariationError):
    """A backend read or write failed.

    ``product_id`` is kept for log context; the message is safe to show
    to an admin.
    """

    def __init__(self, message, product_id=None):
        super().__init__(message)
        self.product_id = product_id
