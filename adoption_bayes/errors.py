"""Error and warning types shared across the package."""


class InvalidParameterError(ValueError):
    """Raised when a probability, count, limit or dataset field is out of range."""


class EmptyDatasetWarning(UserWarning):
    """Issued when a likelihood is evaluated against zero subjects."""
