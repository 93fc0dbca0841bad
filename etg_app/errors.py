"""Input validation errors raised by the ETG engine."""


class EtgInputError(ValueError):
    """User-supplied data cannot be estimated. The message is safe to display."""
