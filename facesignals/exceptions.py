"""
Exception types raised by facesignals detectors
"""


class FaceSignalsError(Exception):
    """Base class for all facesignals errors."""


class InsufficientLandmarksError(FaceSignalsError, IndexError):
    """
    Raised when a landmark set is shorter than the indices a detector reads.

    Detectors check this before touching any internal state, so a bad frame
    never leaves a detector half-updated.
    """

    def __init__(self, required, received, what="landmarks"):
        self.required = required
        self.received = received
        super().__init__(f"Expected at least {required} {what}, got {received}")


class InvalidParameterError(FaceSignalsError, ValueError):
    """Raised by detector setters when a tunable value is out of range."""

    def __init__(self, name, value, reason):
        self.name = name
        self.value = value
        super().__init__(f"Invalid {name}={value!r}: {reason}")
