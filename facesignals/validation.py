"""
Setter argument checks shared by all detectors
"""

import math

from .exceptions import InvalidParameterError


def check_number(name, value):
    """Value must be a finite number."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise InvalidParameterError(name, value, "must be a number") from None
    if math.isnan(number) or math.isinf(number):
        raise InvalidParameterError(name, value, "must be finite")
    return number


def check_ratio(name, value, upper=1.0):
    """Value must lie in [0, upper]."""
    number = check_number(name, value)
    if not 0.0 <= number <= upper:
        raise InvalidParameterError(name, value, f"must be between 0 and {upper}")
    return number


def check_non_negative(name, value):
    number = check_number(name, value)
    if number < 0:
        raise InvalidParameterError(name, value, "must not be negative")
    return number


def check_positive(name, value):
    number = check_number(name, value)
    if number <= 0:
        raise InvalidParameterError(name, value, "must be greater than 0")
    return number


def check_positive_int(name, value):
    number = check_positive(name, value)
    if number != int(number):
        raise InvalidParameterError(name, value, "must be a whole number")
    return int(number)
