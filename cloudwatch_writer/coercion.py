"""Coercion of agent sample values into CloudWatch datum values."""

import logging
import math
import numbers

from cloudwatch_writer.errors import UnconvertibleValueError

logger = logging.getLogger(__name__)

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1


def to_double(value: object) -> float:
    """Convert a sample value to the float CloudWatch expects.

    Floats pass through unchanged. Integers (anything ``numbers.Integral``
    except bool) within the signed 64-bit range are widened to float;
    magnitudes above 2**53 lose precision.

    Every rejection logs exactly one error line before raising.

    Args:
        value: Sample value of unknown runtime type

    Returns:
        The value as a finite float

    Raises:
        UnconvertibleValueError: If the value is not a supported numeric shape
    """
    if isinstance(value, float):
        if not math.isfinite(value):
            raise _unconvertible(
                value, f"Value {value} is not finite and cannot be sent to CloudWatch"
            )
        return value

    if isinstance(value, numbers.Integral) and not isinstance(value, bool):
        if not INT64_MIN <= int(value) <= INT64_MAX:
            raise _unconvertible(value, f"Integer value {value} is outside the 64-bit range")
        return float(value)

    raise _unconvertible(value, f"There is no converter from {type(value).__name__} to Double")


def _unconvertible(value: object, message: str) -> UnconvertibleValueError:
    logger.error(message)
    return UnconvertibleValueError(value, message)
