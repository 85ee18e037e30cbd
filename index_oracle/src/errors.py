"""Error taxonomy for the index oracle.

Every failure raised by the engine derives from :class:`OracleError`. Where a
builtin exception already describes the condition the error also subclasses it,
so callers can catch either ``ZeroSupplyError`` or plain ``ZeroDivisionError``.

A rejected swing is deliberately absent here: it is reported as an
:class:`~index_oracle.src.events.AnomalyDetected` event, never raised.
"""


class OracleError(Exception):
    """Base exception for index oracle errors."""

    pass


class ConstructionError(OracleError):
    """Raised when the engine cannot be seeded with a genesis sample."""

    pass


class UnauthorizedError(OracleError, PermissionError):
    """Raised when a caller lacks the privilege for an operation.

    :ivar identity: The rejected caller.
    :ivar action: Name of the attempted operation.
    """

    def __init__(self, identity: str, action: str):
        """Initialize the error.

        :param identity: The rejected caller.
        :param action: Name of the attempted operation.
        """
        self.identity = identity
        self.action = action
        super().__init__(f"{identity} is not permitted to {action}")


class ZeroSupplyError(OracleError, ZeroDivisionError):
    """Raised when a rate or price is evaluated against a zero supply."""

    pass


class ArithmeticOverflowError(OracleError, OverflowError):
    """Raised when a sample field does not fit its storage width.

    :ivar field: Name of the offending field.
    :ivar value: The out-of-range value.
    :ivar bits: Width of the field in bits.
    """

    def __init__(self, field: str, value: int, bits: int):
        """Initialize the overflow error.

        :param field: Name of the offending field.
        :param value: The out-of-range value.
        :param bits: Width of the field in bits.
        """
        self.field = field
        self.value = value
        self.bits = bits
        super().__init__(f"{field}={value} does not fit in uint{bits}")


class EmptySeriesError(OracleError, IndexError):
    """Raised when the last sample is requested from an empty series."""

    pass


class RateSourceError(OracleError):
    """Raised when a rate source cannot produce a reading."""

    pass
