"""Exceptions raised while decoding ITS sentences."""


class FieldConversionError(ValueError):
    """A token accepted by the grammar could not be converted.

    The grammar only admits well-formed tokens, so this signals a mismatch
    between the grammar and the extraction code (or an out-of-range value such
    as a latitude above 90 degrees). It is raised instead of returning None so
    that callers can tell a broken sentence apart from "not this protocol".

    Attributes:
        field: Name of the field being converted.
        token: The raw token that failed conversion.
    """

    def __init__(self, field: str, token: str | None, reason: str = "") -> None:
        message = f"cannot convert {field} from {token!r}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.field = field
        self.token = token
