"""ITS field decoding utilities.

This module converts individual tokens captured by the grammar into typed
values. Unlike free-form NMEA fields, every token reaching these functions has
already been shape-checked by the grammar, so a failed conversion is a defect:
the functions raise ``FieldConversionError`` rather than returning None.
Absent optional blocks never reach this module; the caller skips them.
"""

from datetime import datetime, timezone

from tracking.its.errors import FieldConversionError

# Conversion factor: km/h to knots
_KILOMETERS_PER_HOUR_TO_KNOTS = 0.539996

# Terminals on older firmware send a two-digit year
_CENTURY = 2000

_LATITUDE_LIMIT = 90.0
_LONGITUDE_LIMIT = 180.0


def parse_int_field(value: str, name: str = "integer") -> int:
    """Parse a decimal integer token.

    Args:
        value: Decimal digit string (e.g. "08")
        name: Field name used in the error message

    Returns:
        Parsed integer value

    Raises:
        FieldConversionError: If the token is not a decimal integer

    Example:
        >>> parse_int_field("08")
        8
    """
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise FieldConversionError(name, value) from e


def parse_float_field(value: str, name: str = "decimal") -> float:
    """Parse a decimal number token such as "36.0" or "545"."""
    try:
        return float(value)
    except (TypeError, ValueError) as e:
        raise FieldConversionError(name, value) from e


def parse_hex_field(value: str, name: str = "hex") -> int:
    """Parse a hexadecimal token such as "1A2B"; a leading '-' is allowed."""
    try:
        return int(value, 16)
    except (TypeError, ValueError) as e:
        raise FieldConversionError(name, value) from e


def parse_binary_field(value: str, name: str = "flags") -> int:
    """Parse a binary digit string as an unsigned integer.

    The leftmost character is the most significant bit.

    Example:
        >>> parse_binary_field("1011")
        11
        >>> parse_binary_field("10")
        2
    """
    if not value or value.startswith(("-", "+")):
        raise FieldConversionError(name, value, "expected binary digits")
    try:
        return int(value, 2)
    except (TypeError, ValueError) as e:
        raise FieldConversionError(name, value) from e


def parse_flag_field(value: str, name: str = "flag") -> bool:
    """Parse a "0"/"1" token as a boolean (any positive value is True)."""
    return parse_int_field(value, name) > 0


def knots_from_kph(value: float) -> float:
    """Convert a speed from km/h to knots.

    Example:
        >>> knots_from_kph(36.0)
        19.43985...
    """
    return value * _KILOMETERS_PER_HOUR_TO_KNOTS


def assemble_datetime(
    day: str,
    month: str,
    year: str,
    hour: str,
    minute: str,
    second: str,
) -> datetime:
    """Build a UTC timestamp from the captured date and time groups.

    ITS terminals report UTC. The year arrives as four digits ("2018") or,
    on older firmware, as two digits ("18" meaning 2018).

    Raises:
        FieldConversionError: If the components do not form a valid date
            (e.g. month "13")

    Example:
        >>> assemble_datetime("09", "11", "2018", "08", "35", "42")
        datetime.datetime(2018, 11, 9, 8, 35, 42, tzinfo=datetime.timezone.utc)
    """
    full_year = parse_int_field(year, "year")
    if len(year) == 2:
        full_year += _CENTURY
    components = (
        parse_int_field(month, "month"),
        parse_int_field(day, "day"),
        parse_int_field(hour, "hour"),
        parse_int_field(minute, "minute"),
        parse_int_field(second, "second"),
    )

    try:
        return datetime(full_year, *components, tzinfo=timezone.utc)
    except ValueError as e:
        token = f"{day}{month}{year} {hour}{minute}{second}"
        raise FieldConversionError("time", token, str(e)) from e


def _convert_degrees_hemisphere(
    value: str,
    hemisphere: str,
    negative: str,
    limit: float,
    name: str,
) -> float:
    degrees = parse_float_field(value, name)
    if degrees > limit:
        raise FieldConversionError(name, value, f"exceeds {limit} degrees")
    if hemisphere == negative:
        return -degrees
    return degrees


def convert_latitude(value: str, hemisphere: str) -> float:
    """Convert decimal-degree latitude plus N/S hemisphere to signed degrees.

    Example:
        >>> convert_latitude("12.345678", "S")
        -12.345678
    """
    return _convert_degrees_hemisphere(
        value, hemisphere, "S", _LATITUDE_LIMIT, "latitude"
    )


def convert_longitude(value: str, hemisphere: str) -> float:
    """Convert decimal-degree longitude plus E/W hemisphere to signed degrees.

    Example:
        >>> convert_longitude("098.765432", "E")
        98.765432
    """
    return _convert_degrees_hemisphere(
        value, hemisphere, "W", _LONGITUDE_LIMIT, "longitude"
    )
