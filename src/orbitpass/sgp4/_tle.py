"""
Two-Line Element parsing.

Pure-Python functions that validate TLE lines and convert them into
:class:`~orbitpass.sgp4.TwoLineElement` records in the units SGP4 expects.
Every structural problem is reported as
:class:`~orbitpass.exceptions.MalformedTLEError`.
"""

from __future__ import annotations

from math import pi

from orbitpass.exceptions import MalformedTLEError
from orbitpass.sgp4._types import TwoLineElement

_DEG2RAD = pi / 180.0
_XPDOTP = 1440.0 / (2.0 * pi)  # 229.1831180523293

TLE_LINE_LENGTH = 69

# Columns that must hold a space (0-based) in each line
_SEPARATOR_COLUMNS = {
    1: (1, 8, 17, 32, 43, 52, 61, 63),
    2: (1, 7, 16, 25, 33, 42, 51),
}


def compute_checksum(line: str) -> int:
    """Compute the TLE checksum for a line.

    The checksum is the sum of all digit characters plus 1 for each
    minus sign, modulo 10, computed over the first 68 characters.

    Args:
        line: A TLE line string (at least 68 characters).

    Returns:
        The checksum digit (0-9).
    """
    return sum((int(c) if c.isdigit() else c == "-") for c in line[:68]) % 10


def validate_tle_line(line: str, line_number: int) -> None:
    """Validate a TLE line's format and checksum.

    Args:
        line: A TLE line string.  Trailing whitespace is ignored.
        line_number: Expected line number (1 or 2).

    Raises:
        MalformedTLEError: If the line fails format or checksum validation.
    """
    line = line.rstrip()

    if len(line) != TLE_LINE_LENGTH:
        raise MalformedTLEError(
            f"TLE line {line_number} has {len(line)} chars, expected {TLE_LINE_LENGTH}: {line!r}"
        )

    if line[0] != str(line_number):
        raise MalformedTLEError(f"TLE line {line_number} does not start with '{line_number}': {line!r}")

    for column in _SEPARATOR_COLUMNS[line_number]:
        if line[column] != " ":
            raise MalformedTLEError(
                f"TLE line {line_number} expected a space at column {column + 1}: {line!r}"
            )

    checksum_char = line[68]
    if not checksum_char.isdigit():
        raise MalformedTLEError(f"TLE line {line_number} has non-digit checksum: {line!r}")

    expected = compute_checksum(line)
    actual = int(checksum_char)
    if expected != actual:
        raise MalformedTLEError(
            f"TLE line {line_number} checksum mismatch: computed {expected}, found {actual}"
        )


def _implied_decimal(field: str) -> float:
    # " 28098-4" -> 0.28098e-4; the mantissa sign sits in the first column
    mantissa = float(field[0] + "." + field[1:6])
    return mantissa * 10.0 ** int(field[6:8])


def parse_tle(line1: str, line2: str, name: str | None = None) -> TwoLineElement:
    """Parse a Two-Line Element set.

    Follows the fixed-column TLE format.  Angular values are converted to
    radians and mean motion to rad/min for SGP4 internal use.

    Args:
        line1: First TLE line (69 characters including checksum).
        line2: Second TLE line (69 characters including checksum).
        name: Optional object name.

    Returns:
        The parsed element set.

    Raises:
        MalformedTLEError: If either line fails validation, a numeric field
            cannot be parsed, the catalog numbers differ, or the mean motion
            is not positive.

    Examples:
        ```python
        from orbitpass.sgp4 import parse_tle
        tle = parse_tle(
            "1 25544U 98067A   08264.51782528 -.00002182  00000-0 -11606-4 0  2927",
            "2 25544  51.6416 247.4627 0006703 130.5360 325.0288 15.72125391563537",
        )
        tle.satnum  # '25544'
        ```
    """
    validate_tle_line(line1, 1)
    validate_tle_line(line2, 2)

    l1 = line1.rstrip()
    l2 = line2.rstrip()

    satnum = l1[2:7].strip()
    if satnum != l2[2:7].strip():
        raise MalformedTLEError(
            f"Catalog numbers in lines 1 and 2 do not match: {l1[2:7]!r} != {l2[2:7]!r}"
        )

    try:
        classification = l1[7].strip() or "U"
        intldesg = l1[9:17].rstrip()
        two_digit_year = int(l1[18:20])
        epochdays = float(l1[20:32])
        ndot = float(l1[33:43])
        nddot = _implied_decimal(l1[44:52])
        bstar = _implied_decimal(l1[53:61])
        ephtype = int(l1[62].strip() or "0")
        elnum = int(l1[64:68])

        inclo = float(l2[8:16])
        nodeo = float(l2[17:25])
        ecco = float("0." + l2[26:33].replace(" ", "0"))
        argpo = float(l2[34:42])
        mo = float(l2[43:51])
        no_kozai = float(l2[52:63])
        revnum = int(l2[63:68].strip() or "0")
    except ValueError as exc:
        raise MalformedTLEError(f"Unparsable numeric field in TLE {satnum}: {exc}") from exc

    if no_kozai <= 0.0:
        raise MalformedTLEError(f"TLE {satnum} has non-positive mean motion {no_kozai}")

    year = two_digit_year + 2000 if two_digit_year < 57 else two_digit_year + 1900

    # Split Julian date, matching Satrec.twoline2rv() in the reference library
    days_int, fraction = divmod(epochdays, 1.0)
    jdsatepoch = year * 365 + (year - 1) // 4 + int(days_int) + 1721044.5
    jdsatepochF = round(fraction, 8)

    return TwoLineElement(
        line1=l1,
        line2=l2,
        name=name.strip() if name else None,
        satnum=satnum,
        classification=classification,
        intldesg=intldesg,
        epochyr=two_digit_year,
        epochdays=epochdays,
        ndot=ndot / (_XPDOTP * 1440.0),
        nddot=nddot / (_XPDOTP * 1440.0 * 1440.0),
        bstar=bstar,
        ephtype=ephtype,
        elnum=elnum,
        revnum=revnum,
        inclo=inclo * _DEG2RAD,
        nodeo=nodeo * _DEG2RAD,
        ecco=ecco,
        argpo=argpo * _DEG2RAD,
        mo=mo * _DEG2RAD,
        no_kozai=no_kozai / _XPDOTP,
        jdsatepoch=jdsatepoch,
        jdsatepochF=jdsatepochF,
    )


def parse_tle_text(text: str) -> list[TwoLineElement]:
    """Parse a block of two- or three-line element sets.

    Blank lines are ignored.  A line that does not start with ``"1 "`` or
    ``"2 "`` is taken as the name of the element set that follows (the
    CelesTrak three-line format); a leading ``"0 "`` is stripped from names.

    Args:
        text: Catalog text containing one or more element sets.

    Returns:
        Element sets in the order they appear.

    Raises:
        MalformedTLEError: If an element set is incomplete or invalid.
    """
    lines = [line.rstrip() for line in text.splitlines() if line.strip()]
    elements: list[TwoLineElement] = []
    name: str | None = None
    i = 0
    while i < len(lines):
        line = lines[i]
        if line.startswith("1 "):
            if i + 1 >= len(lines) or not lines[i + 1].startswith("2 "):
                raise MalformedTLEError(f"TLE line 1 without a following line 2: {line!r}")
            elements.append(parse_tle(line, lines[i + 1], name=name))
            name = None
            i += 2
            continue
        if line.startswith("2 "):
            raise MalformedTLEError(f"TLE line 2 without a preceding line 1: {line!r}")
        if name is not None:
            raise MalformedTLEError(f"Name line {name!r} is not followed by a TLE")
        name = line[2:] if line.startswith("0 ") else line
        i += 1

    if name is not None:
        raise MalformedTLEError(f"Name line {name!r} is not followed by a TLE")
    return elements
