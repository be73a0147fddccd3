"""
TLE Parser Module

Parses Two-Line Element (TLE) records into raw element sets.

Every field is described once in a column schema (TLE_FIELDS) and read by a
single extraction routine, so bounds checking and error reporting live in one
place. Columns below are 1-indexed and inclusive, matching the published
format description:

    Line 1                                 Line 2
    01      line number                    01      line number
    03-07   catalog number                 03-07   catalog number
    08      classification                 09-16   inclination (deg)
    10-17   international designator       18-25   RAAN (deg)
    19-20   epoch year (2 digits)          27-33   eccentricity (implied 0.)
    21-32   epoch day of year              35-42   argument of perigee (deg)
    34-43   first derivative of n          44-51   mean anomaly (deg)
    45-52   second derivative of n         53-63   mean motion (rev/day)
    54-61   BSTAR drag term                64-68   revolution number
    63      ephemeris type                 69      checksum
    65-68   element set number
    69      checksum

Accepted text is the three-line form: an optional title line followed by
exactly two data lines.
"""

import logging
import math
from typing import List, NamedTuple, Optional, Tuple

from orbit_core.errors import TLEFormatError

logger = logging.getLogger(__name__)

TLE_LINE_LENGTH = 69

# Field kinds
INTEGER = "integer"
FLOAT = "float"
IMPLIED_DECIMAL = "implied_decimal"
EXPONENT = "exponent"
CATALOG = "catalog"
TEXT = "text"

# Alpha-5 leading letters; I and O are skipped to avoid confusion with 1 and 0
ALPHA5_LETTERS = "ABCDEFGHJKLMNPQRSTUVWXYZ"


class TLEField(NamedTuple):
    name: str
    line: int
    start: int  # 1-indexed, inclusive
    end: int  # 1-indexed, inclusive
    kind: str
    blank_is_zero: bool = False


TLE_FIELDS = (
    TLEField("satnum", 1, 3, 7, CATALOG),
    TLEField("classification", 1, 8, 8, TEXT),
    TLEField("international_designator", 1, 10, 17, TEXT),
    TLEField("epoch_year", 1, 19, 20, INTEGER),
    TLEField("epoch_days", 1, 21, 32, FLOAT),
    TLEField("ndot", 1, 34, 43, FLOAT),
    TLEField("nddot", 1, 45, 52, EXPONENT),
    TLEField("bstar", 1, 54, 61, EXPONENT),
    TLEField("ephemeris_type", 1, 63, 63, INTEGER, blank_is_zero=True),
    TLEField("element_number", 1, 65, 68, INTEGER, blank_is_zero=True),
    TLEField("satnum_line2", 2, 3, 7, CATALOG),
    TLEField("inclination_deg", 2, 9, 16, FLOAT),
    TLEField("raan_deg", 2, 18, 25, FLOAT),
    TLEField("eccentricity", 2, 27, 33, IMPLIED_DECIMAL),
    TLEField("arg_perigee_deg", 2, 35, 42, FLOAT),
    TLEField("mean_anomaly_deg", 2, 44, 51, FLOAT),
    TLEField("mean_motion_rev_per_day", 2, 53, 63, FLOAT),
    TLEField("revolution_number", 2, 64, 68, INTEGER, blank_is_zero=True),
)


class RawElements(NamedTuple):
    """Elements exactly as published, in degrees and revolutions per day."""

    satnum: int
    classification: str
    international_designator: str
    epoch_year: int  # two digits
    epoch_days: float
    ndot: float  # rev/day^2 (already halved in the TLE convention)
    nddot: float  # rev/day^3
    bstar: float  # 1/earth radii
    ephemeris_type: int
    element_number: int
    inclination_deg: float
    raan_deg: float
    eccentricity: float
    arg_perigee_deg: float
    mean_anomaly_deg: float
    mean_motion_rev_per_day: float
    revolution_number: int


def compute_checksum(line: str) -> int:
    """Modulo-10 TLE checksum of the first 68 columns ('-' counts as 1)."""
    checksum = 0
    for char in line[:68]:
        if char.isdigit():
            checksum += int(char)
        elif char == "-":
            checksum += 1
    return checksum % 10


def _parse_exponent(text: str) -> float:
    """
    Parse the TLE implied-decimal exponent notation.

    " 13711-3" is +0.13711e-3 and "-11606-4" is -0.11606e-4. The mantissa
    sign and the exponent sign are both optional.
    """
    mantissa_text = text[:-2].strip()
    exponent_text = text[-2:].strip()

    sign = 1.0
    if mantissa_text[:1] in ("-", "+"):
        if mantissa_text[0] == "-":
            sign = -1.0
        mantissa_text = mantissa_text[1:].strip()
    if not mantissa_text:
        mantissa_text = "0"
    if not mantissa_text.isdigit():
        raise ValueError(f"mantissa {mantissa_text!r} is not numeric")

    exponent = int(exponent_text) if exponent_text not in ("", "+", "-") else 0
    return sign * float("0." + mantissa_text) * math.pow(10.0, exponent)


def _parse_catalog_number(text: str) -> int:
    """Catalog numbers are five digits, or Alpha-5 ("A0001" is 100001)."""
    text = text.strip()
    if text and text[0] in ALPHA5_LETTERS and text[1:].isdigit():
        return (ALPHA5_LETTERS.index(text[0]) + 10) * 10000 + int(text[1:])
    return int(text)


def extract_field(line: str, field: TLEField):
    """
    Read one field from a TLE data line.

    Args:
        line: The full 69-character data line the field belongs to
        field: Column description of the field

    Returns:
        Value converted according to the field kind

    Raises:
        TLEFormatError: If the columns are missing or do not hold the kind
    """
    if field.end > len(line):
        raise TLEFormatError(
            f"Line {field.line} is too short for field '{field.name}' "
            f"(columns {field.start}-{field.end})",
            field=field.name,
            line_number=field.line,
        )

    text = line[field.start - 1:field.end]

    if field.kind == TEXT:
        return text.strip()

    if not text.strip() and (field.blank_is_zero or field.kind in (IMPLIED_DECIMAL, EXPONENT)):
        return 0 if field.kind == INTEGER else 0.0

    try:
        if field.kind == INTEGER:
            return int(text)
        if field.kind == CATALOG:
            return _parse_catalog_number(text)
        if field.kind == FLOAT:
            value = float(text)
        elif field.kind == IMPLIED_DECIMAL:
            digits = text.replace(" ", "0")
            if not digits.isdigit():
                raise ValueError(f"{text!r} is not a digit string")
            value = float("0." + digits)
        elif field.kind == EXPONENT:
            value = _parse_exponent(text)
        else:
            raise TypeError(f"Unknown field kind {field.kind!r}")
        # float() also accepts "nan", "inf" and "infinity"
        if not math.isfinite(value):
            raise ValueError(f"{text!r} is not a finite number")
    except ValueError as e:
        raise TLEFormatError(
            f"Field '{field.name}' on line {field.line} "
            f"(columns {field.start}-{field.end}) is not numeric: {text!r}",
            field=field.name,
            line_number=field.line,
        ) from e

    return value


def _check_line(line: str, line_number: int, verify_checksum: bool) -> None:
    if len(line) != TLE_LINE_LENGTH:
        raise TLEFormatError(
            f"Line {line_number} has incorrect length ({len(line)}, must be {TLE_LINE_LENGTH})",
            line_number=line_number,
        )
    if not line.startswith(f"{line_number} "):
        raise TLEFormatError(
            f"Line {line_number} should start with '{line_number} ' (found: {line[:2]!r})",
            line_number=line_number,
        )
    if verify_checksum:
        expected = line[68]
        computed = compute_checksum(line)
        if not expected.isdigit() or int(expected) != computed:
            raise TLEFormatError(
                f"Checksum mismatch on line {line_number} "
                f"(computed: {computed}, expected: {expected})",
                field="checksum",
                line_number=line_number,
            )


def parse_lines(line1: str, line2: str, verify_checksum: bool = False) -> RawElements:
    """
    Parse the two data lines of a TLE record.

    Args:
        line1: First data line
        line2: Second data line
        verify_checksum: Also reject lines whose column-69 checksum is wrong

    Returns:
        RawElements in native TLE units

    Raises:
        TLEFormatError: On the first structural problem found
    """
    line1 = line1.rstrip("\r\n ")
    line2 = line2.rstrip("\r\n ")

    _check_line(line1, 1, verify_checksum)
    _check_line(line2, 2, verify_checksum)

    lines = {1: line1, 2: line2}
    values = {field.name: extract_field(lines[field.line], field) for field in TLE_FIELDS}

    satnum_line2 = values.pop("satnum_line2")
    if values["satnum"] != satnum_line2:
        raise TLEFormatError(
            f"Line 1's catalog number ({values['satnum']}) does not match "
            f"line 2's ({satnum_line2})",
            field="satnum",
            line_number=2,
        )

    return RawElements(**values)


def split_record(text: str) -> Tuple[str, List[str]]:
    """
    Split TLE text into its optional title and its data lines.

    Three non-blank lines are always title plus data lines, so a title may
    itself start with "1 ".

    Returns:
        Tuple of (name, data_lines); name is "" when no title line is given
    """
    lines = [line.rstrip("\r ") for line in text.splitlines()]
    lines = [line for line in lines if line.strip()]

    name = ""
    if len(lines) == 3:
        name = lines[0].strip()
        if name.startswith("0 "):
            # Space-Track 3LE title lines carry a "0 " prefix
            name = name[2:].strip()
        lines = lines[1:]

    if len(lines) != 2:
        raise TLEFormatError(
            f"Expected exactly two TLE data lines, found {len(lines)}"
        )
    return name, lines


def parse_tle(text: str, verify_checksum: bool = False) -> Tuple[str, RawElements]:
    """
    Parse a TLE record given as text.

    Args:
        text: Two data lines, optionally preceded by a title line
        verify_checksum: Also validate the line checksums

    Returns:
        Tuple of (name, RawElements)

    Raises:
        TLEFormatError: If the record is malformed
    """
    try:
        name, (line1, line2) = split_record(text)
        raw = parse_lines(line1, line2, verify_checksum=verify_checksum)
    except TLEFormatError as e:
        logger.error(f"TLE parsing error: {e}")
        raise

    logger.debug(f"Parsed TLE for catalog number {raw.satnum} ({name or 'unnamed'})")
    return name, raw


def to_dict(raw: RawElements, name: Optional[str] = None) -> dict:
    """Export raw elements as a plain dictionary."""
    data = raw._asdict()
    if name is not None:
        data["name"] = name
    return data
