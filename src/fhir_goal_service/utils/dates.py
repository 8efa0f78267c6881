"""
Date helpers for FHIR primitive types.

Care plan rows store dates in whatever form the form layer wrote them
("2023-01-01", "2023-01-01 00:00:00", "01/15/2023", "2023"); FHIR ``date``
wants ``YYYY``, ``YYYY-MM`` or ``YYYY-MM-DD`` and ``instant`` wants a full
timestamp with an offset.
"""
import re
from datetime import date, datetime, timezone
from typing import Optional, Union

from dateutil import parser as date_parser

from fhir_goal_service.utils.logging import get_logger

logger = get_logger(__name__)

FHIR_DATE_PATTERN = re.compile(r"^\d{4}(-\d{2}(-\d{2})?)?$")

# dateutil fills absent parts from its default; two different defaults show
# which parts the value actually carried.
_SENTINEL_A = datetime(1, 1, 1)
_SENTINEL_B = datetime(2, 2, 2)


def to_fhir_date(value: Union[str, date, None]) -> Optional[str]:
    """
    Normalize a stored date value to a FHIR ``date`` string.

    Partial dates keep their precision: a value without a day becomes
    ``YYYY-MM`` and one with only a year becomes ``YYYY``. No part of the
    date is ever filled in.

    Args:
        value: A date, datetime or date string

    Returns:
        The FHIR date string, or None if the value is empty, unparseable or
        has no year
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()

    value = value.strip()
    if not value:
        return None
    if FHIR_DATE_PATTERN.match(value):
        return value

    try:
        first = date_parser.parse(value, default=_SENTINEL_A)
        second = date_parser.parse(value, default=_SENTINEL_B)
    except (ValueError, OverflowError) as e:
        logger.debug(f"Unparseable date {value!r}: {e}")
        return None

    if first.year != second.year:
        logger.debug(f"Date without a year {value!r}")
        return None
    if first.month != second.month:
        return f"{first.year:04d}"
    if first.day != second.day:
        return f"{first.year:04d}-{first.month:02d}"
    return first.date().isoformat()


def fhir_instant_now() -> str:
    """Current UTC time as a FHIR ``instant`` (seconds precision, ``+00:00`` offset)."""
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat()
