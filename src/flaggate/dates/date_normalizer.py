"""
Lenient calendar date parsing and comparison

Dates are matched against a fixed, ordered list of formats and the first
format under which the text is a valid calendar date wins. The order is
significant: "01/02/2023" is read as day/month because no earlier format
accepts it. Nothing here raises on bad input; unparsable text yields None
and every comparator involving it yields False.
"""

import re
from dataclasses import dataclass
from datetime import date
from typing import Optional, Tuple

_MONTH_ABBREVIATIONS = {
    'jan': 1, 'feb': 2, 'mar': 3, 'apr': 4, 'may': 5, 'jun': 6,
    'jul': 7, 'aug': 8, 'sep': 9, 'oct': 10, 'nov': 11, 'dec': 12,
}


@dataclass(frozen=True)
class DateFormat:
    """One accepted calendar format"""
    name: str
    pattern: re.Pattern


@dataclass(frozen=True)
class ParsedDate:
    """A successfully parsed date and the format that accepted it"""
    value: date
    format_name: str


DATE_FORMATS: Tuple[DateFormat, ...] = (
    DateFormat('yyyy-MM-dd', re.compile(r'(?P<year>[0-9]{4})-(?P<month>[0-9]{2})-(?P<day>[0-9]{2})')),
    DateFormat('yyyy/MM/dd', re.compile(r'(?P<year>[0-9]{4})/(?P<month>[0-9]{2})/(?P<day>[0-9]{2})')),
    DateFormat('dd/MM/yyyy', re.compile(r'(?P<day>[0-9]{2})/(?P<month>[0-9]{2})/(?P<year>[0-9]{4})')),
    DateFormat('dd-MM-yyyy', re.compile(r'(?P<day>[0-9]{2})-(?P<month>[0-9]{2})-(?P<year>[0-9]{4})')),
    DateFormat('LLL d, yyyy', re.compile(r'(?P<month_name>[A-Za-z]{3}) (?P<day>[0-9]{1,2}), (?P<year>[0-9]{4})')),
)


def _build_date(fields) -> Optional[date]:
    if fields.get('month_name') is not None:
        month = _MONTH_ABBREVIATIONS.get(fields['month_name'].lower())
        if month is None:
            return None
    else:
        month = int(fields['month'])

    try:
        return date(int(fields['year']), month, int(fields['day']))
    except ValueError:
        # 2023-02-30 and friends
        return None


def parse_date(text) -> Optional[ParsedDate]:
    """
    Parse text against DATE_FORMATS in order

    Args:
        text: Candidate date text

    Returns:
        ParsedDate for the first accepting format, or None
    """
    if not isinstance(text, str):
        return None

    for date_format in DATE_FORMATS:
        found = date_format.pattern.fullmatch(text)
        if not found:
            continue
        value = _build_date(found.groupdict())
        if value is not None:
            return ParsedDate(value=value, format_name=date_format.name)

    return None


def _parse_pair(left: str, right: str) -> Optional[Tuple[date, date]]:
    parsed_left = parse_date(left)
    parsed_right = parse_date(right)
    if parsed_left is None or parsed_right is None:
        return None
    return parsed_left.value, parsed_right.value


def is_same(left: str, right: str) -> bool:
    pair = _parse_pair(left, right)
    return pair is not None and pair[0] == pair[1]


def is_before(left: str, right: str) -> bool:
    pair = _parse_pair(left, right)
    return pair is not None and pair[0] < pair[1]


def is_before_or_at(left: str, right: str) -> bool:
    pair = _parse_pair(left, right)
    return pair is not None and pair[0] <= pair[1]


def is_after(left: str, right: str) -> bool:
    pair = _parse_pair(left, right)
    return pair is not None and pair[0] > pair[1]


def is_after_or_at(left: str, right: str) -> bool:
    pair = _parse_pair(left, right)
    return pair is not None and pair[0] >= pair[1]

