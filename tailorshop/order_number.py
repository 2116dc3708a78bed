"""
Order number sequence: 1A, 2A, ... 1000A, 1B, ... 1000Z, then back to 1A.
The last issued code is looked up by the store; this module is pure.
"""
import re
import string

ORDER_NUMBER_RE = re.compile(r"^([0-9]{1,4})([A-Z])$")
# Same shape for the store-side lookup (POSIX regex); ASCII digits only
ORDER_NUMBER_SQL_PATTERN = "^[0-9]{1,4}[A-Z]$"

FIRST_ORDER_NUMBER = "1A"
NUMBERS_PER_LETTER = 1000


def is_valid_order_number(code: str | None) -> bool:
    return bool(code) and ORDER_NUMBER_RE.match(code) is not None


def next_order_number(last_code: str | None) -> str:
    """Return the code following last_code. Absent or malformed input restarts at 1A."""
    if not last_code:
        return FIRST_ORDER_NUMBER
    match = ORDER_NUMBER_RE.match(last_code)
    if match is None:
        return FIRST_ORDER_NUMBER

    number = int(match.group(1))
    letter = match.group(2)

    if number < NUMBERS_PER_LETTER:
        return f"{number + 1}{letter}"

    if letter == "Z":
        return FIRST_ORDER_NUMBER
    next_letter = string.ascii_uppercase[string.ascii_uppercase.index(letter) + 1]
    return f"1{next_letter}"
