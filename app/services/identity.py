"""
Customer identity verification.

The upstream system issues no authentication token to customers, so
ownership of an order is established by asking the caller to restate a
piece of customer data already on the order: phone (or its last digits),
email, first name, last name or full name.

Checks run cheapest and least ambiguous first and short-circuit on the
first match:

1. Phone: digits only, last 10. Equal, suffix either way, or same last 4.
2. Email: exact, local part, or fuzzy against the local part (70%).
3. Names: exact, prefix, substring, or fuzzy (first/last 60%, full 50%).
4. Fallback: fuzzy against first and last name (70%).

The matching is deliberately loose. The thresholds are tuning constants,
not validated security parameters; keep them as they are.
"""
import re
from typing import Optional

from app.schemas.order import Order

EMAIL_FUZZY_THRESHOLD = 70
FIRST_NAME_FUZZY_THRESHOLD = 60
LAST_NAME_FUZZY_THRESHOLD = 60
FULL_NAME_FUZZY_THRESHOLD = 50
FALLBACK_FUZZY_THRESHOLD = 70

MIN_PHONE_DIGITS = 4
MIN_EMAIL_LENGTH = 3
MIN_NAME_LENGTH = 2
MIN_FULL_NAME_LENGTH = 3

_NON_DIGIT = re.compile(r"[^0-9]")
_NON_ALNUM = re.compile(r"[^a-z0-9]")
_NON_LETTER = re.compile(r"[^a-z\s]")
_WHITESPACE = re.compile(r"\s+")


def normalize_phone(phone: Optional[str]) -> str:
    """Digits only, last 10 (drops country codes)."""
    if not phone:
        return ""
    return _NON_DIGIT.sub("", phone)[-10:]


def normalize_email(email: Optional[str]) -> str:
    if not email:
        return ""
    return email.lower().strip()


def normalize_name(name: Optional[str]) -> str:
    """Lowercase, letters and single spaces only."""
    if not name:
        return ""
    letters = _NON_LETTER.sub("", name.lower())
    return _WHITESPACE.sub(" ", letters).strip()


def _alnum(value: str) -> str:
    return _NON_ALNUM.sub("", value.lower())


def fuzzy_score(input_str: str, target: str) -> float:
    """
    Ordered-subsequence similarity of *input_str* against *target* (0-100).

    Walks the input left to right with a cursor into the target. A
    character equal to the target at the cursor advances both; otherwise
    the target is searched forward from the cursor, and a hit counts and
    moves the cursor past it. Characters not found are skipped without
    moving the cursor. The score is matched / min(len(input), len(target)).
    """
    a = _alnum(input_str)
    b = _alnum(target)
    if not a or not b:
        return 0.0

    matched = 0
    cursor = 0
    for ch in a:
        if cursor < len(b) and b[cursor] == ch:
            matched += 1
            cursor += 1
            continue
        found = b.find(ch, cursor)
        if found != -1:
            matched += 1
            cursor = found + 1

    return matched / min(len(a), len(b)) * 100


def fuzzy_match(input_str: Optional[str], target: Optional[str], threshold: float) -> bool:
    """
    Permissive match tolerating typos, transpositions and partial names.

    >>> fuzzy_match("jon", "john", 60)
    True
    >>> fuzzy_match("xyz", "john", 60)
    False
    """
    if not input_str or not target:
        return False

    a = _alnum(input_str)
    b = _alnum(target)
    if len(a) < 2 or len(b) < 2:
        return False
    if a == b or a in b or b in a:
        return True

    return fuzzy_score(a, b) >= threshold


def _phone_matches(order_phone: str, identifier: str) -> bool:
    input_phone = normalize_phone(identifier)
    if not order_phone or len(input_phone) < MIN_PHONE_DIGITS:
        return False

    return (
        order_phone == input_phone
        or order_phone.endswith(input_phone)
        or input_phone.endswith(order_phone)
        or order_phone[-4:] == input_phone[-4:]
    )


def _email_matches(order_email: str, identifier: str) -> bool:
    if not order_email or len(identifier) < MIN_EMAIL_LENGTH:
        return False
    if order_email == identifier:
        return True

    local_part = order_email.split("@")[0]
    if not local_part:
        return False
    if identifier == local_part or local_part in identifier:
        return True

    return fuzzy_match(identifier, local_part, EMAIL_FUZZY_THRESHOLD)


def _name_matches(order_name: str, identifier: str, threshold: float, min_length: int) -> bool:
    if not order_name or len(identifier) < min_length:
        return False

    return (
        identifier == order_name
        or identifier.startswith(order_name)
        or order_name.startswith(identifier)
        or order_name in identifier
        or identifier in order_name
        or fuzzy_match(identifier, order_name, threshold)
    )


def verify_customer_ownership(order: Optional[Order], identifier: Optional[str]) -> bool:
    """
    Decide whether *identifier* restates customer data on *order*.

    Pure and deterministic. Never raises for missing fields.
    """
    if order is None or not identifier or not identifier.strip():
        return False

    # 1. Phone
    if _phone_matches(normalize_phone(order.phone), identifier):
        return True

    # 2. Email
    if _email_matches(normalize_email(order.email), normalize_email(identifier)):
        return True

    # 3. Names
    first_name = normalize_name(order.first_name)
    last_name = normalize_name(order.last_name)
    full_name = normalize_name(f"{order.first_name or ''} {order.last_name or ''}")
    input_name = normalize_name(identifier)

    if _name_matches(first_name, input_name, FIRST_NAME_FUZZY_THRESHOLD, MIN_NAME_LENGTH):
        return True
    if _name_matches(last_name, input_name, LAST_NAME_FUZZY_THRESHOLD, MIN_NAME_LENGTH):
        return True
    if _name_matches(full_name, input_name, FULL_NAME_FUZZY_THRESHOLD, MIN_FULL_NAME_LENGTH):
        return True

    # 4. Fallback
    return (
        fuzzy_match(identifier, first_name, FALLBACK_FUZZY_THRESHOLD)
        or fuzzy_match(identifier, last_name, FALLBACK_FUZZY_THRESHOLD)
    )
