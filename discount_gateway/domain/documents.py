"""Checksum validation for individual (CPF) and organization (CNPJ) tax documents"""

import re
from typing import List, Optional

from discount_gateway.domain.enums import PersonType

_NON_DIGITS = re.compile(r"\D")


def _digits(doc: Optional[str]) -> str:
    return _NON_DIGITS.sub("", doc or "")


def _all_same(digits: str) -> bool:
    return len(set(digits)) == 1


def _mod11_digit(total: int) -> int:
    remainder = total % 11
    return 0 if remainder < 2 else 11 - remainder


def _individual_check_digit(numbers: List[int], length: int) -> int:
    # Weights run from length+1 down to 2
    total = sum(numbers[i] * (length + 1 - i) for i in range(length))
    return _mod11_digit(total)


def validate_individual_document(doc: Optional[str]) -> bool:
    """
    Validate an 11-digit individual document.

    Check digits:
    - first: weights 10..2 over positions 0-8
    - second: weights 11..2 over positions 0-9
    - digit = 11 - (sum % 11), or 0 when that lands on 10 or 11

    Example:
        "529.982.247-25" -> True
        "111.111.111-11" -> False (repeated digits)
    """
    digits = _digits(doc)
    if len(digits) != 11 or _all_same(digits):
        return False

    numbers = [int(d) for d in digits]
    first = _individual_check_digit(numbers, 9)
    second = _individual_check_digit(numbers, 10)

    return numbers[9] == first and numbers[10] == second


def _organization_check_digit(numbers: List[int], last_position: int) -> int:
    # Walk right-to-left with weights cycling 2..9
    total = 0
    weight = 2
    for i in range(last_position, -1, -1):
        total += numbers[i] * weight
        weight = 2 if weight == 9 else weight + 1
    return _mod11_digit(total)


def validate_organization_document(doc: Optional[str]) -> bool:
    """
    Validate a 14-digit organization document.

    First check digit covers positions 11..0, second covers 12..0, both with
    cyclic weights 2..9; digit is 0 when sum % 11 < 2, else 11 - remainder.

    Example:
        "11.222.333/0001-81" -> True
    """
    digits = _digits(doc)
    if len(digits) != 14 or _all_same(digits):
        return False

    numbers = [int(d) for d in digits]
    first = _organization_check_digit(numbers, 11)
    second = _organization_check_digit(numbers, 12)

    return numbers[12] == first and numbers[13] == second


def validate_document(doc: Optional[str], person_type: Optional[PersonType]) -> bool:
    """Dispatch on person type; anything not INDIVIDUAL is checked as an organization"""
    if person_type == PersonType.INDIVIDUAL:
        return validate_individual_document(doc)
    return validate_organization_document(doc)
