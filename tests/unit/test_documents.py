"""Unit tests for CPF/CNPJ checksum validation"""

import random

import pytest

from discount_gateway.domain.documents import (
    validate_document,
    validate_individual_document,
    validate_organization_document,
)
from discount_gateway.domain.enums import PersonType


def _cpf_digit(base: list) -> int:
    weight = len(base) + 1
    total = sum(d * (weight - i) for i, d in enumerate(base))
    r = 11 - total % 11
    return 0 if r >= 10 else r


def _cnpj_digit(base: list) -> int:
    weights = [6, 5, 4, 3, 2, 9, 8, 7, 6, 5, 4, 3, 2][-len(base):]
    r = sum(d * w for d, w in zip(base, weights)) % 11
    return 0 if r < 2 else 11 - r


def _random_cpf(rng: random.Random) -> str:
    base = [rng.randint(0, 9) for _ in range(9)]
    base.append(_cpf_digit(base))
    base.append(_cpf_digit(base))
    return "".join(map(str, base))


def _random_cnpj(rng: random.Random) -> str:
    base = [rng.randint(0, 9) for _ in range(12)]
    base.append(_cnpj_digit(base))
    base.append(_cnpj_digit(base))
    return "".join(map(str, base))


@pytest.mark.parametrize("doc", ["529.982.247-25", "52998224725", "111.444.777-35"])
def test_valid_individual_documents(doc):
    assert validate_individual_document(doc) is True


def test_individual_check_digit_of_ten_becomes_zero():
    """Base 100000001 sums to a remainder of 1, so the first check digit is 0"""
    assert validate_individual_document("100.000.001-08") is True
    assert validate_individual_document("100.000.001-18") is False


@pytest.mark.parametrize(
    "doc",
    [
        "529.982.247-26",  # wrong second digit
        "529.982.247-35",  # wrong first digit
        "111.111.111-11",  # repeated digits
        "000.000.000-00",
        "5299822472",  # too short
        "529982247255",  # too long
        "",
        None,
    ],
)
def test_invalid_individual_documents(doc):
    assert validate_individual_document(doc) is False


@pytest.mark.parametrize("doc", ["11.222.333/0001-81", "11222333000181"])
def test_valid_organization_documents(doc):
    assert validate_organization_document(doc) is True


@pytest.mark.parametrize(
    "doc",
    [
        "11.222.333/0001-82",
        "11.222.333/0001-91",
        "11.111.111/1111-11",
        "1122233300018",
        "",
        None,
    ],
)
def test_invalid_organization_documents(doc):
    assert validate_organization_document(doc) is False


def test_generated_documents_agree_with_validators():
    rng = random.Random(20240315)
    for _ in range(200):
        cpf = _random_cpf(rng)
        if len(set(cpf)) > 1:
            assert validate_individual_document(cpf), cpf
            wrong = cpf[:-1] + str((int(cpf[-1]) + 1) % 10)
            assert not validate_individual_document(wrong), wrong

        cnpj = _random_cnpj(rng)
        if len(set(cnpj)) > 1:
            assert validate_organization_document(cnpj), cnpj
            wrong = cnpj[:-1] + str((int(cnpj[-1]) + 1) % 10)
            assert not validate_organization_document(wrong), wrong


def test_validate_document_dispatches_on_person_type():
    assert validate_document("529.982.247-25", PersonType.INDIVIDUAL) is True
    assert validate_document("529.982.247-25", PersonType.ORGANIZATION) is False
    assert validate_document("11.222.333/0001-81", PersonType.ORGANIZATION) is True
    assert validate_document("11.222.333/0001-81", PersonType.INDIVIDUAL) is False
    # Unknown person type falls back to the organization rules
    assert validate_document("11.222.333/0001-81", None) is True
