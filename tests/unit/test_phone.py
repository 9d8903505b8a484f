"""Property-based tests for phone identity normalization."""

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st
from pydantic import BaseModel, ValidationError

from src.backoffice.core.phone import (
    PhoneNumber,
    is_canonical_phone,
    normalize_phone,
    validate_phone,
)

pytestmark = pytest.mark.unit

subscriber = st.from_regex(r"^[0-9]{10}$", fullmatch=True)
separators = st.sampled_from(["", " ", "-", "(", ")", ".", " - "])


def _punctuate(digits: str, sep: str) -> str:
    return f"{digits[:3]}{sep}{digits[3:6]}{sep}{digits[6:8]}{sep}{digits[8:]}"


class PhoneForm(BaseModel):
    phone: PhoneNumber


@given(digits=subscriber, sep=separators)
@settings(max_examples=100)
def test_representations_of_one_number_agree(digits: str, sep: str):
    """Country code, trunk prefix, bare subscriber and punctuation all agree."""
    expected = f"+7{digits}"
    variants = [
        f"+7{digits}",
        f"7{digits}",
        f"8{digits}",
        f"+7 {_punctuate(digits, sep)}",
        f"8 ({digits[:3]}) {digits[3:6]}-{digits[6:8]}-{digits[8:]}",
    ]
    # A bare subscriber number is only unambiguous if it starts with neither prefix
    if digits[0] not in "78":
        variants.append(_punctuate(digits, sep))

    assert {normalize_phone(variant) for variant in variants} == {expected}


@given(raw=st.text(max_size=40))
@settings(max_examples=200)
def test_normalize_is_idempotent(raw: str):
    once = normalize_phone(raw)
    assert normalize_phone(once) == once


@given(raw=st.text(max_size=40))
def test_normalize_never_raises_and_always_has_country_code(raw: str):
    assert normalize_phone(raw).startswith("+7")


class TestValidatePhone:
    def test_examples(self):
        assert normalize_phone("8 (999) 123-45-67") == "+79991234567"
        assert normalize_phone("+7 999 123 45 67") == "+79991234567"
        assert normalize_phone("9991234567") == "+79991234567"

    def test_short_number_normalizes_but_fails_validation(self):
        """The normalizer is total; the format check is separate."""
        assert normalize_phone("12345") == "+712345"
        assert not is_canonical_phone("+712345")
        with pytest.raises(ValueError, match="10 digits"):
            validate_phone("12345")

    def test_only_ascii_digits_count(self):
        # Arabic-Indic zero is a Unicode digit but never part of a phone identity
        assert normalize_phone("+7 999 123 45 6٠") == "+7999123456"
        assert not is_canonical_phone(normalize_phone("999123456٠"))

    def test_schema_field_stores_canonical_form(self):
        assert PhoneForm(phone="8-999-123-45-67").phone == "+79991234567"

    def test_schema_field_rejects_long_number(self):
        with pytest.raises(ValidationError) as exc_info:
            PhoneForm(phone="+7 999 123 45 67 8")
        assert any(error["loc"] == ("phone",) for error in exc_info.value.errors())
