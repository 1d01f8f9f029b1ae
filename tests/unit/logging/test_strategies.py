"""Tests for the individual redaction strategies."""

from __future__ import annotations

import hashlib

import pytest

from logscope.redaction.strategies import (
    HASH_FAILED,
    MASK_PLACEHOLDER,
    OMIT,
    apply_strategy,
    is_known_descriptor,
    mask_last,
)


@pytest.mark.parametrize("value", ["secret", "", 12345, None, {"nested": True}, ["a"]])
def test_mask_replaces_any_value_with_placeholder(value):
    """Mask ignores type and length of the original value."""

    assert apply_strategy(value, "mask") == MASK_PLACEHOLDER


def test_remove_returns_omit_sentinel():
    assert apply_strategy("anything", "remove") is OMIT
    assert repr(OMIT) == "OMIT"


def test_hash_uses_sha256_of_string_representation():
    """Strings and numbers hash to the hex digest of their str() form."""

    assert apply_strategy("p1", "hash") == hashlib.sha256(b"p1").hexdigest()
    assert apply_strategy(42, "hash") == hashlib.sha256(b"42").hexdigest()
    assert apply_strategy("p1", "hash") == apply_strategy("p1", "hash")



def test_hash_accepts_integers_too_long_for_decimal_conversion():
    """Huge ints hash their hexadecimal form instead of raising."""

    huge = 10**5000

    assert apply_strategy(huge, "hash") == hashlib.sha256(format(huge, "x").encode()).hexdigest()


@pytest.mark.parametrize("value", [None, True, {"a": 1}, ["a"], object()])
def test_hash_refuses_non_scalar_values(value):
    assert apply_strategy(value, "hash") == HASH_FAILED


def test_mask_last_reveals_trailing_characters():
    assert apply_strategy("1234567890", "mask-last-4") == "******7890"
    assert apply_strategy("1234567890", mask_last(2)) == "********90"


def test_mask_last_keeps_short_values_unchanged():
    """A value no longer than N already reveals at most N characters."""

    assert apply_strategy("1234", "mask-last-4") == "1234"
    assert apply_strategy("12", "mask-last-4") == "12"


def test_mask_last_zero_masks_everything():
    assert apply_strategy("abcd", "mask-last-0") == "****"


def test_mask_last_non_string_and_malformed_degrade_to_placeholder():
    assert apply_strategy(1234567890, "mask-last-4") == MASK_PLACEHOLDER
    assert apply_strategy("1234567890", "mask-last-x") == MASK_PLACEHOLDER
    assert apply_strategy("1234567890", "mask-last-") == MASK_PLACEHOLDER
    assert apply_strategy("1234567890", "mask-last-\u00b2") == MASK_PLACEHOLDER
    assert apply_strategy("1234567890", "mask-last-\u0664") == "******7890"
    assert is_known_descriptor("mask-last-\u00b2") is False


def test_custom_transform_result_is_returned_verbatim():
    assert apply_strategy("value", lambda v: {"len": len(v)}) == {"len": 5}


def test_custom_transform_failure_propagates():
    def _boom(_value):
        raise RuntimeError("transform failed")

    with pytest.raises(RuntimeError, match="transform failed"):
        apply_strategy("value", _boom)


def test_unknown_descriptor_degrades_to_mask():
    assert apply_strategy("value", "scramble") == MASK_PLACEHOLDER
    assert is_known_descriptor("scramble") is False
    assert is_known_descriptor("mask-last-3") is True
    assert is_known_descriptor(str.upper) is True
