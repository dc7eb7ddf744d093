"""Unit tests for the device command bit."""

import pytest

from ledger import DeviceCommandBit, ValidationError


def test_defaults_to_zero() -> None:
    assert DeviceCommandBit().get() == 0


def test_set_returns_new_value() -> None:
    bit = DeviceCommandBit()
    assert bit.set(1) == 1
    assert bit.get() == 1
    assert bit.set(0) == 0


@pytest.mark.parametrize("value", [2, -1, "1", True, None, 0.5])
def test_rejects_values_other_than_zero_or_one(value) -> None:
    bit = DeviceCommandBit(initial=1)
    with pytest.raises(ValidationError):
        bit.set(value)
    assert bit.get() == 1


def test_rejects_invalid_initial_value() -> None:
    with pytest.raises(ValidationError):
        DeviceCommandBit(initial=5)
