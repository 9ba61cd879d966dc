"""Shared test fixtures."""

import typing

import pytest


class ScriptedRandom:
    """Random source that hands out predetermined die values in order."""

    def __init__(self, values: typing.Iterable[int]) -> None:
        self.values = list(values)
        self.calls: typing.List[typing.Tuple[int, int]] = []

    def randint(self, a: int, b: int) -> int:
        self.calls.append((a, b))
        if not self.values:
            raise AssertionError("random source exhausted after %s rolls" % len(self.calls))
        value = self.values.pop(0)
        if not a <= value <= b:
            raise AssertionError("scripted value %s outside [%s, %s]" % (value, a, b))
        return value


@pytest.fixture
def scripted():
    """Factory for a ScriptedRandom returning the given values."""
    return lambda *values: ScriptedRandom(values)
