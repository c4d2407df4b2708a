import pytest

from rallymaster.core.errors import ValidationError
from rallymaster.services import fields


@pytest.mark.parametrize("value, expected", [(7, 7), ("7", 7), (12345.0, 12345), (None, None), ("", None)])
def test_integer_accepts_whole_numbers(value, expected):
    assert fields.integer({"odometer": value}, "odometer") == expected


@pytest.mark.parametrize("value", [12345.9, 2.7, True, "abc", "12.5", [1]])
def test_integer_rejects_fractions_and_non_numbers(value):
    with pytest.raises(ValidationError, match="odometer must be an integer"):
        fields.integer({"odometer": value}, "odometer")
