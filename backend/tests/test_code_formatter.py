import pytest

from correlativos.core.config import settings
from correlativos.services.code_formatter import format_code


def test_pads_to_three_digits_by_default():
    assert format_code("INF", 5) == "INF-005"
    assert format_code("INF", 42) == "INF-042"
    assert format_code("INF", 999) == "INF-999"


def test_wider_numbers_are_not_truncated():
    assert format_code("INF", 1000) == "INF-1000"
    assert format_code("OFI", 123456) == "OFI-123456"


def test_explicit_width():
    assert format_code("INF", 7, width=5) == "INF-00007"
    assert format_code("INF", 7, width=1) == "INF-7"


def test_default_width_follows_settings(monkeypatch):
    monkeypatch.setattr(settings, "CORRELATIVE_CODE_WIDTH", 4)
    assert format_code("INF", 12) == "INF-0012"


@pytest.mark.parametrize("number", [0, -1])
def test_rejects_non_positive_numbers(number):
    with pytest.raises(ValueError):
        format_code("INF", number)


def test_rejects_non_positive_width():
    with pytest.raises(ValueError):
        format_code("INF", 1, width=0)
