"""Tests for the sender filter variant."""

import pytest

from chat_stats.exceptions import MalformedInputError
from chat_stats.filters.sender import SenderFilter, SenderKind


@pytest.mark.parametrize("raw, kind", [
    (None, SenderKind.EVERYONE),
    ("", SenderKind.EVERYONE),
    ("both", SenderKind.EVERYONE),
    ("you", SenderKind.ME),
    ("them", SenderKind.OTHERS),
    ("all", SenderKind.OTHERS),
])
def test_parse_aliases(raw, kind):
    assert SenderFilter.parse(raw).kind is kind


def test_parse_handle():
    person = SenderFilter.parse("+15195551234")
    assert person.is_handle
    assert person.handle == "+15195551234"


def test_parse_passthrough():
    person = SenderFilter.me()
    assert SenderFilter.parse(person) is person


def test_parse_rejects_other_types():
    with pytest.raises(MalformedInputError):
        SenderFilter.parse(42)


def test_from_handle_requires_value():
    with pytest.raises(MalformedInputError):
        SenderFilter.from_handle("")


def test_flags():
    assert SenderFilter.everyone().is_everyone
    assert SenderFilter.others().is_others
    assert not SenderFilter.me().is_others
