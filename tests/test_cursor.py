from datetime import date

import pytest

from servicehours.utils.cursor import InvalidCursor, decode_cursor, encode_cursor


def test_cursor_round_trip():
    token = encode_cursor(date(2025, 3, 4), "abc123")
    assert decode_cursor(token) == (date(2025, 3, 4), "abc123")


@pytest.mark.parametrize("token", ["", "garbage", "eyJ4IjoxfQ"])
def test_bad_cursors(token):
    with pytest.raises(InvalidCursor):
        decode_cursor(token)
