"""Unit tests for cx_vector_db.loader."""

import io

import pytest

from cx_vector_db.errors import FormatError
from cx_vector_db.loader import load, loads, parse_value
from cx_vector_db.types import MISSING

TABLE = (
    "user_id,s1_http_resp,s1_http_rate,s2_db_lat\n"
    "user_1,120.5000,33.1000,-1\n"
    "user_2,-1,12.0000,180.2500\n"
    "user_3,75.0000,-1,-1\n"
)


# ---------------------------------------------------------------------------
# parse_value
# ---------------------------------------------------------------------------


def test_parse_value_number():
    assert parse_value("12.5") == 12.5
    assert parse_value(" 3 ") == 3.0
    assert parse_value("1e3") == 1000.0


def test_parse_value_sentinel():
    assert parse_value("-1") == MISSING
    assert parse_value("  -1\t") == MISSING


def test_parse_value_minus_one_float_literal_equals_sentinel():
    # Not the sentinel token, but its value coincides with MISSING in-band.
    assert parse_value("-1.0") == MISSING


def test_parse_value_custom_sentinel():
    assert parse_value("NA", missing_token="NA") == MISSING
    assert parse_value("-1", missing_token="NA") == -1.0


@pytest.mark.parametrize(
    "token", ["abc", "", "1.2.3", "nan", "inf", "-Infinity", "1_000", "1_0.5"]
)
def test_parse_value_rejects(token):
    with pytest.raises(ValueError):
        parse_value(token)


# ---------------------------------------------------------------------------
# load / loads
# ---------------------------------------------------------------------------


def test_loads_table():
    p = loads(TABLE)
    assert p.id_column == "user_id"
    assert p.header == ("s1_http_resp", "s1_http_rate", "s2_db_lat")
    assert p.ids == ["user_1", "user_2", "user_3"]
    assert p[0].vector.tolist() == [120.5, 33.1, MISSING]
    assert p[1].vector.tolist() == [MISSING, 12.0, 180.25]
    assert p[2].missing_count() == 2


def test_load_from_path(tmp_path):
    path = tmp_path / "vectors.csv"
    path.write_text(TABLE, encoding="utf-8")
    assert load(path).ids == ["user_1", "user_2", "user_3"]
    assert load(str(path)).dim == 3


def test_load_from_stream():
    p = load(io.StringIO(TABLE))
    assert len(p) == 3


def test_load_custom_delimiter():
    p = loads("id;a;b\nx;1;2\ny;-1;4\n", delimiter=";")
    assert p.id_column == "id"
    assert p[1].vector.tolist() == [MISSING, 4.0]


def test_identifier_taken_verbatim():
    p = loads("user_id,a\n user 1 ,2\n")
    assert p.ids == [" user 1 "]


def test_duplicate_identifiers_accepted():
    p = loads("user_id,a,b\nu,1,2\nu,3,4\n")
    assert p.ids == ["u", "u"]
    assert len(p) == 2


def test_header_only_gives_empty_population():
    p = loads("user_id,a,b\n")
    assert len(p) == 0
    assert p.dim == 2


def test_blank_lines_skipped():
    p = loads("user_id,a\n\nu1,1\n\nu2,2\n")
    assert p.ids == ["u1", "u2"]


def test_no_trailing_newline():
    p = loads("user_id,a\nu1,1")
    assert p.ids == ["u1"]


# ---------------------------------------------------------------------------
# FormatError
# ---------------------------------------------------------------------------


def test_empty_source():
    with pytest.raises(FormatError, match="header"):
        loads("")


def test_blank_header():
    with pytest.raises(FormatError, match="header"):
        loads("\nu1,1\n")


def test_header_of_empty_names():
    with pytest.raises(FormatError, match="header"):
        loads(",,\nu1,1,2\n")


def test_header_without_features():
    with pytest.raises(FormatError, match="no feature columns"):
        loads("user_id\nu1\n")


def test_row_too_short():
    with pytest.raises(FormatError, match="expected 3 fields, got 2") as info:
        loads("user_id,a,b\nu1,1,2\nu2,1\n")
    assert info.value.line == 3


def test_row_too_long():
    with pytest.raises(FormatError) as info:
        loads("user_id,a\nu1,1,2\n")
    assert info.value.line == 2


def test_bad_number():
    with pytest.raises(FormatError, match="'s1_x'") as info:
        loads("user_id,s1_x\nu1,12\nu2,twelve\n")
    assert info.value.line == 3
    assert "line 3" in str(info.value)


def test_non_finite_rejected():
    with pytest.raises(FormatError):
        loads("user_id,a\nu1,nan\n")


def test_digit_separators_rejected():
    with pytest.raises(FormatError, match="line 2"):
        loads("user_id,a\nu1,1_000\n")


def test_invalid_utf8_is_format_error(tmp_path):
    path = tmp_path / "binary.csv"
    path.write_bytes(b"user_id,a\nu1,\xff\xfe\n")
    with pytest.raises(FormatError, match="unreadable"):
        load(path)


def test_format_error_is_value_error():
    with pytest.raises(ValueError):
        loads("user_id,a\nu1,x\n")


def test_load_is_atomic(tmp_path):
    path = tmp_path / "bad.csv"
    path.write_text("user_id,a,b\nu1,1,2\nu2,3,4\nu3,5\n", encoding="utf-8")
    result = None
    with pytest.raises(FormatError):
        result = load(path)
    assert result is None


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load(tmp_path / "nope.csv")
