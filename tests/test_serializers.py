"""
Serializer Tests.

Header/footer/chunk rendering for every registered output format.
"""

import datetime
from decimal import Decimal

import pytest

from tablexport.export.serializers.base import encode_value
from tablexport.export.serializers.csv_serializer import CsvSerializer
from tablexport.export.serializers.json_serializer import JsonSerializer
from tablexport.export.serializers.registry import get_serializer
from tablexport.export.serializers.sql_serializer import SqlSerializer


# ═══════════════════════════════════════════════════════════
# JSON
# ═══════════════════════════════════════════════════════════


class TestJsonSerializer:
    def test_header_and_footer_ignore_first_row(self):
        s = JsonSerializer()
        assert s.render_header({"a": 1}) == "["
        assert s.render_header(None) == "["
        assert s.render_footer() == "]"

    def test_every_row_gets_a_trailing_comma(self):
        chunk = JsonSerializer({"prettyprint": False}).render_chunk([{"a": 1}, {"a": 2}])
        assert chunk == '{"a":1},\n{"a":2},'

    def test_pretty_print_indents_two_spaces(self):
        chunk = JsonSerializer({"prettyprint": True}).render_chunk([{"a": 1, "b": "x"}])
        assert chunk == '{\n  "a": 1,\n  "b": "x"\n},'

    def test_empty_page_renders_nothing(self):
        assert JsonSerializer().render_chunk([]) == ""

    def test_driver_types_are_encoded(self):
        row = {
            "ts": datetime.datetime(2024, 1, 2, 3, 4, 5),
            "d": datetime.date(2024, 1, 2),
            "amount": Decimal("12.50"),
            "count": Decimal("3"),
            "ratio": float("nan"),
            "raw": b"\x01\xff",
        }
        chunk = JsonSerializer().render_chunk([row])
        assert chunk == (
            '{"ts":"2024-01-02T03:04:05","d":"2024-01-02","amount":12.5,'
            '"count":3,"ratio":null,"raw":"01ff"},'
        )

    def test_non_ascii_is_kept(self):
        assert JsonSerializer().render_chunk([{"name": "Zoë"}]) == '{"name":"Zoë"},'


# ═══════════════════════════════════════════════════════════
# CSV
# ═══════════════════════════════════════════════════════════


class TestCsvSerializer:
    def test_header_from_first_row(self):
        s = CsvSerializer()
        assert s.render_header({"id": 1, "name": "a"}) == "id,name"
        assert s.render_footer() is None

    def test_empty_source_has_no_header(self):
        assert CsvSerializer().render_header(None) is None

    def test_header_can_be_disabled(self):
        assert CsvSerializer({"include_header": False}).render_header({"id": 1}) is None

    def test_rows_follow_header_column_order(self):
        s = CsvSerializer()
        s.render_header({"id": 1, "name": "a"})
        chunk = s.render_chunk([{"name": "b", "id": 2}, {"id": 3, "name": "c"}])
        assert chunk == "2,b\n3,c"

    def test_quoting_and_nulls(self):
        s = CsvSerializer()
        s.render_header({"id": 1, "name": "x"})
        chunk = s.render_chunk([{"id": 1, "name": "a,b"}, {"id": None, "name": 'say "hi"'}])
        assert chunk == '1,"a,b"\n,"say ""hi"""'

    def test_integers_stay_integers_next_to_nulls(self):
        s = CsvSerializer()
        s.render_header({"n": 1, "m": "x"})
        assert s.render_chunk([{"n": 1, "m": "x"}, {"n": None, "m": "y"}]) == "1,x\n,y"

    def test_custom_delimiter(self):
        s = CsvSerializer({"delimiter": ";"})
        assert s.render_header({"a": 1, "b": 2}) == "a;b"
        assert s.render_chunk([{"a": 1, "b": datetime.date(2024, 5, 6)}]) == "1;2024-05-06"

    def test_empty_page_renders_nothing(self):
        assert CsvSerializer().render_chunk([]) == ""


# ═══════════════════════════════════════════════════════════
# SQL
# ═══════════════════════════════════════════════════════════


class TestSqlSerializer:
    def test_requires_table_name(self):
        with pytest.raises(ValueError):
            SqlSerializer({})

    def test_no_header_or_footer(self):
        s = SqlSerializer({"table_name": "people"})
        assert s.render_header({"id": 1}) is None
        assert s.render_footer() is None

    def test_one_insert_per_row(self):
        s = SqlSerializer({"table_name": "people"})
        chunk = s.render_chunk(
            [
                {"id": 1, "name": "O'Brien", "active": True, "score": None},
                {"id": 2, "name": "Lee", "active": False, "score": 9.5},
            ]
        )
        assert chunk == (
            'INSERT INTO "people" ("id", "name", "active", "score") VALUES (1, \'O\'\'Brien\', TRUE, NULL);\n'
            'INSERT INTO "people" ("id", "name", "active", "score") VALUES (2, \'Lee\', FALSE, 9.5);'
        )

    def test_dates_are_quoted(self):
        s = SqlSerializer({"table_name": "t"})
        chunk = s.render_chunk([{"d": datetime.date(2024, 1, 31)}])
        assert chunk == "INSERT INTO \"t\" (\"d\") VALUES ('2024-01-31');"


# ═══════════════════════════════════════════════════════════
# Registry & Value Encoding
# ═══════════════════════════════════════════════════════════


class TestRegistry:
    @pytest.mark.parametrize(
        "name,cls",
        [("json", JsonSerializer), ("CSV", CsvSerializer), ("sql", SqlSerializer)],
    )
    def test_lookup(self, name, cls):
        serializer = get_serializer(name, {"table_name": "t"})
        assert isinstance(serializer, cls)
        assert serializer.options["table_name"] == "t"

    def test_unknown_format(self):
        with pytest.raises(ValueError, match="Unsupported export format"):
            get_serializer("xlsx")


class TestEncodeValue:
    @pytest.mark.parametrize(
        "value,expected",
        [
            (None, None),
            (5, 5),
            ("text", "text"),
            (float("inf"), None),
            (Decimal("2.25"), 2.25),
            (Decimal("10"), 10),
            (bytearray(b"\x0a"), "0a"),
            (datetime.time(12, 30), "12:30:00"),
        ],
    )
    def test_encode(self, value, expected):
        assert encode_value(value) == expected
