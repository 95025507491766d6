"""Tests for uno.serialization.to_json."""

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal

import pytest

from uno.models import Model
from uno.serialization import to_json


class Person(Model):
    name: str = ""


@dataclass
class Pair:
    a: int
    b: int


class TestToJson:
    def test_compact(self) -> None:
        assert to_json({"a": 1, "b": [1, 2]}) == '{"a":1,"b":[1,2]}'

    def test_non_ascii_kept(self) -> None:
        assert to_json("ñ") == '"ñ"'

    def test_indent(self) -> None:
        assert to_json({"a": 1}, indent=2) == '{\n  "a": 1\n}'

    def test_model(self) -> None:
        assert to_json(Person().load({"name": "ada"})) == '{"name":"ada"}'

    def test_dataclass(self) -> None:
        assert to_json(Pair(1, 2)) == '{"a":1,"b":2}'

    def test_dates_and_decimal(self) -> None:
        assert to_json([date(2024, 1, 2), Decimal("1.10")]) == '["2024-01-02","1.10"]'
        assert to_json(datetime(2024, 1, 2, 3, 4, 5)) == '"2024-01-02T03:04:05"'

    def test_unsupported(self) -> None:
        with pytest.raises(TypeError, match="not JSON serializable"):
            to_json(object())
