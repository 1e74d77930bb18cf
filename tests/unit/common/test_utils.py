"""Tests for common.utils module."""

from common.utils import get_value


class TestGetValue:
    def test_dict_access(self) -> None:
        obj = {"name": "test"}
        assert get_value(obj, "name") == "test"

    def test_object_attribute_access(self) -> None:
        class Obj:
            name = "test"

        assert get_value(Obj(), "name") == "test"

    def test_dict_missing_key_returns_none(self) -> None:
        assert get_value({}, "missing") is None

    def test_object_missing_attr_returns_none(self) -> None:
        class Obj:
            pass

        assert get_value(Obj(), "missing") is None

    def test_missing_key_returns_default(self) -> None:
        assert get_value({}, "missing", default=5) == 5

    def test_alias_used_when_key_missing(self) -> None:
        assert get_value({"output_file": "a.md"}, "outputFile", "output_file") == "a.md"

    def test_key_preferred_over_alias(self) -> None:
        obj = {"outputFile": "a.md", "output_file": "b.md"}
        assert get_value(obj, "outputFile", "output_file") == "a.md"

    def test_falsy_value_is_returned(self) -> None:
        assert get_value({"enabled": False}, "enabled", default=True) is False
