"""Tests for trellis.validation: affirm helpers and error entries."""

import pytest

from trellis.errors import ValidationFailure
from trellis.validation import ErrorEntry, affirm, affirm_error, make_error


class TestAffirm:
    def test_truthy_condition_passes(self) -> None:
        affirm(True, "field missing")
        affirm("ann", "field missing")
        affirm([0], "field missing")

    def test_falsy_condition_raises_single_entry(self) -> None:
        with pytest.raises(ValidationFailure) as info:
            affirm("name" in {}, "field missing", {"field": "name"})
        assert info.value.errors == (ErrorEntry("field missing", {"field": "name"}),)

    def test_data_defaults_to_empty(self) -> None:
        with pytest.raises(ValidationFailure) as info:
            affirm(0, "name too long")
        assert info.value.errors[0].data == {}

    def test_message_is_exception_text(self) -> None:
        with pytest.raises(ValidationFailure, match="name too long"):
            affirm(None, "name too long")


class TestAffirmError:
    def test_none_is_noop(self) -> None:
        affirm_error(None)

    def test_empty_list_is_noop(self) -> None:
        affirm_error([])

    def test_single_mapping(self) -> None:
        with pytest.raises(ValidationFailure) as info:
            affirm_error({"msg": "user exists", "data": {"name": "ann"}})
        assert [e.to_dict() for e in info.value.errors] == [
            {"msg": "user exists", "data": {"name": "ann"}},
        ]

    def test_list_keeps_order(self) -> None:
        errors = [
            {"msg": "field missing", "data": {"field": "name"}},
            ErrorEntry("field missing", {"field": "password"}),
        ]
        with pytest.raises(ValidationFailure) as info:
            affirm_error(errors)
        assert [e.data["field"] for e in info.value.errors] == ["name", "password"]
        assert str(info.value) == "field missing, field missing"

    def test_single_entry(self) -> None:
        with pytest.raises(ValidationFailure) as info:
            affirm_error(ErrorEntry("user exists"))
        assert info.value.errors == (ErrorEntry("user exists"),)


class TestErrorEntry:
    def test_to_dict(self) -> None:
        assert ErrorEntry("user exists", {"name": "ann"}).to_dict() == {
            "msg": "user exists",
            "data": {"name": "ann"},
        }

    def test_make_error_passes_entries_through(self) -> None:
        entry = ErrorEntry("x")
        assert make_error(entry) is entry

    def test_make_error_missing_data(self) -> None:
        assert make_error({"msg": "x"}) == ErrorEntry("x", {})
