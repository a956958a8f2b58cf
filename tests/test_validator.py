from api_tester.parser.base import DateField, NumberField, SelectField, Option, TextareaField, TextField
from api_tester.parser.schema import EMAIL_PATTERN, EMAIL_PATTERN_ERROR
from api_tester.request.validator import validate_fields


class TestRequired:
    def test_empty_string_fails(self):
        result = validate_fields([TextField(name="name", label="Name", required=True)], {"name": ""})
        assert result.valid is False
        assert result.errors == {"name": "Name ist erforderlich"}

    def test_missing_and_none_fail(self):
        fields = [TextField(name="a", label="A", required=True), TextField(name="b", label="B", required=True)]
        result = validate_fields(fields, {"b": None})
        assert set(result.errors) == {"a", "b"}

    def test_value_passes(self):
        result = validate_fields([TextField(name="name", label="Name", required=True)], {"name": "x"})
        assert result.valid is True
        assert result.errors == {}

    def test_optional_empty_is_fine(self):
        result = validate_fields([NumberField(name="n", label="N", min=5)], {"n": ""})
        assert result.valid is True

    def test_required_short_circuits(self):
        field = TextField(name="code", label="Code", required=True, min_length=3)
        assert validate_fields([field], {"code": ""}).errors["code"] == "Code ist erforderlich"


class TestNumber:
    def test_not_a_number(self):
        result = validate_fields([NumberField(name="n", label="N")], {"n": "abc"})
        assert result.errors == {"n": "N muss eine Zahl sein"}

    def test_nan_rejected(self):
        assert not validate_fields([NumberField(name="n", label="N")], {"n": "nan"}).valid

    def test_bounds(self):
        field = NumberField(name="n", label="N", min=1, max=10)
        assert validate_fields([field], {"n": 0}).errors == {"n": "N muss mindestens 1 sein"}
        assert validate_fields([field], {"n": "11"}).errors == {"n": "N darf maximal 10 sein"}
        assert validate_fields([field], {"n": 10}).valid

    def test_zero_is_a_value(self):
        field = NumberField(name="n", label="N", required=True, min=0)
        assert validate_fields([field], {"n": 0}).valid


class TestText:
    def test_length(self):
        field = TextField(name="s", label="S", min_length=2, max_length=4)
        assert validate_fields([field], {"s": "a"}).errors == {"s": "S muss mindestens 2 Zeichen lang sein"}
        assert validate_fields([field], {"s": "abcde"}).errors == {"s": "S darf maximal 4 Zeichen lang sein"}
        assert validate_fields([field], {"s": "abc"}).valid

    def test_length_checked_before_pattern(self):
        field = TextField(name="s", label="S", max_length=2, pattern="^[0-9]+$")
        assert validate_fields([field], {"s": "abc"}).errors["s"] == "S darf maximal 2 Zeichen lang sein"

    def test_pattern(self):
        field = TextareaField(name="s", label="S", pattern="[0-9]")
        assert validate_fields([field], {"s": "abc1"}).valid
        assert validate_fields([field], {"s": "abc"}).errors == {"s": "S hat ein ungültiges Format"}

    def test_custom_pattern_message(self):
        field = TextField(name="mail", label="Mail", pattern=EMAIL_PATTERN, pattern_error=EMAIL_PATTERN_ERROR)
        assert validate_fields([field], {"mail": "nope"}).errors == {"mail": EMAIL_PATTERN_ERROR}
        assert validate_fields([field], {"mail": "me@example.com"}).valid

    def test_invalid_pattern_ignored(self):
        field = TextField(name="s", label="S", pattern="([")
        assert validate_fields([field], {"s": "abc"}).valid


class TestOtherKinds:
    def test_select_and_date_only_checked_for_required(self):
        fields = [
            SelectField(name="size", label="Size", options=[Option(value="s", label="s")], required=True),
            DateField(name="day", label="Day", min="2024-01-01"),
        ]
        result = validate_fields(fields, {"size": "", "day": "1999-01-01"})
        assert result.errors == {"size": "Size ist erforderlich"}

    def test_only_failing_fields_reported(self):
        fields = [TextField(name="ok", label="Ok"), TextField(name="bad", label="Bad", required=True)]
        result = validate_fields(fields, {"ok": "fine"})
        assert list(result.errors) == ["bad"]
