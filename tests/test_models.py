"""Тести моделі кампанії: валідація, метрики, розбір форми."""

import math

import pytest

from adstats.models import (
    Campaign, DuplicateNameError, ValidationError,
    parse_count, parse_form, parse_real,
)


def make(**overrides) -> Campaign:
    data = dict(name="Sale", channel="Email", status="Active", budget=1000,
                impressions=10000, clicks=500, conversions=25, revenue=1500)
    data.update(overrides)
    return Campaign(**data)


class TestMetrics:

    def test_reference_campaign(self):
        c = make()
        assert c.ctr == pytest.approx(5.0)
        assert c.cpc == pytest.approx(2.0)
        assert c.cpa == pytest.approx(40.0)
        assert c.roi == pytest.approx(50.0)

    def test_zero_denominators(self):
        c = make(budget=0, impressions=0, clicks=0, conversions=0, revenue=300)
        assert c.ctr == 0.0
        assert c.cpc == 0.0
        assert c.cpa == 0.0
        assert c.roi == 0.0

    def test_no_conversions_only_cpa_is_zero(self):
        c = make(conversions=0)
        assert c.cpa == 0.0
        assert c.cpc == pytest.approx(2.0)

    def test_negative_roi(self):
        assert make(revenue=250).roi == pytest.approx(-75.0)


class TestValidation:

    def test_name_is_trimmed(self):
        assert make(name="  Sale  ").name == "Sale"

    @pytest.mark.parametrize("name", ["", "   "])
    def test_empty_name(self, name):
        with pytest.raises(ValidationError) as exc:
            make(name=name)
        assert exc.value.field == "name"

    def test_unknown_channel(self):
        with pytest.raises(ValidationError) as exc:
            make(channel="Radio")
        assert exc.value.field == "channel"

    def test_empty_status(self):
        with pytest.raises(ValidationError) as exc:
            make(status="")
        assert exc.value.field == "status"

    @pytest.mark.parametrize("field,value", [
        ("budget", -1),
        ("budget", math.nan),
        ("budget", "100"),
        ("revenue", -0.01),
        ("revenue", math.inf),
        ("impressions", -5),
        ("impressions", 10.5),
        ("clicks", True),
        ("conversions", -1),
    ])
    def test_bad_numbers(self, field, value):
        with pytest.raises(ValidationError) as exc:
            make(**{field: value})
        assert exc.value.field == field

    def test_clicks_over_impressions(self):
        with pytest.raises(ValidationError) as exc:
            make(impressions=100, clicks=101, conversions=0)
        assert exc.value.field == "clicks"

    def test_conversions_over_clicks(self):
        with pytest.raises(ValidationError) as exc:
            make(clicks=10, conversions=11)
        assert exc.value.field == "conversions"

    def test_validate_catches_later_mutation(self):
        c = make()
        c.clicks = c.impressions + 1
        with pytest.raises(ValidationError):
            c.validate()

    def test_validation_error_is_value_error(self):
        with pytest.raises(ValueError):
            make(budget=-1)

    def test_duplicate_error_message(self):
        err = DuplicateNameError("Sale")
        assert err.name == "Sale"
        assert "Sale" in str(err)


class TestUpdateFrom:

    def test_replaces_all_fields(self):
        c = make()
        c.update_from(make(name="Winter", channel="Search", status="Paused",
                           budget=10, impressions=5, clicks=4, conversions=3, revenue=7))
        assert c == make(name="Winter", channel="Search", status="Paused",
                         budget=10, impressions=5, clicks=4, conversions=3, revenue=7)

    def test_same_name_ignores_case(self):
        assert make().same_name(" sALE ")
        assert not make().same_name("Sales")


class TestParseForm:

    def form(self, **overrides):
        data = dict(name="Sale", channel="Email", status="Active", budget="1000",
                    impressions="10000", clicks="500", conversions="25", revenue="1500")
        data.update(overrides)
        return parse_form(**data)

    def test_valid_form(self):
        assert self.form() == make()

    def test_comma_decimal_separator(self):
        c = self.form(budget="1000,5", revenue=" 20,25 ")
        assert c.budget == pytest.approx(1000.5)
        assert c.revenue == pytest.approx(20.25)

    @pytest.mark.parametrize("field,text", [
        ("budget", "abc"),
        ("budget", ""),
        ("budget", "-3"),
        ("impressions", "1.5"),
        ("clicks", "many"),
        ("conversions", "-1"),
        ("revenue", "nan"),
    ])
    def test_bad_field(self, field, text):
        with pytest.raises(ValidationError) as exc:
            self.form(**{field: text})
        assert exc.value.field == field

    def test_first_failing_field_wins(self):
        with pytest.raises(ValidationError) as exc:
            self.form(name="", budget="abc")
        assert exc.value.field == "name"

    def test_cross_field_rule(self):
        with pytest.raises(ValidationError) as exc:
            self.form(impressions="10", clicks="20", conversions="0")
        assert exc.value.field == "clicks"

    def test_helpers(self):
        assert parse_real("1,25") == pytest.approx(1.25)
        assert parse_count(" 42 ") == 42
        with pytest.raises(ValueError):
            parse_real("inf")
        with pytest.raises(ValueError):
            parse_count("4.0")


class TestNameFormat:

    @pytest.mark.parametrize("name", [123, None, 4.5, ["Sale"]])
    def test_name_must_be_text(self, name):
        with pytest.raises(ValidationError) as exc:
            make(name=name)
        assert exc.value.field == "name"

    def test_non_text_name_set_later(self):
        c = make()
        c.name = 123
        with pytest.raises(ValidationError):
            c.validate()

    @pytest.mark.parametrize("name", ["#1 Promo", "  # hidden", "Line\nbreak", "Carriage\rreturn"])
    def test_names_that_break_file_lines(self, name):
        with pytest.raises(ValidationError) as exc:
            make(name=name)
        assert exc.value.field == "name"

    def test_hash_inside_name_is_fine(self):
        assert make(name="Promo #1").name == "Promo #1"

    def test_pipe_is_replaced_on_construction(self):
        assert make(name=" Spring|Summer ").name == "Spring/Summer"

    def test_pipe_set_later_is_rejected(self):
        c = make()
        c.name = "Spring|Summer"
        with pytest.raises(ValidationError):
            c.validate()

    def test_same_name_compares_stored_form(self):
        assert make(name="A/B").same_name("a|b")

    def test_form_with_pipe(self):
        c = parse_form(name="A|B", channel="Email", status="Active", budget="1",
                       impressions="10", clicks="5", conversions="1", revenue="2")
        assert c.name == "A/B"

    def test_form_with_leading_hash(self):
        with pytest.raises(ValidationError) as exc:
            parse_form(name="#1 Promo", channel="Email", status="Active", budget="1",
                       impressions="10", clicks="5", conversions="1", revenue="2")
        assert exc.value.field == "name"
