from datetime import date

import pytest

from normalize_enrich.event_schema import (
    EVENT_DATASETS,
    FieldRule,
    missing_required,
    normalize_event,
    validate_dataset,
)


def test_arms_sale_label_truncated_to_50_chars():
    sale = "F-16V Block 70 fighter jets with associated munitions and training package"
    ev = normalize_event("arms_sales", {"date": "2019-08-20", "weapon_sale": sale})
    assert ev.category == "arms"
    assert ev.label == sale[:50] + "..."
    assert ev.description == sale
    assert ev.date == date(2019, 8, 20)
    assert ev.source_dataset == "arms_sales"


def test_short_label_not_suffixed():
    ev = normalize_event("arms_sales", {"date": "2019-08-20", "weapon_sale": "Harpoon missiles"})
    assert ev.label == "Harpoon missiles"


def test_label_defaults_when_field_missing():
    ev = normalize_event("diplomatic", {"Date": "2023-04-05"})
    assert ev.label == "Diplomatic Event"
    assert ev.category == "diplomatic"
    assert ev.description == ""


def test_bills_and_ships_compose_fields():
    bill = normalize_event("bills", {"Date": "2022-09-14", "Bill_ID": "S.4428", "Milestone": "Committee markup"})
    assert bill.label == "S.4428 - Committee markup"
    assert bill.description == "S.4428: Committee markup"

    ship = normalize_event("ships", {"Date": "2022-08-28", "Country": "US", "Ship_Type": "Cruiser"})
    assert ship.label == "US - Cruiser"
    assert ship.description == "US Cruiser"

    labelled = normalize_event("ships", {"Date": "2022-08-28", "Country": "US", "Ship_Type": "Cruiser", "Label": "USS Antietam transit"})
    assert labelled.description == "USS Antietam transit"


def test_political_prefers_short_label():
    raw = {"date": "2024-05-20", "event_name": "Inauguration of President Lai", "short_label": "Lai inauguration"}
    ev = normalize_event("political_symbolic", raw)
    assert ev.category == "political"
    assert ev.label == "Lai inauguration"
    assert ev.description == "Inauguration of President Lai"
    assert ev.original_fields == raw


def test_unknown_dataset_is_ignored():
    assert normalize_event("weather", {"date": "2024-01-01"}) is None


@pytest.mark.parametrize("raw_date,reason", [(None, "missing"), ("soon", "unparseable"), ("1850-01-01", "out_of_range")])
def test_bad_date_raises(raw_date, reason):
    with pytest.raises(ValueError, match=reason):
        normalize_event("diplomatic", {"Date": raw_date, "Descriptor": "x"})


def test_missing_required_fields():
    assert missing_required("bills", {"Date": "2022-01-01", "Bill_ID": ""}) == ["Bill_ID", "Milestone"]
    assert missing_required("weather", {}) == []


def test_field_rule_falls_through_templates():
    rule = FieldRule(("{a} / {b}", "{a}"), default="none")
    assert rule.render({"a": "x", "b": "y"}) == "x / y"
    assert rule.render({"a": "x", "b": "  "}) == "x"
    assert rule.render({}) == "none"


def test_every_dataset_has_a_category():
    cats = {s.category for s in EVENT_DATASETS.values()}
    assert cats == {"arms", "diplomatic", "bills", "ships", "political"}


def test_validate_dataset_reports_every_problem():
    assert validate_dataset([]) == ["DATA is not an object"]
    errors = validate_dataset({"adiz_baseline": "nope", "ships": {}, "bills": 3})
    assert "Missing or invalid adiz_baseline array" in errors
    assert "ships must be an array" in errors
    assert "bills must be an array" in errors
    assert validate_dataset({"adiz_baseline": [], "ships": None}) == []
