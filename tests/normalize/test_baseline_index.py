from datetime import date

from normalize_enrich.baseline_index import BaselineIndex


def test_counts_are_dense_and_zero_filled():
    idx = BaselineIndex.from_records([
        {"Date": "2024-01-03", "ADIZ_count": 7},
        {"Date": "2024-01-01", "ADIZ_count": 5},
    ])
    assert len(idx) == 2
    assert idx.first_date == date(2024, 1, 1)
    assert idx.last_date == date(2024, 1, 3)
    assert idx.count("2024-01-02") == 0
    assert idx.counts([date(2024, 1, 3), date(2024, 1, 2), date(2024, 1, 1)]) == [7, 0, 5]
    assert idx.counts([]) == []
    assert "2024-01-01" in idx
    assert "2024-01-02" not in idx
    assert "garbage" not in idx


def test_alternate_field_names_and_coercion():
    idx = BaselineIndex.from_records([
        {"date": "2024-01-01", "count": "12"},
        {"Date": "2024-01-02", "ADIZ_count": None},
        {"Date": "2024-01-03", "ADIZ_count": "n/a"},
        {"Date": "2024-01-04", "ADIZ_count": -4},
        {"Date": "2024-01-05", "ADIZ_count": 3.6},
    ])
    assert idx.counts([date(2024, 1, d) for d in range(1, 6)]) == [12, 0, 0, 0, 4]


def test_bad_dates_dropped_with_warnings(caplog):
    with caplog.at_level("WARNING"):
        idx = BaselineIndex.from_records([
            {"Date": "2024-01-01", "ADIZ_count": 1},
            {"Date": "yesterday", "ADIZ_count": 2},
            {"ADIZ_count": 3},
            "not a record",
        ])
    assert len(idx) == 1
    assert idx.warnings == [
        "baseline[1]: date unparseable",
        "baseline[2]: date missing",
        "baseline[3]: not an object",
    ]
    assert "dropped 3 record(s)" in caplog.text


def test_duplicate_dates_last_write_wins():
    idx = BaselineIndex.from_records([
        {"Date": "2024-01-01", "ADIZ_count": 1},
        {"Date": "2024/01/01", "ADIZ_count": 9},
    ])
    assert len(idx) == 1
    assert idx.count(date(2024, 1, 1)) == 9


def test_empty_series():
    idx = BaselineIndex.from_records([])
    assert len(idx) == 0
    assert idx.first_date is None and idx.last_date is None
    assert idx.counts([date(2024, 1, 1)]) == [0]
    assert idx.years() == []


def test_span_and_years():
    idx = BaselineIndex.from_records([
        {"Date": "2023-12-31", "ADIZ_count": 4},
        {"Date": "2024-01-02", "ADIZ_count": 6},
    ])
    span = idx.span("2023-12-31", "2024-01-02")
    assert [(p.date.isoformat(), p.count) for p in span] == [
        ("2023-12-31", 4), ("2024-01-01", 0), ("2024-01-02", 6),
    ]
    assert idx.span("2024-01-02", "2024-01-01") == []
    assert idx.years() == ["2023", "2024"]
