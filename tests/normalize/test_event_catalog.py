from datetime import date

from common.schemas import EventFilter
from normalize_enrich.event_catalog import EventCatalog


def _raw():
    return {
        "adiz_baseline": [],
        "diplomatic": [
            {"Date": "2023-04-05", "Descriptor": "Tsai meets McCarthy"},
            {"Date": "not-a-date", "Descriptor": "broken"},
        ],
        "arms_sales": [
            {"date": "2022-09-02", "weapon_sale": "Harpoon missiles"},
            {"date": "2023-04-05", "weapon_sale": "Stinger missiles"},
        ],
        "political_symbolic": [
            {"date": "2024-01-13", "event_name": "Taiwan presidential election"},
            {"date": "2024-05-20"},
        ],
        "unrelated": [{"date": "2024-01-01"}],
    }


def test_build_sorts_and_collects_warnings():
    cat = EventCatalog.build(_raw())
    assert len(cat) == 5
    assert [e.date for e in cat] == sorted(e.date for e in cat)
    # same-date events keep read order; arms_sales is read before diplomatic
    same_day = [e.label for e in cat if e.date == date(2023, 4, 5)]
    assert same_day == ["Stinger missiles", "Tsai meets McCarthy"]
    assert "diplomatic[1]: date unparseable" in cat.warnings
    assert "political_symbolic[1]: missing event_name" in cat.warnings


def test_query_filters_are_conjunctive():
    cat = EventCatalog.build(_raw())
    assert [e.label for e in cat.query(EventFilter(category="arms"))] == ["Harpoon missiles", "Stinger missiles"]
    assert len(cat.query(EventFilter(category="all"))) == 5
    assert len(cat.query(EventFilter(year="2024"))) == 2
    assert len(cat.query(EventFilter(year="ALL"))) == 5
    assert len(cat.query(EventFilter(year=2024))) == 2
    assert [e.label for e in cat.query(EventFilter(category="arms", year="2023"))] == ["Stinger missiles"]
    assert len(cat.query(EventFilter(start_date=date(2023, 4, 5), end_date=date(2023, 4, 5)))) == 2
    assert [e.category for e in cat.query(EventFilter(dataset="political_symbolic"))] == ["political", "political"]
    assert cat.query(EventFilter(category="ships")) == []


def test_query_predicate_and_snapshot():
    cat = EventCatalog.build(_raw())
    hits = cat.query(predicate=lambda e: "missiles" in e.label)
    assert len(hits) == 2
    hits.clear()
    assert len(cat.query()) == 5


def test_events_in_window_and_categories():
    cat = EventCatalog.build(_raw())
    near = cat.events_in_window("2023-04-01", 4)
    assert {e.label for e in near} == {"Tsai meets McCarthy", "Stinger missiles"}
    assert cat.events_in_window("2023-04-01", 3) == []
    assert cat.categories() == ["arms", "diplomatic", "political"]
