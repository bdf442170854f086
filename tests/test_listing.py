# tests/test_listing.py
from datetime import datetime, timezone

import pytest

from valuegraph.entities import BUILDERS, COMMUNITIES, EntityKind
from valuegraph.listing import (
    PAGE_SIZE, ListQuery, ListView, Selection, distinct_values, filter_records,
    list_page, page_count, sort_records,
)
from valuegraph.schemas import Builder, Community, Feature

NOW = datetime(2026, 1, 5, tzinfo=timezone.utc)


def builders(*names, division="GTA"):
    return [Builder(builder_name=n, division=division, created_at=NOW, updated_at=NOW) for n in names]


def test_search_is_case_insensitive_and_sorted_by_name():
    records = builders("Gamma", "Alpha", "Beta")
    res = list_page(EntityKind.BUILDERS, records, ListQuery(query="a"))
    assert [b.builder_name for b in res.items] == ["Alpha", "Beta", "Gamma"]
    assert res.total == 3
    assert res.pages == 1
    assert res.sort == "builder_name"


def test_search_narrows_results():
    records = builders("Mattamy Homes", "Centra Homes", "Dunpar")
    res = list_page(EntityKind.BUILDERS, records, ListQuery(query="HOMES"))
    assert [b.builder_name for b in res.items] == ["Centra Homes", "Mattamy Homes"]


def test_community_search_covers_address():
    c = Community(community_name="Whitehorn Woods", address="Britannia Rd W", city="Mississauga",
                  created_at=NOW, updated_at=NOW)
    other = Community(community_name="Clockwork 3", address="Trafalgar Rd", city="Oakville",
                      created_at=NOW, updated_at=NOW)
    res = list_page(EntityKind.COMMUNITIES, [c, other], ListQuery(query="britannia"))
    assert res.items == (c,)


def test_pages_reconstruct_filtered_and_sorted_set():
    records = builders(*[f"Builder {i:03d}" for i in range(130)], division="GTA")
    records += builders(*[f"Other {i:03d}" for i in range(20)], division="Ottawa")
    view = ListQuery(filters={"division": "GTA"}, sort="builder_name", direction="desc")
    first = list_page(EntityKind.BUILDERS, records, view)
    assert first.total == 130
    assert first.pages == 3

    collected = []
    for page in range(1, first.pages + 1):
        res = list_page(EntityKind.BUILDERS, records,
                        ListQuery(filters={"division": "GTA"}, sort="builder_name", direction="desc", page=page))
        collected.extend(res.items)
    expected = sort_records(BUILDERS, filter_records(BUILDERS, records, filters={"division": "GTA"}),
                            "builder_name", "desc")
    assert collected == expected
    assert len({b.id for b in collected}) == 130


def test_same_inputs_give_same_page():
    records = builders("Gamma", "Alpha", "Beta")
    view = ListQuery(query="a", sort="builder_name", direction="desc")
    first = list_page(EntityKind.BUILDERS, records, view)
    second = list_page(EntityKind.BUILDERS, records, view)
    assert first == second
    assert all(a is b for a, b in zip(first.items, second.items))


@pytest.mark.parametrize("direction", ["asc", "desc"])
def test_ties_keep_collection_order(direction):
    records = builders("Charlie", "Alpha", "Bravo")
    res = list_page(EntityKind.BUILDERS, records, ListQuery(sort="division", direction=direction))
    assert [b.builder_name for b in res.items] == ["Charlie", "Alpha", "Bravo"]


def test_text_sort_ignores_case_and_accents():
    records = builders("beta", "Alpha", "Gamma", "alpha", "Élan")
    res = list_page(EntityKind.BUILDERS, records)
    assert [b.builder_name for b in res.items] == ["alpha", "Alpha", "beta", "Élan", "Gamma"]


def test_numeric_sort_uses_values_not_text():
    features = [
        Feature(feature_name=n, retail_price=p, created_at=NOW, updated_at=NOW)
        for n, p in [("Granite", 2500), ("Smart Home", -1500), ("Pot Lights", 900), ("Hardwood", 10000)]
    ]
    res = list_page(EntityKind.FEATURES, features, ListQuery(sort="retail_price"))
    assert [f.retail_price for f in res.items] == [-1500, 900, 2500, 10000]


def test_community_total_sold_sorts_by_sell_through():
    def community(name, lots, sold):
        return Community(community_name=name, total_lots=lots, total_sold=sold,
                         created_at=NOW, updated_at=NOW)

    records = [community("Half", 100, 10), community("Full", 50, 50), community("Empty", 0, 0)]
    res = list_page(EntityKind.COMMUNITIES, records, ListQuery(sort="total_sold"))
    assert [c.community_name for c in res.items] == ["Empty", "Half", "Full"]


def test_all_means_no_constraint():
    records = builders("Alpha", "Beta") + builders("Gamma", division="Ottawa")
    assert list_page(EntityKind.BUILDERS, records, ListQuery(filters={"division": "all"})).total == 3
    assert list_page(EntityKind.BUILDERS, records, ListQuery(filters={"division": "Ottawa"})).total == 1


def test_unknown_sort_and_filter_are_rejected():
    records = builders("Alpha")
    with pytest.raises(ValueError):
        list_page(EntityKind.BUILDERS, records, ListQuery(sort="price"))
    with pytest.raises(ValueError):
        list_page(EntityKind.BUILDERS, records, ListQuery(filters={"city": "Milton"}))
    with pytest.raises(ValueError):
        list_page(EntityKind.BUILDERS, records, ListQuery(direction="sideways"))


def test_empty_result_and_out_of_range_page():
    records = builders("Alpha", "Beta", "Gamma")
    empty = list_page(EntityKind.BUILDERS, records, ListQuery(query="zzz"))
    assert empty.empty
    assert empty.items == ()
    assert empty.pages == 1
    assert (empty.start, empty.end) == (0, 0)

    far = list_page(EntityKind.BUILDERS, records, ListQuery(page=5))
    assert far.items == ()
    assert far.total == 3
    assert far.page == 5


def test_page_bounds():
    assert page_count(0) == 1
    assert page_count(PAGE_SIZE) == 1
    assert page_count(PAGE_SIZE + 1) == 2
    records = builders(*[f"B{i:03d}" for i in range(120)])
    res = list_page(EntityKind.BUILDERS, records, ListQuery(page=3))
    assert len(res.items) == 20
    assert (res.start, res.end) == (101, 120)


def test_distinct_values_for_filter_dropdown():
    def community(city):
        return Community(community_name=city, city=city, created_at=NOW, updated_at=NOW)

    records = [community("Oakville"), community("Milton"), community(""), community("Oakville")]
    assert distinct_values(COMMUNITIES.kind, records, "city") == ["Milton", "Oakville"]


def test_view_resets_page_when_query_or_filter_changes():
    view = ListView(EntityKind.BUILDERS)
    view.go_to(3)
    view.set_query("homes")
    assert view.page == 1
    view.go_to(2)
    view.set_filter("division", "GTA")
    assert view.page == 1
    with pytest.raises(ValueError):
        view.set_filter("status", "Active")


def test_view_toggle_sort():
    view = ListView(EntityKind.BUILDERS)
    assert (view.sort, view.direction) == ("builder_name", "asc")
    view.toggle_sort("builder_name")
    assert view.direction == "desc"
    view.toggle_sort("division")
    assert (view.sort, view.direction) == ("division", "asc")


def test_select_all_is_page_local_and_hidden_ids_stay_selected():
    records = builders(*[f"B{i:03d}" for i in range(60)])
    view = ListView(EntityKind.BUILDERS)
    view.select_all(records)
    first_page = {b.id for b in view.render(records).items}
    assert view.selection.ids == first_page
    assert len(view.selection) == PAGE_SIZE

    view.go_to(2)
    visible = {b.id for b in view.render(records).items}
    assert not (visible & view.selection.ids)
    assert len(view.selection) == PAGE_SIZE

    view.go_to(1)
    view.select_all(records)
    assert len(view.selection) == 0


def test_select_all_filtered_scope():
    records = builders(*[f"B{i:03d}" for i in range(60)]) + builders("Ottawa One", division="Ottawa")
    view = ListView(EntityKind.BUILDERS)
    view.set_filter("division", "GTA")
    view.select_all(records, scope="filtered")
    assert len(view.selection) == 60


def test_selection_toggle():
    sel = Selection()
    sel.toggle("a")
    sel.toggle("b")
    sel.toggle("a")
    assert "b" in sel
    assert "a" not in sel
    sel.clear()
    assert len(sel) == 0
