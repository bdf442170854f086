# tests/test_editor.py
import pytest

from valuegraph.editor import RecordEditor, RecordValidationError
from valuegraph.entities import EntityKind
from valuegraph.utils import format_currency

FLOOR_PLAN = {
    "floor_plan_name": "Aldgate End",
    "division": "GTA",
    "community": "The Nine 3",
    "builder": "Mattamy Homes (Mississauga)",
    "product_type": "3-Storey Back to Back Condo Village Homes",
    "square_feet": "1343",
    "elevation": "TA",
    "price": "771990",
    "bonus": "-17424",
}


def test_add_assigns_id_timestamps_and_defaults(store):
    editor = RecordEditor(store, EntityKind.BUILDERS)
    editor.open_add()
    assert editor.form["division"] == "GTA"
    editor.set("builder_name", "  Centra Homes  ")
    b = editor.save()
    assert b.builder_name == "Centra Homes"
    assert b.division == "GTA"
    assert b.id
    assert b.created_at == b.updated_at
    assert store.records(EntityKind.BUILDERS) == [b]
    assert not editor.is_open


def test_ids_are_unique(store):
    editor = RecordEditor(store, EntityKind.BUILDERS)
    ids = set()
    for name in ("A", "B", "C"):
        editor.open_add()
        editor.set("builder_name", name)
        ids.add(editor.save().id)
    assert len(ids) == 3


def test_missing_required_field_aborts_without_write(store):
    editor = RecordEditor(store, EntityKind.COMMUNITIES)
    editor.open_add()
    editor.update(community_name="Whitehorn Woods", address="")
    with pytest.raises(RecordValidationError) as exc:
        editor.save()
    assert exc.value.field == "address"
    assert str(exc.value) == "Address is required"
    assert editor.is_open
    assert editor.error == "Address is required"
    assert store.records(EntityKind.COMMUNITIES) == []


def test_first_failing_rule_is_reported(store):
    editor = RecordEditor(store, EntityKind.FLOOR_PLANS)
    editor.open_add()
    editor.update(**{**FLOOR_PLAN, "square_feet": "0", "elevation": ""})
    with pytest.raises(RecordValidationError) as exc:
        editor.save()
    assert exc.value.message == "Valid Square Feet is required"


def test_unknown_field_is_rejected(store):
    editor = RecordEditor(store, EntityKind.BUILDERS)
    editor.open_add()
    with pytest.raises(ValueError):
        editor.set("price", 10)
    with pytest.raises(ValueError):
        editor.set("id", "abc")


def test_floor_plan_derived_pricing(store):
    editor = RecordEditor(store, EntityKind.FLOOR_PLANS)
    editor.open_add()
    editor.update(**FLOOR_PLAN)
    preview = editor.preview_pricing()
    assert preview["net_price"] == 754566
    fp = editor.save()
    assert fp.square_feet == 1343
    assert fp.net_price == 754566
    assert fp.price_per_sq_ft == pytest.approx(771990 / 1343)
    assert fp.price_per_sq_ft == pytest.approx(574.83, abs=0.01)
    assert fp.net_price_per_sq_ft == pytest.approx(754566 / 1343)
    # shown in whole dollars on the floor plan table
    assert format_currency(fp.price_per_sq_ft) == "$575"
    assert format_currency(fp.net_price_per_sq_ft) == "$562"


def test_edit_recomputes_derived_pricing(store):
    editor = RecordEditor(store, EntityKind.FLOOR_PLANS)
    editor.open_add()
    editor.update(**FLOOR_PLAN)
    fp = editor.save()

    editor.open_edit(fp.id)
    editor.update(price="800000", bonus="0")
    updated = editor.save()
    assert updated.net_price == 800000
    assert updated.price_per_sq_ft == pytest.approx(800000 / 1343)
    assert updated.net_price == updated.price + updated.bonus


def test_zero_square_feet_gives_zero_per_foot_prices(store):
    editor = RecordEditor(store, EntityKind.FLOOR_PLANS)
    editor.open_add()
    editor.update(**FLOOR_PLAN)
    fp = editor.save()
    # the store path does not enforce positive square feet
    updated = store.update(EntityKind.FLOOR_PLANS, fp.id, {"square_feet": 0})
    assert updated.price_per_sq_ft == 0
    assert updated.net_price_per_sq_ft == 0
    assert updated.net_price == 754566


def test_edit_with_no_changes_only_touches_updated_at(store):
    editor = RecordEditor(store, EntityKind.COMMUNITIES)
    editor.open_add()
    editor.update(community_name="Whitehorn Woods", address="Britannia Rd W", city="Mississauga",
                  total_lots="80", total_sold="80")
    before = editor.save()

    editor.open_edit(before)
    after = editor.save()
    assert after.updated_at > before.updated_at
    assert after.model_dump(exclude={"updated_at"}) == before.model_dump(exclude={"updated_at"})


def test_empty_patch_round_trip(store):
    editor = RecordEditor(store, EntityKind.FEATURES)
    editor.open_add()
    editor.update(feature_name="Granite Countertop Upgrade", feature_category="Kitchen", retail_price="2500")
    before = editor.save()
    after = store.update(EntityKind.FEATURES, before.id, {})
    assert after.model_dump(exclude={"updated_at"}) == before.model_dump(exclude={"updated_at"})
    assert after.updated_at != before.updated_at


def test_edit_merges_only_changed_fields(store):
    editor = RecordEditor(store, EntityKind.PRODUCTS)
    editor.open_add()
    editor.update(product_name="Stacked Townhomes", condo_type="Stacked")
    p = editor.save()
    editor.open_edit(p)
    editor.set("product_type", "Detached")
    updated = editor.save()
    assert updated.product_type == "Detached"
    assert updated.condo_type == "Stacked"
    assert updated.created_at == p.created_at
    assert updated.id == p.id


def test_duplicate_copies_fields_with_new_identity(store):
    editor = RecordEditor(store, EntityKind.BUILDERS)
    editor.open_add()
    editor.update(builder_name="Mattamy Homes", division="Ottawa")
    source = editor.save()

    editor.open_duplicate(source)
    assert editor.editing_id is None
    assert editor.form["builder_name"] == "Mattamy Homes (Copy)"
    copy = editor.save()
    assert copy.id != source.id
    assert copy.division == "Ottawa"
    assert len(store.records(EntityKind.BUILDERS)) == 2


def test_cancel_discards_pending_input(store):
    editor = RecordEditor(store, EntityKind.BUILDERS)
    editor.open_add()
    editor.set("builder_name", "Never saved")
    editor.cancel()
    assert not editor.is_open
    assert store.records(EntityKind.BUILDERS) == []
    with pytest.raises(RuntimeError):
        editor.save()


def test_historical_pricing_rows(store):
    editor = RecordEditor(store, EntityKind.FLOOR_PLANS)
    editor.open_add()
    editor.update(**FLOOR_PLAN)
    editor.add_price_row()
    editor.add_price_row()
    editor.update_price_row(0, month="January", year="2026", base_price=759990)
    editor.update_price_row(1, month="February", year="2026", base_price=771990)
    editor.remove_price_row(0)
    fp = editor.save()
    assert [(h.month, h.base_price) for h in fp.historical_pricing] == [("February", 771990)]


def test_unparseable_numbers_become_zero(store):
    editor = RecordEditor(store, EntityKind.FEATURES)
    editor.open_add()
    editor.update(feature_name="Pot Lights", feature_category="Lighting", retail_price="n/a")
    assert editor.save().retail_price == 0


def test_feature_type_override_on_add(store):
    editor = RecordEditor(store, EntityKind.FEATURES)
    editor.open_add(feature_type="plan-specific")
    editor.update(feature_name="Pot Lights", feature_category="Lighting")
    assert editor.save().feature_type == "plan-specific"
