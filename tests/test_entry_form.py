from __future__ import annotations

from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from salesdesk.catalog import MAX_QUANTITY
from salesdesk.entry_form import (
    BLANK_ITEM,
    FormState,
    assemble_record,
    clamp_quantity,
    derive_branch,
    derive_month,
    derive_product_fields,
    field_errors,
    representatives_for,
    resize_dynamic_fields,
    validate,
)
from salesdesk.exceptions import ValidationError
from salesdesk.models import ItemDetail, format_plain_decimal


@pytest.mark.parametrize(
    "no_pjb, expected",
    [
        ("jktb001234", "JKTB"),
        ("BDGB", "BDGB"),
        ("sbYb9", "SBYB"),
        ("abc", ""),
        ("", ""),
        (None, ""),
    ],
)
def test_derive_branch_uses_first_four_characters(no_pjb, expected):
    assert derive_branch(no_pjb) == expected


def test_derive_month_renders_month_and_year():
    assert derive_month(date(2024, 1, 15)) == "January 2024"
    assert derive_month(None) == ""


def test_derive_product_fields_from_catalog():
    assert derive_product_fields("Generator Type B") == ("Generator Model G2", "Mark-G2")
    assert derive_product_fields("Unknown Type") == ("", "")
    assert derive_product_fields("") == ("", "")
    assert derive_product_fields(None) == ("", "")


def test_representatives_follow_branch():
    assert representatives_for("BDGB") == ("Sarah Wilson", "David Brown", "Lisa Davis")
    assert representatives_for("ZZZZ") == ()
    assert representatives_for("") == ()


@pytest.mark.parametrize(
    "raw, expected",
    [(3, 3), (0, 1), (-4, 1), ("5", 5), ("7abc", 7), ("abc", 1), ("", 1), (None, 1)],
)
def test_clamp_quantity_never_below_one(raw, expected):
    assert clamp_quantity(raw) == expected


def test_resize_preserves_existing_items_and_pads_with_blanks():
    first = ItemDetail("M1", "S1", "E1")
    resized = resize_dynamic_fields((first,), 3)
    assert resized == (first, BLANK_ITEM, BLANK_ITEM)


def test_resize_is_idempotent_and_restores_after_shrink():
    first = ItemDetail("M1", "S1", "E1")
    second = ItemDetail("M2", "S2", "E2")
    items = (first, second)

    assert resize_dynamic_fields(resize_dynamic_fields(items, 2), 2) == items

    grown = resize_dynamic_fields(items, 4)
    shrunk = resize_dynamic_fields(grown, 2)
    assert shrunk == items
    assert resize_dynamic_fields(items, 1) == (first,)


def test_increment_twice_from_default_state():
    state = FormState().with_item(0, marking="MRK", serial_number="SN", sn_engine="ENG")

    state = state.increment_quantity().increment_quantity()

    assert state.quantity == 3
    assert len(state.dynamic_fields) == 3
    assert state.dynamic_fields[0] == ItemDetail("MRK", "SN", "ENG")
    assert state.dynamic_fields[1] == BLANK_ITEM
    assert state.dynamic_fields[2] == BLANK_ITEM


def test_decrement_is_noop_at_one():
    state = FormState()
    assert state.decrement_quantity() is state
    assert state.with_quantity(2).decrement_quantity().quantity == 1


def test_typed_quantity_is_clamped():
    state = FormState().with_quantity("0")
    assert state.quantity == 1
    assert len(state.dynamic_fields) == 1


def test_with_item_rejects_out_of_range_index():
    with pytest.raises(IndexError):
        FormState().with_item(1, marking="X")


def test_form_state_derives_fields_on_read():
    state = (
        FormState()
        .with_no_pjb("dpsb77")
        .with_product_type("Engine Type B")
        .with_date("2024-03-09")
    )
    assert state.branch == "DPSB"
    assert state.product == "Engine Model X2"
    assert state.mark == "Mark-B1"
    assert state.month == "March 2024"
    assert state.representative_enabled
    assert "Maria Garcia" in state.representative_choices


def test_representative_disabled_until_branch_known():
    state = FormState().with_no_pjb("JK")
    assert not state.representative_enabled
    with pytest.raises(ValidationError) as excinfo:
        state.with_sales_representative("John Doe")
    assert "salesRepresentative" in excinfo.value.errors


def test_stale_representative_is_cleared_when_branch_changes():
    state = FormState().with_no_pjb("JKTB0001").with_sales_representative("John Doe")
    assert state.sales_representative == "John Doe"

    moved = state.with_no_pjb("BDGB0001")

    assert moved.branch == "BDGB"
    assert moved.sales_representative == ""


def test_representative_kept_when_branch_unchanged():
    state = FormState().with_no_pjb("JKTB").with_sales_representative("Mike Johnson")
    assert state.with_no_pjb("JKTB0099").sales_representative == "Mike Johnson"


def test_with_field_routes_by_wire_name():
    state = FormState().with_field("customerName", "CV. Abadi").with_field("quantity", "2")
    assert state.customer_name == "CV. Abadi"
    assert state.quantity == 2
    with pytest.raises(KeyError):
        state.with_field("branch", "JKTB")


def test_form_state_round_trips_through_dict():
    state = (
        FormState()
        .with_date("2024-01-15")
        .with_no_pjb("SBYB0001")
        .with_sales_representative("Emma Taylor")
        .with_quantity(2)
        .with_item(1, serial_number="SN-2")
    )
    restored = FormState.from_dict(state.to_dict())
    assert restored == state


def test_from_dict_drops_representative_outside_branch():
    restored = FormState.from_dict({"noPJB": "SBYB0001", "salesRepresentative": "John Doe"})
    assert restored.sales_representative == ""


def test_validate_accepts_complete_payload(valid_payload):
    entry = validate(valid_payload)

    assert entry.date == date(2024, 2, 5)
    assert entry.no_pjb == "jktb000111"
    assert entry.hpp == Decimal("12500000")
    assert entry.quantity == 2
    assert entry.dynamic_fields == (ItemDetail("M-1", "SN-1", "EN-1"), BLANK_ITEM)


def test_validate_reports_every_failing_field():
    with pytest.raises(ValidationError) as excinfo:
        validate({"quantity": 0, "hpp": -1, "noPJB": "ab", "customerClassification": "vip"})

    errors = excinfo.value.errors
    assert set(errors) == {
        "date",
        "noPJB",
        "customerClassification",
        "customerName",
        "quantity",
        "productType",
        "hpp",
        "paymentScheme",
        "salesRepresentative",
    }
    assert errors["date"] == "Date is required"
    assert errors["noPJB"] == "No. PJB must be at least 4 characters"
    assert errors["quantity"] == "Quantity must be at least 1"
    assert errors["hpp"] == "HPP must be a positive number"
    assert errors["customerName"] == "Customer name is required"


def test_validate_allows_zero_hpp(valid_payload):
    valid_payload["hpp"] = "0"
    assert validate(valid_payload).hpp == Decimal("0")


def test_validate_rejects_representative_from_other_branch(valid_payload):
    valid_payload["salesRepresentative"] = "Sarah Wilson"
    errors = field_errors(valid_payload)
    assert list(errors) == ["salesRepresentative"]
    assert "JKTB" in errors["salesRepresentative"]


def test_validate_flags_non_string_item_fields(valid_payload):
    valid_payload["dynamicFields"] = [{"marking": 12}]
    errors = field_errors(valid_payload)
    assert "dynamicFields[0].marking" in errors


def test_validate_accepts_browser_timestamp_for_date(valid_payload):
    valid_payload["date"] = "2024-02-05T00:00:00.000Z"
    assert validate(valid_payload).date == date(2024, 2, 5)


def test_assemble_record_merges_derived_fields(valid_payload):
    stamp = datetime(2024, 2, 5, 8, 0, tzinfo=timezone.utc)
    record = assemble_record(validate(valid_payload), timestamp=stamp, record_id="abc")

    assert record.id == "abc"
    assert record.time_stamp == stamp
    assert record.branch == "JKTB"
    assert record.month == "February 2024"
    assert record.product == "Engine Model X1"
    assert record.mark == "Mark-A1"
    assert len(record.dynamic_fields) == record.quantity


def test_assemble_record_generates_id_and_timestamp(valid_payload):
    first = assemble_record(validate(valid_payload))
    second = assemble_record(validate(valid_payload))
    assert first.id != second.id
    assert first.time_stamp.tzinfo is not None


@pytest.mark.parametrize(
    "raw, expected",
    [
        (MAX_QUANTITY + 1, MAX_QUANTITY),
        (10**9, MAX_QUANTITY),
        ("2000000", MAX_QUANTITY),
        ("9" * 5000, MAX_QUANTITY),
        ("-" + "9" * 5000, 1),
    ],
)
def test_clamp_quantity_never_above_maximum(raw, expected):
    assert clamp_quantity(raw) == expected


def test_form_state_caps_item_rows():
    state = FormState.from_dict({"quantity": 2000000})
    assert state.quantity == MAX_QUANTITY
    assert len(state.dynamic_fields) == MAX_QUANTITY
    assert state.with_quantity(MAX_QUANTITY).increment_quantity().quantity == MAX_QUANTITY


def test_validate_rejects_quantity_above_maximum(valid_payload):
    valid_payload["quantity"] = MAX_QUANTITY + 1
    errors = field_errors(valid_payload)
    assert errors == {"quantity": f"Quantity must be at most {MAX_QUANTITY}"}


@pytest.mark.parametrize("hpp", ["1e5000", "1e16", 10**20])
def test_validate_rejects_oversized_hpp(valid_payload, hpp):
    valid_payload["hpp"] = hpp
    assert field_errors(valid_payload) == {"hpp": "HPP is too large"}


def test_largest_accepted_hpp_renders_plainly(valid_payload):
    valid_payload["hpp"] = "9e15"
    record = assemble_record(validate(valid_payload))
    assert record.to_dict()["hpp"] == "9000000000000000"


@pytest.mark.parametrize(
    "value, expected",
    [
        (Decimal("1E+5000"), "1" + "0" * 5000),
        (Decimal("50000000.00"), "50000000"),
        (Decimal("12.50"), "12.5"),
    ],
)
def test_format_plain_decimal_handles_large_exponents(value, expected):
    assert format_plain_decimal(value) == expected


def test_with_date_tags_error_with_field_key():
    with pytest.raises(ValidationError) as excinfo:
        FormState().with_date("15/01/2024")
    assert list(excinfo.value.errors) == ["date"]
