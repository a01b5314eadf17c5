import pytest

from settlement import (
    STATUS_PAID,
    STATUS_PENDING,
    settle,
    to_number,
    validate_trip_input,
    validate_vehicle_input,
)


def make_raw(**overrides):
    raw = {
        "date": "2024-05-10",
        "vehicle_id": "v1",
        "customer_name": "John Doe",
        "driver_name": "Ramesh",
        "income": 3500,
        "expenses": {"fuel_cost": 500, "toll": 100, "parking": 50, "other": 0},
        "driver_payment": {"total_amount": 500, "advance": 200, "mode": "Cash"},
        "km": {"start": 10000, "end": 10045},
    }
    raw.update(overrides)
    return raw


def test_settle_demo_trip():
    trip = settle(make_raw())

    assert trip["net_profit"] == 2350
    assert trip["km"]["total"] == 45
    assert trip["driver_payment"]["remaining"] == 300
    assert trip["driver_payment"]["status"] == STATUS_PENDING


def test_settle_does_not_modify_input():
    raw = make_raw()
    settle(raw)
    assert "net_profit" not in raw
    assert "remaining" not in raw["driver_payment"]


def test_net_profit_may_be_negative():
    trip = settle(make_raw(income=100))
    assert trip["net_profit"] == 100 - 1150


@pytest.mark.parametrize("start,end,expected", [
    (100, 150, 50),
    (150, 100, 0),
    (0, 0, 0),
])
def test_km_total_is_clamped_at_zero(start, end, expected):
    trip = settle(make_raw(km={"start": start, "end": end}))
    assert trip["km"]["total"] == expected


@pytest.mark.parametrize("total,advance,status", [
    (500, 200, STATUS_PENDING),
    (500, 500, STATUS_PAID),
    (0, 0, STATUS_PAID),
])
def test_payment_status_follows_remaining(total, advance, status):
    trip = settle(make_raw(driver_payment={"total_amount": total, "advance": advance}))
    assert trip["driver_payment"]["status"] == status


def test_over_advance_is_paid_with_negative_balance():
    trip = settle(make_raw(driver_payment={"total_amount": 300, "advance": 500}))
    assert trip["driver_payment"]["remaining"] == -200
    assert trip["driver_payment"]["status"] == STATUS_PAID


def test_missing_and_non_numeric_values_count_as_zero():
    trip = settle({
        "income": "1200",
        "expenses": {"fuel_cost": "abc", "toll": None},
        "driver_payment": {"total_amount": ""},
        "km": {"end": "40"},
    })

    assert trip["income"] == 1200
    assert trip["expenses"] == {"fuel_cost": 0, "toll": 0, "parking": 0, "other": 0}
    assert trip["net_profit"] == 1200
    assert trip["km"]["total"] == 40
    assert trip["driver_payment"]["status"] == STATUS_PAID


def test_client_supplied_derived_fields_are_recomputed():
    raw = make_raw(net_profit=999999)
    raw["driver_payment"] = {"total_amount": 500, "advance": 200,
                             "remaining": 0, "status": STATUS_PAID}
    raw["km"] = {"start": 10000, "end": 10045, "total": 1}

    trip = settle(raw)

    assert trip["net_profit"] == 2350
    assert trip["driver_payment"]["status"] == STATUS_PENDING
    assert trip["km"]["total"] == 45


def test_unknown_payment_mode_falls_back_to_default():
    trip = settle(make_raw(driver_payment={"total_amount": 1, "mode": "Cheque"}))
    assert trip["driver_payment"]["mode"] == "Cash"


def test_fuel_quantity_is_kept_when_given():
    expenses = {"fuel_cost": 500, "fuel_quantity": "12.5"}
    trip = settle(make_raw(expenses=expenses))
    assert trip["expenses"]["fuel_quantity"] == 12.5
    assert "fuel_quantity" not in settle(make_raw())["expenses"]


def test_to_number():
    assert to_number("3.5") == 3.5
    assert to_number(None) == 0.0
    assert to_number("nan") == 0.0
    assert to_number(True) == 0.0


def test_validate_trip_input():
    assert validate_trip_input(make_raw()) == []
    errors = validate_trip_input({"income": 0})
    assert errors == [
        "Date must be YYYY-MM-DD.",
        "Vehicle is required.",
        "Customer name is required.",
        "Income amount is required.",
    ]


def test_validate_vehicle_input():
    assert validate_vehicle_input({"registration_number": "KA-01", "model": "Dzire"}) == []
    assert len(validate_vehicle_input({"model": "  "})) == 2


@pytest.mark.parametrize("value", ["31/05/2024", "2024-5-31", "2024-02-30", "2024-05-31T10:00", "", None])
def test_validate_trip_input_rejects_non_iso_dates(value):
    assert "Date must be YYYY-MM-DD." in validate_trip_input(make_raw(date=value))
