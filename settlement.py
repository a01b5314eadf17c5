"""
Trip Settlement Module for Fleet Ledger

This module turns the raw inputs of a trip (income, itemized expenses,
driver payment terms and odometer readings) into a settled trip record.

Derived Fields:
├── net_profit
│   └── income minus all expenses, driver payment included (not clamped)
├── km.total
│   └── odometer end minus start, clamped at zero
└── driver_payment.remaining / driver_payment.status
    └── total minus advance; Paid once nothing remains (not clamped)

Every derived field is computed straight from raw inputs, so any derived
values supplied by the caller are ignored and recomputed.

Usage:
    from settlement import settle
    trip = settle(request_json)
"""

# ============================================================================
# IMPORTS
# ============================================================================
from datetime import datetime
import math

import config

# ============================================================================
# CONSTANTS
# ============================================================================
STATUS_PAID = "Paid"
STATUS_PENDING = "Pending"

EXPENSE_FIELDS = ("fuel_cost", "toll", "parking", "other")

TRIP_TEXT_FIELDS = (
    "driver_name", "driver_phone",
    "customer_name", "customer_phone",
    "pickup_location", "drop_location",
    "start_time", "end_time",
    "notes",
)


# ============================================================================
# HELPERS
# ============================================================================

def to_number(value):
    """
    Coerce a user-entered value to a float.

    Missing, blank, non-numeric and non-finite values all count as zero.

    Args:
        value: Anything a form or JSON body may carry

    Returns:
        float: The numeric value or 0.0
    """
    if isinstance(value, bool):
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(number) or math.isinf(number):
        return 0.0
    return number


def _section(raw, key):
    section = raw.get(key)
    return section if isinstance(section, dict) else {}


def total_expenses(trip):
    """Sum of itemized expenses plus the agreed driver payment."""
    expenses = _section(trip, "expenses")
    payment = _section(trip, "driver_payment")
    return (
        sum(to_number(expenses.get(field)) for field in EXPENSE_FIELDS)
        + to_number(payment.get("total_amount"))
    )


def payment_status(remaining):
    return STATUS_PAID if remaining <= 0 else STATUS_PENDING


# ============================================================================
# SETTLEMENT
# ============================================================================

def settle(raw):
    """
    Build a settled trip record from raw trip inputs.

    The raw dict is not modified. Only known trip fields are kept; an
    ``_id`` passes through untouched so an edited trip can be re-settled
    and saved over its previous version.

    Args:
        raw (dict): Trip inputs with nested ``expenses``, ``driver_payment``
                    and ``km`` sections

    Returns:
        dict: Trip record with ``net_profit``, ``km.total``,
              ``driver_payment.remaining`` and ``driver_payment.status`` set
    """
    expenses = _section(raw, "expenses")
    payment = _section(raw, "driver_payment")
    km = _section(raw, "km")

    income = to_number(raw.get("income"))

    settled_expenses = {field: to_number(expenses.get(field)) for field in EXPENSE_FIELDS}
    if expenses.get("fuel_quantity") not in (None, ""):
        settled_expenses["fuel_quantity"] = to_number(expenses.get("fuel_quantity"))

    total_amount = to_number(payment.get("total_amount"))
    advance = to_number(payment.get("advance"))
    remaining = total_amount - advance

    km_start = to_number(km.get("start"))
    km_end = to_number(km.get("end"))

    mode = payment.get("mode") or config.DEFAULT_PAYMENT_MODE
    if mode not in config.PAYMENT_MODES:
        mode = config.DEFAULT_PAYMENT_MODE

    trip = {"_id": raw["_id"]} if raw.get("_id") else {}
    trip.update({
        "date": str(raw.get("date") or "").strip(),
        "vehicle_id": str(raw.get("vehicle_id") or "").strip(),
        "income": income,
        "expenses": settled_expenses,
        "driver_payment": {
            "total_amount": total_amount,
            "advance": advance,
            "remaining": remaining,
            "status": payment_status(remaining),
            "mode": mode,
        },
        "km": {
            "start": km_start,
            "end": km_end,
            "total": max(0.0, km_end - km_start),
        },
        "net_profit": income - (
            sum(settled_expenses[field] for field in EXPENSE_FIELDS) + total_amount
        ),
    })
    for field in TRIP_TEXT_FIELDS:
        trip[field] = str(raw.get(field) or "").strip()
    return trip


# ============================================================================
# CALLER-SIDE VALIDATION
# ============================================================================

def is_iso_date(value):
    """True for a calendar date written exactly as YYYY-MM-DD."""
    if not isinstance(value, str):
        return False
    try:
        return datetime.strptime(value, "%Y-%m-%d").date().isoformat() == value
    except ValueError:
        return False


def validate_trip_input(raw):
    """
    Check the fields a trip needs before it may be settled and saved.

    Returns:
        list: Human readable problems, empty when the input is acceptable
    """
    errors = []
    if not is_iso_date(raw.get("date")):
        errors.append("Date must be YYYY-MM-DD.")
    if not str(raw.get("vehicle_id") or "").strip():
        errors.append("Vehicle is required.")
    if not str(raw.get("customer_name") or "").strip():
        errors.append("Customer name is required.")
    if not to_number(raw.get("income")):
        errors.append("Income amount is required.")
    return errors


def validate_vehicle_input(raw):
    errors = []
    if not str(raw.get("registration_number") or "").strip():
        errors.append("Registration number is required.")
    if not str(raw.get("model") or "").strip():
        errors.append("Model is required.")
    return errors
