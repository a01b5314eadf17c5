"""
Vehicle maintenance date checks.

Each maintenance date on a vehicle is classified relative to today:
"expired" from the day itself onwards, "due_soon" inside the warning
horizon, otherwise "ok". Vehicles without a date get no status.
"""

from analytics import as_date
import config

MAINTENANCE_FIELDS = (
    "last_service_date",
    "next_service_due",
    "oil_change_date",
    "tyre_change_date",
    "brake_service_date",
    "battery_change_date",
    "insurance_expiry",
    "pollution_expiry",
)

EXPIRED = "expired"
DUE_SOON = "due_soon"
OK = "ok"


def maintenance_status(value, today, warning_days=None):
    """
    Classify one maintenance date.

    Args:
        value (str): ISO date from the vehicle record, may be empty
        today (date | datetime | str): Reference day
        warning_days (int, optional): Horizon for "due_soon".
                                      Defaults to config.MAINTENANCE_WARNING_DAYS

    Returns:
        str: "expired", "due_soon", "ok", or None when no usable date is set
    """
    if warning_days is None:
        warning_days = config.MAINTENANCE_WARNING_DAYS
    due = as_date(value)
    reference = as_date(today)
    if due is None or reference is None:
        return None
    days_left = (due - reference).days
    # A date counts as passed once its day has started
    if days_left <= 0:
        return EXPIRED
    if days_left <= warning_days:
        return DUE_SOON
    return OK


def vehicle_maintenance(vehicle, today, warning_days=None):
    """Map every maintenance date set on ``vehicle`` to its status."""
    statuses = {}
    for field in MAINTENANCE_FIELDS:
        status = maintenance_status(vehicle.get(field), today, warning_days)
        if status is not None:
            statuses[field] = status
    return statuses
