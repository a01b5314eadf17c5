"""
Analytics Module for Fleet Ledger

Rolls settled trip records up into the figures shown on the dashboard.

Aggregates:
├── today_trips        trips dated today (exact ISO date match)
├── monthly_*          income / expenses / profit for the calendar month of "now"
├── pending_payments   outstanding driver balances across ALL trips
├── best_vehicle       vehicle with the largest summed net profit
└── trailing series    per-day income and profit for the last N days

All functions are pure over the trip and vehicle lists they receive and
never touch the database.

Usage:
    from analytics import compute_stats, compute_trailing_series
    stats = compute_stats(db.list_trips(), db.list_vehicles(), datetime.now())
"""

# ============================================================================
# IMPORTS
# ============================================================================
from datetime import date, datetime, timedelta
import logging

from settlement import STATUS_PENDING, to_number, total_expenses

logger = logging.getLogger(__name__)

NOT_AVAILABLE = "N/A"
UNKNOWN_VEHICLE = "Unknown"

# Weekday short names, independent of the process locale
WEEKDAY_LABELS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")


# ============================================================================
# DATE HELPERS
# ============================================================================

def as_date(value):
    """
    Normalize a datetime, date or ISO string to a calendar date.

    Returns:
        date: The calendar date, or None when the value cannot be read
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value.strip():
        try:
            return datetime.strptime(value.strip()[:10], "%Y-%m-%d").date()
        except ValueError:
            return None
    return None


def _record_id(record):
    return record.get("_id", record.get("id"))


# ============================================================================
# VEHICLE LABELS
# ============================================================================

def vehicle_label(vehicle):
    return f"{vehicle.get('model', '')} ({vehicle.get('registration_number', '')})"


def resolve_vehicle_label(vehicles, vehicle_id, fallback=UNKNOWN_VEHICLE):
    """
    Look up the display label for a vehicle id.

    Args:
        vehicles (list): Vehicle records
        vehicle_id (str): Id referenced by a trip
        fallback (str): Returned when no vehicle carries that id

    Returns:
        str: "<model> (<registration_number>)" or the fallback
    """
    for vehicle in vehicles:
        if _record_id(vehicle) == vehicle_id:
            return vehicle_label(vehicle)
    return fallback


# ============================================================================
# DASHBOARD STATISTICS
# ============================================================================

def vehicle_performance(trips):
    """
    Sum net profit per vehicle id.

    Returns:
        dict: vehicle_id -> summed net profit, in first-seen order
    """
    performance = {}
    for trip in trips:
        vehicle_id = trip.get("vehicle_id")
        performance[vehicle_id] = performance.get(vehicle_id, 0.0) + to_number(trip.get("net_profit"))
    return performance


def best_vehicle_id(performance):
    # Strict comparison keeps the first vehicle seen on ties
    best_id = None
    max_profit = float("-inf")
    for vehicle_id, profit in performance.items():
        if profit > max_profit:
            max_profit = profit
            best_id = vehicle_id
    return best_id


def compute_stats(trips, vehicles, now):
    """
    Compute the dashboard statistics.

    Monthly figures use the calendar month of ``now``, not a rolling
    window. Pending payments and vehicle performance cover every trip
    regardless of date. Stored ``net_profit`` values are summed as-is.

    Args:
        trips (list): Settled trip records
        vehicles (list): Vehicle records
        now (datetime | date | str): Reference instant

    Returns:
        dict: today_trips, monthly_income, monthly_expenses,
              monthly_profit, pending_payments, best_vehicle
    """
    today = as_date(now)
    today_iso = today.isoformat() if today else None

    today_trips = 0
    monthly_income = 0.0
    monthly_expenses = 0.0
    monthly_profit = 0.0
    pending_payments = 0.0

    for trip in trips:
        if today_iso is not None and trip.get("date") == today_iso:
            today_trips += 1

        trip_date = as_date(trip.get("date"))
        if today and trip_date and (trip_date.year, trip_date.month) == (today.year, today.month):
            monthly_income += to_number(trip.get("income"))
            monthly_expenses += total_expenses(trip)
            monthly_profit += to_number(trip.get("net_profit"))

        payment = trip.get("driver_payment") or {}
        if payment.get("status") == STATUS_PENDING:
            pending_payments += to_number(payment.get("remaining"))

    best_id = best_vehicle_id(vehicle_performance(trips))
    best_vehicle = NOT_AVAILABLE
    if best_id is not None:
        best_vehicle = resolve_vehicle_label(vehicles, best_id, fallback=NOT_AVAILABLE)

    logger.debug(f"Computed stats for {today_iso} over {len(trips)} trips")

    return {
        "today_trips": today_trips,
        "monthly_income": monthly_income,
        "monthly_expenses": monthly_expenses,
        "monthly_profit": monthly_profit,
        "pending_payments": pending_payments,
        "best_vehicle": best_vehicle,
    }


# ============================================================================
# TRAILING SERIES
# ============================================================================

def compute_trailing_series(trips, now, window_days=7):
    """
    Per-day income and profit for the ``window_days`` dates ending at ``now``.

    Days without trips are reported with zero sums, so the result always
    holds exactly ``window_days`` points, oldest first. An unreadable
    ``now`` yields an empty list, just as compute_stats yields zeros.

    Returns:
        list: dicts of ``date`` (ISO), ``label`` (weekday), ``income``, ``profit``
    """
    end = as_date(now)
    if end is None:
        logger.warning(f"Unreadable reference date {now!r}, returning empty series")
        return []

    totals = {}
    for trip in trips:
        day = totals.setdefault(trip.get("date"), [0.0, 0.0])
        day[0] += to_number(trip.get("income"))
        day[1] += to_number(trip.get("net_profit"))

    series = []
    for offset in range(window_days - 1, -1, -1):
        day = end - timedelta(days=offset)
        income, profit = totals.get(day.isoformat(), (0.0, 0.0))
        series.append({
            "date": day.isoformat(),
            "label": WEEKDAY_LABELS[day.weekday()],
            "income": income,
            "profit": profit,
        })
    return series
