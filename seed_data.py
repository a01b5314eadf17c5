"""
Demo fleet used to seed an empty store on first start.

Usage:
    from seed_data import build_demo_seed
    db.seed_initial_data(build_demo_seed(date.today()))
"""

from analytics import as_date
from settlement import settle


def build_demo_seed(today):
    """
    Build the demo vehicles and trips.

    Vehicles carry fixed ids so the demo trip can reference one. The trip
    is dated ``today`` and already settled.

    Args:
        today (date | datetime | str): Date given to the demo trip

    Returns:
        dict: ``vehicles`` and ``trips`` lists ready for DBHandler.seed_initial_data
    """
    vehicles = [
        {
            "_id": "v1",
            "registration_number": "KA-01-AB-1234",
            "model": "Toyota Innova Crysta",
            "nickname": "White Beast",
            "insurance_expiry": "2024-12-31",
            "next_service_due": "2024-06-15",
        },
        {
            "_id": "v2",
            "registration_number": "KA-05-XY-9876",
            "model": "Swift Dzire",
            "nickname": "City Runner",
            "insurance_expiry": "2024-08-20",
            "next_service_due": "2024-07-01",
        },
    ]

    trips = [
        settle({
            "date": as_date(today).isoformat(),
            "vehicle_id": "v1",
            "driver_name": "Ramesh",
            "driver_phone": "9988776655",
            "customer_name": "John Doe",
            "customer_phone": "9876543210",
            "pickup_location": "Airport",
            "drop_location": "Whitefield",
            "start_time": "10:00",
            "end_time": "12:00",
            "income": 3500,
            "expenses": {"fuel_cost": 500, "toll": 100, "parking": 50, "other": 0},
            "driver_payment": {"total_amount": 500, "advance": 200, "mode": "Cash"},
            "km": {"start": 10000, "end": 10045},
            "notes": "Smooth trip.",
        }),
    ]

    return {"vehicles": vehicles, "trips": trips}
