from datetime import date

import pytest

from maintenance import DUE_SOON, EXPIRED, OK, maintenance_status, vehicle_maintenance

TODAY = date(2024, 6, 1)


@pytest.mark.parametrize("value,expected", [
    ("2024-05-31", EXPIRED),
    ("2024-06-01", EXPIRED),
    ("2024-06-02", DUE_SOON),
    ("2024-06-16", DUE_SOON),
    ("2024-06-17", OK),
    ("", None),
    (None, None),
    ("soon", None),
])
def test_maintenance_status(value, expected):
    assert maintenance_status(value, TODAY, warning_days=15) == expected


def test_vehicle_maintenance_only_reports_set_dates():
    vehicle = {
        "registration_number": "KA-01-AB-1234",
        "insurance_expiry": "2024-01-31",
        "next_service_due": "2024-06-10",
        "pollution_expiry": "",
    }
    assert vehicle_maintenance(vehicle, TODAY, warning_days=15) == {
        "next_service_due": DUE_SOON,
        "insurance_expiry": EXPIRED,
    }
