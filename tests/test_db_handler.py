from datetime import date

from seed_data import build_demo_seed


def test_save_trip_generates_id(db):
    saved = db.save_trip({"vehicle_id": "v1", "income": 10})

    assert isinstance(saved["_id"], str) and len(saved["_id"]) == 24
    assert db.get_trip(saved["_id"])["income"] == 10


def test_save_trip_replaces_and_keeps_created_at(db):
    first = db.save_trip({"vehicle_id": "v1", "income": 10, "notes": "old"})
    stored = db.get_trip(first["_id"])

    db.save_trip({"_id": first["_id"], "vehicle_id": "v2", "income": 20})

    updated = db.get_trip(first["_id"])
    assert updated["income"] == 20
    assert updated["vehicle_id"] == "v2"
    assert "notes" not in updated
    assert updated["created_at"] == stored["created_at"]
    assert len(db.list_trips()) == 1


def test_list_trips_newest_first(db):
    older = db.save_trip({"customer_name": "A"})
    newer = db.save_trip({"customer_name": "B"})
    db.trips.update_one({"_id": older["_id"]}, {"$set": {"created_at": newer["created_at"].replace(year=2000)}})

    assert [t["customer_name"] for t in db.list_trips()] == ["B", "A"]


def test_list_trips_search(db):
    db.save_trip({"customer_name": "John Doe", "driver_name": "Ramesh"})
    db.save_trip({"customer_name": "Asha", "driver_name": "Suresh"})
    tagged = db.save_trip({"_id": "T-1001", "customer_name": "Priya", "driver_name": "Kumar"})

    assert [t["customer_name"] for t in db.list_trips(search="john")] == ["John Doe"]
    assert [t["driver_name"] for t in db.list_trips(search="SURESH")] == ["Suresh"]
    assert [t["_id"] for t in db.list_trips(search="t-10")] == [tagged["_id"]]
    assert db.list_trips(search="(") == []


def test_delete_trip(db):
    saved = db.save_trip({"income": 1})
    assert db.delete_trip(saved["_id"]) is True
    assert db.delete_trip(saved["_id"]) is False
    assert db.get_trip(saved["_id"]) is None


def test_get_with_invalid_id(db):
    assert db.get_trip(None) is None
    assert db.get_vehicle("") is None


def test_vehicle_crud(db):
    saved = db.save_vehicle({"registration_number": "KA-01", "model": "Dzire"})
    assert db.list_vehicles()[0]["registration_number"] == "KA-01"
    assert db.delete_vehicle(saved["_id"]) is True
    assert db.list_vehicles() == []


def test_seed_only_fills_empty_collections(db):
    assert db.is_empty()
    seed = build_demo_seed(date(2024, 5, 31))

    db.seed_initial_data(seed)
    db.seed_initial_data(seed)

    assert not db.is_empty()
    assert len(db.list_vehicles()) == 2
    trips = db.list_trips()
    assert len(trips) == 1
    assert trips[0]["date"] == "2024-05-31"
    assert trips[0]["net_profit"] == 2350
    assert db.get_vehicle("v1")["nickname"] == "White Beast"
