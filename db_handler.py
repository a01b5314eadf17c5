"""
Database Handler Module for Fleet Ledger

This module provides the record store behind the settlement and analytics
code: list, get, upsert and delete for trips and vehicles.

Database Structure:
├── trips
│   └── Settled trip records (income, expenses, driver payment, km)
└── vehicles
    └── Fleet vehicles with maintenance dates

Features:
- MongoDB integration with PyMongo
- Repository-owned ids (ObjectId hex strings, never client generated)
- Automatic created_at / updated_at timestamps
- Explicit, empty-store-gated seeding

Usage:
    from db_handler import DBHandler
    db = DBHandler()
    trips = db.list_trips()
"""

# ============================================================================
# IMPORTS
# ============================================================================
from datetime import datetime, timezone
import logging
import re

from bson.objectid import ObjectId
from pymongo import DESCENDING, MongoClient

import config

logger = logging.getLogger(__name__)

SEARCH_FIELDS = ("customer_name", "driver_name", "_id")


def new_id():
    """Generate a collision-resistant record id."""
    return str(ObjectId())


def _utcnow():
    return datetime.now(timezone.utc)


# ============================================================================
# DATABASE HANDLER CLASS
# ============================================================================
class DBHandler:
    """
    Handles all database operations for Fleet Ledger.

    Attributes:
        client: MongoDB client connection
        db: Database instance
        trips: Trips collection
        vehicles: Vehicles collection
    """

    def __init__(self, uri=None, client=None):
        """
        Initialize database connection and collections.

        Args:
            uri (str, optional): MongoDB connection URI.
                                Defaults to config.MONGO_URI if not provided.
            client (MongoClient, optional): Ready client to use instead of
                                connecting, e.g. a mongomock client in tests.
        """
        self.client = client if client is not None else MongoClient(uri or config.MONGO_URI)

        # Try to get default database from URI, fallback to MONGO_DB_NAME
        try:
            default_db = self.client.get_default_database()
        except Exception:
            default_db = None
        self.db = default_db if default_db is not None else self.client[config.MONGO_DB_NAME]

        self.trips = self.db.trips
        self.vehicles = self.db.vehicles

    # ========================================================================
    # GENERIC OPERATIONS
    # ========================================================================

    @staticmethod
    def _get(collection, record_id):
        if not isinstance(record_id, str) or not record_id:
            return None
        return collection.find_one({"_id": record_id})

    @staticmethod
    def _save(collection, doc):
        """
        Insert a new record or replace an existing one (last write wins).

        The record id is taken from ``_id`` or ``id``; a fresh id is
        generated when neither is set. ``created_at`` of an existing record
        is preserved.

        Returns:
            dict: The stored document
        """
        doc = dict(doc)
        record_id = doc.pop("_id", None) or doc.pop("id", None)
        doc.pop("id", None)
        now = _utcnow()

        existing = collection.find_one({"_id": record_id}) if record_id else None
        if existing is not None:
            doc["created_at"] = existing.get("created_at", now)
            doc["updated_at"] = now
            collection.replace_one({"_id": record_id}, doc)
            doc["_id"] = record_id
            return doc

        doc["_id"] = record_id or new_id()
        doc.setdefault("created_at", now)
        doc["updated_at"] = now
        collection.insert_one(doc)
        return doc

    @staticmethod
    def _delete(collection, record_id):
        if not isinstance(record_id, str) or not record_id:
            return False
        return collection.delete_one({"_id": record_id}).deleted_count > 0

    # ========================================================================
    # TRIP OPERATIONS
    # ========================================================================

    def list_trips(self, filter_query=None, search=None):
        """
        Retrieve trips, newest first.

        Args:
            filter_query (dict, optional): MongoDB query filter
            search (str, optional): Case-insensitive text matched against
                                    customer name, driver name and trip id

        Returns:
            list: List of trip documents
        """
        q = dict(filter_query or {})
        if search and search.strip():
            pattern = re.escape(search.strip())
            q["$or"] = [{field: {"$regex": pattern, "$options": "i"}} for field in SEARCH_FIELDS]
        return list(self.trips.find(q).sort("created_at", DESCENDING))

    def get_trip(self, trip_id):
        """
        Get a specific trip by ID.

        Returns:
            dict: Trip document or None if not found
        """
        return self._get(self.trips, trip_id)

    def save_trip(self, trip_doc):
        """
        Create or update a trip record.

        Args:
            trip_doc (dict): Settled trip data, with ``_id`` when updating

        Returns:
            dict: Stored trip document
        """
        saved = self._save(self.trips, trip_doc)
        logger.info(f"Trip {saved['_id']} saved (vehicle={saved.get('vehicle_id')}, net_profit={saved.get('net_profit')})")
        return saved

    def delete_trip(self, trip_id):
        """
        Delete a trip.

        Returns:
            bool: True if a trip was removed
        """
        deleted = self._delete(self.trips, trip_id)
        if deleted:
            logger.info(f"Trip {trip_id} deleted")
        return deleted

    # ========================================================================
    # VEHICLE OPERATIONS
    # ========================================================================

    def list_vehicles(self, filter_query=None):
        q = filter_query or {}
        return list(self.vehicles.find(q))

    def get_vehicle(self, vehicle_id):
        return self._get(self.vehicles, vehicle_id)

    def save_vehicle(self, vehicle_doc):
        saved = self._save(self.vehicles, vehicle_doc)
        logger.info(f"Vehicle {saved['_id']} saved ({saved.get('registration_number')})")
        return saved

    def delete_vehicle(self, vehicle_id):
        """
        Delete a vehicle. Trips referencing it are kept and show as unknown.

        Returns:
            bool: True if a vehicle was removed
        """
        deleted = self._delete(self.vehicles, vehicle_id)
        if deleted:
            logger.info(f"Vehicle {vehicle_id} deleted")
        return deleted

    # ========================================================================
    # DATA SEEDING
    # ========================================================================

    def is_empty(self):
        return self.trips.count_documents({}) == 0 and self.vehicles.count_documents({}) == 0

    def seed_initial_data(self, seed):
        """
        Seed the database with initial data for development/testing.

        Each collection is only seeded while it is empty, so calling this
        on every start is safe.

        Args:
            seed (dict): Data dictionary containing vehicles and trips
        """
        if self.vehicles.count_documents({}) == 0:
            for v in seed.get("vehicles", []):
                self._save(self.vehicles, v)
            logger.info(f"Seeded {len(seed.get('vehicles', []))} vehicles")

        if self.trips.count_documents({}) == 0:
            for t in seed.get("trips", []):
                self._save(self.trips, t)
            logger.info(f"Seeded {len(seed.get('trips', []))} trips")

# ============================================================================
# SUMMARY
# ============================================================================
"""
DBHandler provides a clean database abstraction layer:

TRIPS:
- list (newest first, optional search), get, save (upsert), delete

VEHICLES:
- list, get, save (upsert), delete

SEEDING:
- is_empty() and seed_initial_data(), called explicitly at start-up

Ids are ObjectId hex strings generated here, never by the client.
"""
