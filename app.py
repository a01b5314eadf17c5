# -*- coding: utf-8 -*-
"""
Main Flask application file for Fleet Ledger.

Exposes trips, vehicles and the dashboard as a JSON API. Trips are
settled on every create and update before they are stored; the
dashboard is recomputed from the stored records on each request.
"""

# Standard library imports
import os
import logging
from datetime import date, datetime

# Third-party imports
from flask import Flask, jsonify, request
from werkzeug.exceptions import BadRequest, HTTPException, NotFound

# Local application imports
import config
from analytics import as_date, compute_stats, compute_trailing_series, resolve_vehicle_label
from db_handler import DBHandler
from maintenance import MAINTENANCE_FIELDS, vehicle_maintenance
from seed_data import build_demo_seed
from settlement import settle, validate_trip_input, validate_vehicle_input

logger = logging.getLogger(__name__)

VEHICLE_FIELDS = ("registration_number", "model", "nickname") + MAINTENANCE_FIELDS


# ============================================================================
# LOGGING
# ============================================================================

def configure_logging():
    """
    Log to the console and, when LOG_FILE is set, to a file.

    Leaves logging alone when the root logger already has handlers, e.g.
    when a host server or test runner configured it first.
    """
    if logging.getLogger().handlers:
        return
    handlers = [logging.StreamHandler()]
    if config.LOG_FILE:
        os.makedirs(os.path.dirname(config.LOG_FILE) or ".", exist_ok=True)
        handlers.append(logging.FileHandler(config.LOG_FILE))
    logging.basicConfig(
        level=config.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        handlers=handlers,
    )


# ============================================================================
# HELPER FUNCTIONS
# ============================================================================

def serialize(doc):
    """Convert a stored document to its JSON shape (``_id`` becomes ``id``)."""
    out = {key: value for key, value in doc.items() if key != "_id"}
    out["id"] = doc.get("_id")
    for key in ("created_at", "updated_at"):
        if isinstance(out.get(key), datetime):
            out[key] = out[key].isoformat()
    return out


def json_body():
    """Return the request's JSON object, rejecting anything else."""
    body = request.get_json(silent=True)
    if not isinstance(body, dict):
        raise BadRequest("Request body must be a JSON object.")
    return body


def clean_vehicle(body):
    vehicle = {}
    for field in VEHICLE_FIELDS:
        value = body.get(field)
        vehicle[field] = str(value).strip() if value not in (None, "") else ""
    return vehicle


def validation_failed(errors):
    logger.warning(f"Rejected {request.method} {request.path}: {'; '.join(errors)}")
    return jsonify({"error": "Bad Request", "messages": errors}), 400


# ============================================================================
# APPLICATION FACTORY
# ============================================================================

def create_app(db=None, seed_demo=None):
    """
    Build the Flask application.

    Args:
        db (DBHandler, optional): Record store. Defaults to a DBHandler
                                  connected to config.MONGO_URI
        seed_demo (bool, optional): Seed the demo fleet into an empty store.
                                    Defaults to config.SEED_DEMO_DATA

    Returns:
        Flask: Configured application
    """
    configure_logging()

    app = Flask(__name__)
    app.json.sort_keys = False

    db = db if db is not None else DBHandler()
    app.extensions["fleet_db"] = db

    if seed_demo is None:
        seed_demo = config.SEED_DEMO_DATA
    if seed_demo and db.is_empty():
        logger.info("Empty store detected, seeding demo fleet")
        db.seed_initial_data(build_demo_seed(date.today()))

    # ========================================================================
    # TRIP ROUTES
    # ========================================================================

    @app.route("/api/trips", methods=["GET"])
    def list_trips():
        vehicles = db.list_vehicles()
        trips = []
        for t in db.list_trips(search=request.args.get("search")):
            item = serialize(t)
            item["vehicle_label"] = resolve_vehicle_label(vehicles, t.get("vehicle_id"))
            trips.append(item)
        return jsonify(trips)

    @app.route("/api/trips", methods=["POST"])
    def create_trip():
        """
        Settle and store a new trip. Any client supplied id is ignored and a
        missing date defaults to today.
        """
        body = json_body()
        if not str(body.get("date") or "").strip():
            body["date"] = date.today().isoformat()
        errors = validate_trip_input(body)
        if errors:
            return validation_failed(errors)

        body.pop("_id", None)
        body.pop("id", None)
        saved = db.save_trip(settle(body))
        return jsonify(serialize(saved)), 201

    @app.route("/api/trips/<trip_id>", methods=["GET"])
    def get_trip(trip_id):
        trip = db.get_trip(trip_id)
        if not trip:
            raise NotFound(f"Trip {trip_id} not found.")
        item = serialize(trip)
        item["vehicle_label"] = resolve_vehicle_label(db.list_vehicles(), trip.get("vehicle_id"))
        return jsonify(item)

    @app.route("/api/trips/<trip_id>", methods=["PUT"])
    def update_trip(trip_id):
        """Re-settle an edited trip from its raw fields and save it."""
        if not db.get_trip(trip_id):
            raise NotFound(f"Trip {trip_id} not found.")
        body = json_body()
        errors = validate_trip_input(body)
        if errors:
            return validation_failed(errors)

        body["_id"] = trip_id
        saved = db.save_trip(settle(body))
        return jsonify(serialize(saved))

    @app.route("/api/trips/<trip_id>", methods=["DELETE"])
    def delete_trip(trip_id):
        if not db.delete_trip(trip_id):
            raise NotFound(f"Trip {trip_id} not found.")
        return "", 204

    # ========================================================================
    # VEHICLE ROUTES
    # ========================================================================

    @app.route("/api/vehicles", methods=["GET"])
    def list_vehicles():
        today = date.today()
        vehicles = []
        for v in db.list_vehicles():
            item = serialize(v)
            item["maintenance"] = vehicle_maintenance(v, today)
            vehicles.append(item)
        return jsonify(vehicles)

    @app.route("/api/vehicles", methods=["POST"])
    def create_vehicle():
        body = json_body()
        errors = validate_vehicle_input(body)
        if errors:
            return validation_failed(errors)
        saved = db.save_vehicle(clean_vehicle(body))
        return jsonify(serialize(saved)), 201

    @app.route("/api/vehicles/<vehicle_id>", methods=["GET"])
    def get_vehicle(vehicle_id):
        vehicle = db.get_vehicle(vehicle_id)
        if not vehicle:
            raise NotFound(f"Vehicle {vehicle_id} not found.")
        item = serialize(vehicle)
        item["maintenance"] = vehicle_maintenance(vehicle, date.today())
        return jsonify(item)

    @app.route("/api/vehicles/<vehicle_id>", methods=["PUT"])
    def update_vehicle(vehicle_id):
        if not db.get_vehicle(vehicle_id):
            raise NotFound(f"Vehicle {vehicle_id} not found.")
        body = json_body()
        errors = validate_vehicle_input(body)
        if errors:
            return validation_failed(errors)
        vehicle = clean_vehicle(body)
        vehicle["_id"] = vehicle_id
        saved = db.save_vehicle(vehicle)
        return jsonify(serialize(saved))

    @app.route("/api/vehicles/<vehicle_id>", methods=["DELETE"])
    def delete_vehicle(vehicle_id):
        if not db.delete_vehicle(vehicle_id):
            raise NotFound(f"Vehicle {vehicle_id} not found.")
        return "", 204

    # ========================================================================
    # DASHBOARD ROUTES
    # ========================================================================

    @app.route("/api/dashboard", methods=["GET"])
    def dashboard():
        """
        Dashboard statistics and the trailing income/profit series.

        ``?date=YYYY-MM-DD`` evaluates the dashboard as of that day.
        """
        requested = request.args.get("date")
        if requested:
            now = as_date(requested)
            if now is None:
                raise BadRequest(f"Invalid date: {requested}")
        else:
            now = datetime.now()

        trips = db.list_trips()
        vehicles = db.list_vehicles()
        return jsonify({
            "stats": compute_stats(trips, vehicles, now),
            "series": compute_trailing_series(trips, now, config.TRAILING_WINDOW_DAYS),
        })

    # ========================================================================
    # ERROR HANDLERS
    # ========================================================================

    @app.errorhandler(HTTPException)
    def http_error(error):
        if error.code == 404:
            logger.warning(f"404 Error: {request.path} - {request.remote_addr}")
        return jsonify({"error": error.name, "message": error.description}), error.code

    @app.errorhandler(Exception)
    def internal_error(error):
        logger.exception(f"500 Error: {request.method} {request.path}")
        return jsonify({"error": "Internal Server Error",
                        "message": "An unexpected error occurred."}), 500

    return app


# ============================================================================
# APPLICATION EXECUTION
# ============================================================================

if __name__ == "__main__":
    app = create_app()
    app.run(debug=config.FLASK_DEBUG)
