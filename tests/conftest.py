import mongomock
import pytest

from app import create_app
from db_handler import DBHandler


@pytest.fixture
def db():
    return DBHandler(client=mongomock.MongoClient())


@pytest.fixture
def app(db):
    app = create_app(db=db, seed_demo=False)
    app.config.update(TESTING=True)
    return app


@pytest.fixture
def client(app):
    return app.test_client()
