"""
Shared pytest configuration.

Tests run against mongomock in place of a MongoDB server, so transactions use
the compensating mode from TestingConfig. Celery tasks run eagerly.
"""

import io

import mongomock
import pytest
from PIL import Image

from playerbook.app import create_app
from playerbook.extensions import mongo
from playerbook.models.academy import Academy
from playerbook.services.academy_service import AcademyService
from playerbook.services.stores import AcademyStore, ensure_indexes


def make_image_bytes(fmt='PNG', size=(8, 8)):
    """Small in-memory image file"""
    output = io.BytesIO()
    Image.new('RGB', size, (200, 30, 30)).save(output, format=fmt)
    return output.getvalue()


@pytest.fixture
def app(tmp_path):
    app, _ = create_app('testing')
    app.config['UPLOAD_FOLDER'] = str(tmp_path / 'uploads')

    client = mongomock.MongoClient()
    mongo.cx = client
    mongo.db = client['playerbook_test']

    with app.app_context():
        ensure_indexes()
        yield app


@pytest.fixture
def client(app):
    return app.test_client()


def create_academy(name='Academy One', email='one@example.com', password='secret1'):
    academy = Academy(name=name, email=email, password=password, image='uploads/images/academy.png')
    return AcademyStore.insert(academy)


@pytest.fixture
def academy(app):
    return create_academy()


@pytest.fixture
def other_academy(app):
    return create_academy(name='Academy Two', email='two@example.com')


@pytest.fixture
def auth_headers(academy):
    token = AcademyService.create_token(academy)
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture
def other_auth_headers(other_academy):
    token = AcademyService.create_token(other_academy)
    return {'Authorization': f'Bearer {token}'}
