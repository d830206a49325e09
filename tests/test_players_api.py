import io
import os

import pytest
from bson import ObjectId

from conftest import make_image_bytes
from playerbook.services.stores import AcademyStore, PlayerStore
from playerbook.utils.errors import GeocodeNotFound


@pytest.fixture(autouse=True)
def fake_geocoder(monkeypatch):
    calls = []

    def geocode(address):
        calls.append(address)
        if address == 'nowhere':
            raise GeocodeNotFound()
        return {'lat': 45.188529, 'lng': 5.724524}

    monkeypatch.setattr('playerbook.routes.players.get_coords_for_address', geocode)
    return calls


def post_player(client, headers, **overrides):
    data = {
        'title': 'Striker',
        'description': 'Fast and precise',
        'address': '1 Place Grenette, Grenoble',
        'image': (io.BytesIO(make_image_bytes('JPEG')), 'striker.jpg')
    }
    data.update(overrides)
    return client.post('/api/players', data=data, headers=headers, content_type='multipart/form-data')


def stored_images(app):
    folder = os.path.join(app.config['UPLOAD_FOLDER'], 'images')
    return os.listdir(folder) if os.path.isdir(folder) else []


def test_create_player(app, client, academy, auth_headers, fake_geocoder):
    response = post_player(client, auth_headers)

    assert response.status_code == 201
    player = response.get_json()['player']
    assert player['creator'] == academy.id
    assert player['location'] == {'lat': 45.188529, 'lng': 5.724524}
    assert fake_geocoder == ['1 Place Grenette, Grenoble']
    assert AcademyStore.find_by_id(academy.id).players == [ObjectId(player['id'])]
    assert len(stored_images(app)) == 1


def test_create_player_requires_token(client, academy):
    response = post_player(client, {})

    assert response.status_code == 401
    assert PlayerStore.collection().count_documents({}) == 0


def test_create_player_with_invalid_token(client, academy):
    response = post_player(client, {'Authorization': 'Bearer not-a-token'})

    assert response.status_code == 401


def test_create_player_validates_inputs(client, auth_headers):
    response = post_player(client, auth_headers, title='', description='tiny', address='')

    assert response.status_code == 422
    assert set(response.get_json()['details']) == {'title', 'description', 'address'}


def test_create_player_with_unknown_address(app, client, auth_headers):
    response = post_player(client, auth_headers, address='nowhere')

    assert response.status_code == 422
    assert response.get_json()['message'] == 'Could not find location for the specified address.'
    assert stored_images(app) == []


def test_create_player_rejects_non_image_upload(client, auth_headers):
    response = post_player(client, auth_headers, image=(io.BytesIO(b'%PDF-1.4'), 'cv.pdf'))

    assert response.status_code == 422
    assert PlayerStore.collection().count_documents({}) == 0


def test_create_player_rejects_image_with_huge_pixel_count(app, client, auth_headers):
    app.config['IMAGE_MAX_PIXELS'] = 1000
    image = (io.BytesIO(make_image_bytes(size=(64, 64))), 'huge.png')

    response = post_player(client, auth_headers, image=image)

    assert response.status_code == 422
    assert stored_images(app) == []
    assert PlayerStore.collection().count_documents({}) == 0


def test_create_player_for_deleted_academy_cleans_up_image(app, client, academy, auth_headers):
    AcademyStore.collection().delete_one({'_id': academy._id})

    response = post_player(client, auth_headers)

    assert response.status_code == 404
    assert stored_images(app) == []
    assert PlayerStore.collection().count_documents({}) == 0


def test_get_player_by_id(client, auth_headers):
    created = post_player(client, auth_headers).get_json()['player']

    response = client.get(f"/api/players/{created['id']}")

    assert response.status_code == 200
    assert response.get_json()['player']['title'] == 'Striker'


@pytest.mark.parametrize('player_id', [str(ObjectId()), 'not-an-id'])
def test_get_missing_player(client, player_id):
    response = client.get(f'/api/players/{player_id}')

    assert response.status_code == 404
    assert response.get_json()['message'] == 'Could not find player for the provided id.'


def test_get_players_by_academy(client, academy, auth_headers):
    post_player(client, auth_headers, title='Keeper')
    post_player(client, auth_headers, title='Winger')

    response = client.get(f'/api/players/academy/{academy.id}')

    assert response.status_code == 200
    assert sorted(p['title'] for p in response.get_json()['players']) == ['Keeper', 'Winger']


def test_get_players_by_academy_without_players(client, academy):
    response = client.get(f'/api/players/academy/{academy.id}')

    assert response.status_code == 404


def test_update_player(client, auth_headers):
    created = post_player(client, auth_headers).get_json()['player']

    response = client.patch(
        f"/api/players/{created['id']}",
        json={'title': 'Captain', 'description': 'Leads the team', 'address': 'ignored'},
        headers=auth_headers
    )

    assert response.status_code == 200
    player = response.get_json()['player']
    assert player['title'] == 'Captain'
    assert player['description'] == 'Leads the team'
    assert player['address'] == '1 Place Grenette, Grenoble'


def test_update_player_validates_inputs(client, auth_headers):
    created = post_player(client, auth_headers).get_json()['player']

    response = client.patch(f"/api/players/{created['id']}", json={'title': 'x', 'description': 'abc'}, headers=auth_headers)

    assert response.status_code == 422


def test_update_player_of_other_academy(client, auth_headers, other_auth_headers):
    created = post_player(client, auth_headers).get_json()['player']

    response = client.patch(
        f"/api/players/{created['id']}",
        json={'title': 'Stolen', 'description': 'Not my player'},
        headers=other_auth_headers
    )

    assert response.status_code == 401
    assert PlayerStore.find_by_id(created['id']).title == 'Striker'


def test_delete_player(app, client, academy, auth_headers):
    created = post_player(client, auth_headers).get_json()['player']

    response = client.delete(f"/api/players/{created['id']}", headers=auth_headers)

    assert response.status_code == 200
    assert response.get_json()['message'] == 'Deleted player.'
    assert PlayerStore.find_by_id(created['id']) is None
    assert AcademyStore.find_by_id(academy.id).players == []
    assert stored_images(app) == []


def test_delete_player_of_other_academy(client, academy, auth_headers, other_auth_headers):
    created = post_player(client, auth_headers).get_json()['player']

    response = client.delete(f"/api/players/{created['id']}", headers=other_auth_headers)

    assert response.status_code == 401
    assert PlayerStore.find_by_id(created['id']) is not None
    assert AcademyStore.find_by_id(academy.id).players == [ObjectId(created['id'])]


def test_delete_missing_player(client, auth_headers):
    response = client.delete(f'/api/players/{ObjectId()}', headers=auth_headers)

    assert response.status_code == 404


def test_uploaded_image_is_served(client, auth_headers):
    created = post_player(client, auth_headers).get_json()['player']
    filename = os.path.basename(created['image'])

    response = client.get(f'/uploads/images/{filename}')

    assert response.status_code == 200
    assert response.data[:2] == b'\xff\xd8'
    response.close()
