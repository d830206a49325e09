from flask import Blueprint, request, jsonify, current_app
from flask_jwt_extended import jwt_required, get_jwt_identity
from marshmallow import Schema, fields, validate, ValidationError, EXCLUDE

from playerbook.services.image_storage import ImageStorage
from playerbook.services.location_service import get_coords_for_address
from playerbook.services.player_service import PlayerService
from playerbook.utils.errors import ApiError, ValidationFailed

players_bp = Blueprint('players', __name__, url_prefix='/api/players')

# Request schemas
class CreatePlayerSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    title = fields.Str(required=True, validate=validate.Length(min=1))
    description = fields.Str(required=True, validate=validate.Length(min=5))
    address = fields.Str(required=True, validate=validate.Length(min=1))

class UpdatePlayerSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    title = fields.Str(required=True, validate=validate.Length(min=1))
    description = fields.Str(required=True, validate=validate.Length(min=5))


def load_or_fail(schema, data):
    try:
        return schema.load(data)
    except ValidationError as e:
        raise ValidationFailed(details=e.messages)


@players_bp.route('/<pid>', methods=['GET'])
def get_player_by_id(pid):
    player = PlayerService.get_player(pid)
    return jsonify({'player': player.to_json()}), 200


@players_bp.route('/academy/<uid>', methods=['GET'])
def get_players_by_academy_id(uid):
    players = PlayerService.list_players_for_academy(uid)
    return jsonify({'players': [player.to_json() for player in players]}), 200


@players_bp.route('', methods=['POST'])
@jwt_required()
def create_player():
    """Create a player for the authenticated academy"""
    data = load_or_fail(CreatePlayerSchema(), request.form.to_dict())
    academy_id = get_jwt_identity()

    coordinates = get_coords_for_address(data['address'])
    image_path = ImageStorage().save(request.files.get('image'))

    try:
        player = PlayerService.create_player(
            academy_id,
            title=data['title'],
            description=data['description'],
            address=data['address'],
            location=coordinates,
            image=image_path
        )
    except ApiError:
        # Nothing references the stored file now
        ImageStorage().delete(image_path)
        raise

    return jsonify({'player': player.to_json()}), 201


@players_bp.route('/<pid>', methods=['PATCH'])
@jwt_required()
def update_player(pid):
    data = load_or_fail(UpdatePlayerSchema(), request.get_json(silent=True) or {})

    # TODO: re-geocode and replace the image when address/photo edits are supported
    player = PlayerService.update_player(get_jwt_identity(), pid, data)
    return jsonify({'player': player.to_json()}), 200


@players_bp.route('/<pid>', methods=['DELETE'])
@jwt_required()
def delete_player(pid):
    PlayerService.delete_player(get_jwt_identity(), pid)
    current_app.logger.info(f"Player {pid} deleted")
    return jsonify({'message': 'Deleted player.'}), 200
