from flask import Blueprint, request, jsonify, current_app
from marshmallow import Schema, fields, validate, ValidationError, EXCLUDE, pre_load

from playerbook.services.academy_service import AcademyService
from playerbook.services.image_storage import ImageStorage
from playerbook.utils.errors import ApiError, ValidationFailed

academies_bp = Blueprint('academies', __name__, url_prefix='/api/academies')

# Request schemas for validation
class SignupSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    name = fields.Str(required=True, validate=validate.Length(min=1))
    email = fields.Email(required=True)
    password = fields.Str(required=True, validate=validate.Length(min=6))

    @pre_load
    def strip_values(self, data, **kwargs):
        data = dict(data)
        for key in ('name', 'email'):
            if isinstance(data.get(key), str):
                data[key] = data[key].strip()
        return data

class LoginSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    email = fields.Str(required=True)
    password = fields.Str(required=True)


def request_data():
    """JSON body if present, form fields otherwise"""
    return request.get_json(silent=True) or request.form.to_dict()


@academies_bp.route('', methods=['GET'])
def get_academies():
    """List all academies (passwords excluded)"""
    academies = AcademyService.list_academies()
    return jsonify({'academies': [academy.to_json() for academy in academies]}), 200


@academies_bp.route('/signup', methods=['POST'])
def signup():
    """Register an academy with a profile image"""
    try:
        data = SignupSchema().load(request.form.to_dict())
    except ValidationError as e:
        raise ValidationFailed(details=e.messages)

    image_path = ImageStorage().save(request.files.get('image'))

    try:
        result = AcademyService.signup(
            name=data['name'],
            email=data['email'],
            password=data['password'],
            image=image_path
        )
    except ApiError:
        ImageStorage().delete(image_path)
        raise

    current_app.logger.info(f"Signup successful for academy {result['academyId']}")
    return jsonify(result), 201


@academies_bp.route('/login', methods=['POST'])
def login():
    """Login with email and password"""
    try:
        data = LoginSchema().load(request_data())
    except ValidationError as e:
        raise ValidationFailed(details=e.messages)

    result = AcademyService.login(data['email'], data['password'])
    return jsonify(result), 200
