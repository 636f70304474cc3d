from flask import Blueprint, jsonify, request

from trustnest.auth.decorators import require_auth
from trustnest.extensions import limiter
from trustnest.routes.common import services, json_body, uploaded_file

properties_bp = Blueprint('properties', __name__, url_prefix='/properties')

FILTER_ARGS = ('city', 'country', 'min_price', 'max_price', 'min_rooms')


@properties_bp.route('', methods=['POST'])
@require_auth()
def create_property():
    prop = services().properties.create_property(request.current_user.id, json_body())
    return jsonify({'success': True, 'property': prop.to_dict()}), 201


@properties_bp.route('', methods=['GET'])
@require_auth()
def get_properties():
    filters = {name: request.args.get(name) for name in FILTER_ARGS if request.args.get(name)}
    properties = services().properties.get_active_properties(filters)
    return jsonify({'properties': [prop.to_dict() for prop in properties]})


@properties_bp.route('/mine', methods=['GET'])
@require_auth()
def get_my_properties():
    properties = services().properties.get_my_properties(request.current_user.id)
    return jsonify({'properties': [prop.to_dict() for prop in properties]})


@properties_bp.route('/<int:property_id>/photos', methods=['POST'])
@require_auth()
@limiter.limit("50 per hour")
def upload_property_photo(property_id):
    filename, mime_type, data = uploaded_file()
    document = services().properties.upload_photo(
        request.current_user, property_id, filename, mime_type, data
    )
    return jsonify({'success': True, 'document': document.to_dict()}), 201
