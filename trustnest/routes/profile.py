from flask import Blueprint, jsonify, request

from trustnest.auth.decorators import require_auth
from trustnest.extensions import limiter
from trustnest.routes.common import services, json_body
from trustnest.utils.validators import require_int_range

profile_bp = Blueprint('profile', __name__)


@profile_bp.route('/profile', methods=['GET'])
@require_auth()
def get_profile():
    """Get the caller's account and preference profile"""
    user = request.current_user
    profile = services().profiles.get_or_create_profile(user.id)
    return jsonify({
        'user': user.to_dict(),
        'profile': profile.to_dict()
    })


@profile_bp.route('/profile', methods=['PUT'])
@require_auth()
def update_profile():
    profile = services().profiles.update_profile(request.current_user.id, json_body())
    return jsonify({'success': True, 'profile': profile.to_dict()})


@profile_bp.route('/matching/compatibility', methods=['POST'])
@require_auth()
@limiter.limit("100 per hour")
def calculate_compatibility():
    data = json_body()
    target_user_id = require_int_range('target_user_id', data.get('target_user_id'), 1, 2 ** 31 - 1)
    result = services().matching.calculate_compatibility(request.current_user.id, target_user_id)
    return jsonify(result.to_dict())


@profile_bp.route('/matching/matches', methods=['GET'])
@require_auth()
def get_matches():
    user_id = request.current_user.id
    matches = services().matching.get_user_matches(user_id, status=request.args.get('status'))
    return jsonify({'matches': [
        dict(match.to_dict(), other_user_id=match.other_user_id(user_id)) for match in matches
    ]})


@profile_bp.route('/matching/matches/<int:match_id>/archive', methods=['POST'])
@require_auth()
def archive_match(match_id):
    match = services().matching.archive_match(request.current_user.id, match_id)
    return jsonify({'success': True, 'match': match.to_dict()})
