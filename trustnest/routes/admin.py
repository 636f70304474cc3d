"""
Admin review endpoints. Role checks happen in the service layer, so these
views only parse input and serialize results.
"""
from flask import Blueprint, jsonify, request

from trustnest.auth.decorators import require_auth
from trustnest.routes.common import services, json_body
from trustnest.utils.helpers import parse_int_arg

admin_bp = Blueprint('admin', __name__, url_prefix='/admin')


@admin_bp.route('/verifications/pending', methods=['GET'])
@require_auth()
def get_pending_verifications():
    return jsonify(services().admin.get_pending_verifications(
        request.current_user,
        limit=parse_int_arg(request.args, 'limit', 20),
        offset=parse_int_arg(request.args, 'offset', 0),
        user_type=request.args.get('user_type', 'all')
    ))


@admin_bp.route('/verifications/<int:verification_id>', methods=['GET'])
@require_auth()
def get_verification_details(verification_id):
    return jsonify(services().admin.get_verification_details(request.current_user, verification_id))


@admin_bp.route('/verifications/<int:verification_id>/approve', methods=['POST'])
@require_auth()
def approve_verification(verification_id):
    record = services().admin.approve_verification(
        request.current_user, verification_id, notes=json_body().get('notes')
    )
    return jsonify({'success': True, 'verification': record.to_dict()})


@admin_bp.route('/verifications/<int:verification_id>/reject', methods=['POST'])
@require_auth()
def reject_verification(verification_id):
    data = json_body()
    record = services().admin.reject_verification(
        request.current_user, verification_id, data.get('reason'), notes=data.get('notes')
    )
    return jsonify({'success': True, 'verification': record.to_dict()})


@admin_bp.route('/verifications/<int:verification_id>/request-info', methods=['POST'])
@require_auth()
def request_verification_info(verification_id):
    data = json_body()
    services().admin.request_verification_info(
        request.current_user,
        verification_id,
        data.get('message'),
        required_documents=data.get('required_documents')
    )
    return jsonify({'success': True})


@admin_bp.route('/documents/<int:document_id>/approve', methods=['POST'])
@require_auth()
def approve_document(document_id):
    document = services().admin.approve_document(
        request.current_user, document_id, notes=json_body().get('notes')
    )
    return jsonify({'success': True, 'document': document.to_dict()})


@admin_bp.route('/documents/<int:document_id>/reject', methods=['POST'])
@require_auth()
def reject_document(document_id):
    document = services().admin.reject_document(
        request.current_user, document_id, json_body().get('reason')
    )
    return jsonify({'success': True, 'document': document.to_dict()})


@admin_bp.route('/users/<int:user_id>/flags', methods=['POST'])
@require_auth()
def flag_user(user_id):
    data = json_body()
    flag = services().admin.flag_user(
        request.current_user, user_id, data.get('flag_type'), data.get('description')
    )
    return jsonify({'success': True, 'flag': flag.to_dict()}), 201


@admin_bp.route('/users/<int:user_id>/flags/<int:flag_id>', methods=['DELETE'])
@require_auth()
def remove_user_flag(user_id, flag_id):
    flag = services().admin.remove_user_flag(
        request.current_user, user_id, flag_id, json_body().get('reason')
    )
    return jsonify({'success': True, 'flag': flag.to_dict()})


@admin_bp.route('/users/<int:user_id>/trust-badge', methods=['POST'])
@require_auth()
def set_trust_badge(user_id):
    data = json_body()
    record = services().admin.set_user_trust_badge(
        request.current_user, user_id, data.get('verified'), reason=data.get('reason')
    )
    return jsonify({'success': True, 'verification': record.to_dict()})


@admin_bp.route('/users/<int:user_id>/suspend', methods=['POST'])
@require_auth()
def suspend_user(user_id):
    data = json_body()
    user = services().admin.suspend_user(
        request.current_user, user_id, data.get('reason'), duration_days=data.get('duration_days')
    )
    return jsonify({'success': True, 'user': user.to_dict()})


@admin_bp.route('/users/<int:user_id>/unsuspend', methods=['POST'])
@require_auth()
def unsuspend_user(user_id):
    user = services().admin.unsuspend_user(request.current_user, user_id, json_body().get('reason'))
    return jsonify({'success': True, 'user': user.to_dict()})


@admin_bp.route('/statistics', methods=['GET'])
@require_auth()
def get_statistics():
    return jsonify(services().admin.get_statistics(request.current_user))


@admin_bp.route('/audit-logs', methods=['GET'])
@require_auth()
def get_audit_logs():
    return jsonify(services().admin.get_audit_logs(
        request.current_user,
        limit=parse_int_arg(request.args, 'limit', 50),
        offset=parse_int_arg(request.args, 'offset', 0),
        action=request.args.get('action'),
        user_id=parse_int_arg(request.args, 'user_id', None)
    ))
