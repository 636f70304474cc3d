from flask import Blueprint, jsonify, request

from trustnest.auth.decorators import require_auth
from trustnest.routes.common import services, json_body
from trustnest.utils.helpers import parse_int_arg
from trustnest.utils.validators import require_int_range

messaging_bp = Blueprint('messaging', __name__, url_prefix='/messaging')


@messaging_bp.route('/conversations', methods=['POST'])
@require_auth()
def start_conversation():
    other_user_id = require_int_range('user_id', json_body().get('user_id'), 1, 2 ** 31 - 1)
    conversation = services().messaging.get_or_create_conversation(request.current_user.id, other_user_id)
    return jsonify({'conversation': conversation.to_dict()}), 201


@messaging_bp.route('/conversations', methods=['GET'])
@require_auth()
def list_conversations():
    return jsonify({'conversations': services().messaging.list_conversations(request.current_user.id)})


@messaging_bp.route('/conversations/<int:conversation_id>/messages', methods=['GET'])
@require_auth()
def get_messages(conversation_id):
    messages = services().messaging.get_messages(
        request.current_user.id,
        conversation_id,
        limit=parse_int_arg(request.args, 'limit', 50)
    )
    return jsonify({'messages': [message.to_dict() for message in messages]})


@messaging_bp.route('/conversations/<int:conversation_id>/messages', methods=['POST'])
@require_auth()
def send_message(conversation_id):
    message = services().messaging.send_message(
        request.current_user.id,
        conversation_id,
        json_body().get('content')
    )
    return jsonify({'message': message.to_dict()}), 201


@messaging_bp.route('/messages/<int:message_id>/read', methods=['POST'])
@require_auth()
def mark_as_read(message_id):
    message = services().messaging.mark_as_read(request.current_user.id, message_id)
    return jsonify({'message': message.to_dict()})
