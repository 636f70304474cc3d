from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError

from trustnest.errors import ForbiddenError, NotFoundError, ValidationError
from trustnest.models.messaging import Conversation, Message
from trustnest.models.user import User
from trustnest.utils.helpers import utcnow
from trustnest.utils.security import sanitize_input
from trustnest.utils.validators import require_int_range, require_text

MAX_MESSAGE_LENGTH = 5000


class MessagingService:
    def __init__(self, db, logger):
        self.db = db
        self.logger = logger

    def get_or_create_conversation(self, user_id, other_user_id):
        """One conversation per pair of users, stored lower id first"""
        if user_id == other_user_id:
            raise ValidationError('Cannot start a conversation with yourself')
        if not self.db.session.get(User, other_user_id):
            raise NotFoundError('User not found')

        user1_id, user2_id = sorted((user_id, other_user_id))
        conversation = Conversation.query.filter_by(user1_id=user1_id, user2_id=user2_id).first()
        if conversation:
            return conversation

        conversation = Conversation(user1_id=user1_id, user2_id=user2_id)
        self.db.session.add(conversation)
        try:
            self.db.session.commit()
        except IntegrityError:
            self.db.session.rollback()
            conversation = Conversation.query.filter_by(user1_id=user1_id, user2_id=user2_id).first()

        self.logger.info(f"Conversation {conversation.id} opened between {user1_id} and {user2_id}")
        return conversation

    def list_conversations(self, user_id):
        conversations = Conversation.query.filter(
            or_(Conversation.user1_id == user_id, Conversation.user2_id == user_id)
        ).order_by(Conversation.last_message_at.desc(), Conversation.id.desc()).all()

        result = []
        for conversation in conversations:
            data = conversation.to_dict()
            data['other_user_id'] = conversation.other_participant(user_id)
            data['unread_count'] = conversation.messages.filter(
                Message.sender_id != user_id,
                Message.is_read.is_(False)
            ).count()
            result.append(data)
        return result

    def _get_conversation(self, user_id, conversation_id):
        conversation = self.db.session.get(Conversation, conversation_id)
        if not conversation:
            raise NotFoundError('Conversation not found')
        if not conversation.has_participant(user_id):
            raise ForbiddenError('Not a participant in this conversation')
        return conversation

    def send_message(self, user_id, conversation_id, content):
        conversation = self._get_conversation(user_id, conversation_id)
        content = require_text('content', content, max_length=MAX_MESSAGE_LENGTH)

        message = Message(
            conversation_id=conversation.id,
            sender_id=user_id,
            content=sanitize_input(content)
        )
        conversation.last_message_at = utcnow()
        self.db.session.add(message)
        self.db.session.commit()
        return message

    def get_messages(self, user_id, conversation_id, limit=50):
        conversation = self._get_conversation(user_id, conversation_id)
        limit = require_int_range('limit', limit, 1, 100)
        return conversation.messages.order_by(Message.id.asc()).limit(limit).all()

    def mark_as_read(self, user_id, message_id):
        message = self.db.session.get(Message, message_id)
        if not message:
            raise NotFoundError('Message not found')
        if not message.conversation.has_participant(user_id) or message.sender_id == user_id:
            raise ForbiddenError('Only the recipient can mark a message as read')

        if not message.is_read:
            message.is_read = True
            message.read_at = utcnow()
            self.db.session.commit()
        return message
