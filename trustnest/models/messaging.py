from trustnest.extensions import db
from trustnest.utils.helpers import utcnow, isoformat


class Conversation(db.Model):
    __tablename__ = 'conversations'

    id = db.Column(db.Integer, primary_key=True)
    # Always stored with user1_id < user2_id
    user1_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)
    user2_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)
    last_message_at = db.Column(db.DateTime)
    created_at = db.Column(db.DateTime, default=utcnow)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)

    messages = db.relationship('Message', backref='conversation', lazy='dynamic',
                               order_by='Message.id')

    __table_args__ = (
        db.UniqueConstraint('user1_id', 'user2_id'),
    )

    def has_participant(self, user_id):
        return user_id in (self.user1_id, self.user2_id)

    def other_participant(self, user_id):
        return self.user2_id if self.user1_id == user_id else self.user1_id

    def to_dict(self):
        return {
            'id': self.id,
            'user1_id': self.user1_id,
            'user2_id': self.user2_id,
            'last_message_at': isoformat(self.last_message_at),
            'created_at': isoformat(self.created_at)
        }


class Message(db.Model):
    __tablename__ = 'messages'

    id = db.Column(db.Integer, primary_key=True)
    conversation_id = db.Column(db.Integer, db.ForeignKey('conversations.id'), nullable=False, index=True)
    sender_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)
    content = db.Column(db.Text, nullable=False)
    is_read = db.Column(db.Boolean, default=False, nullable=False)
    read_at = db.Column(db.DateTime)
    created_at = db.Column(db.DateTime, default=utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'conversation_id': self.conversation_id,
            'sender_id': self.sender_id,
            'content': self.content,
            'is_read': self.is_read,
            'read_at': isoformat(self.read_at),
            'created_at': isoformat(self.created_at)
        }
