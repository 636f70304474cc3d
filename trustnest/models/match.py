from enum import Enum

from trustnest.extensions import db
from trustnest.utils.helpers import utcnow, isoformat


class MatchStatus(Enum):
    ACTIVE = 'active'
    ARCHIVED = 'archived'
    REJECTED = 'rejected'


class Match(db.Model):
    """Historical record of one compatibility computation"""
    __tablename__ = 'matches'

    id = db.Column(db.Integer, primary_key=True)
    user1_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    user2_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    compatibility_score = db.Column(db.Integer, nullable=False)
    budget_match = db.Column(db.Integer, nullable=False)
    schedule_match = db.Column(db.Integer, nullable=False)
    cleanliness_match = db.Column(db.Integer, nullable=False)
    lifestyle_match = db.Column(db.Integer, nullable=False)
    pets_match = db.Column(db.Integer, nullable=False)
    explanation = db.Column(db.Text)
    status = db.Column(db.Enum(MatchStatus), default=MatchStatus.ACTIVE, nullable=False)
    created_at = db.Column(db.DateTime, default=utcnow)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)

    user1 = db.relationship('User', foreign_keys=[user1_id])
    user2 = db.relationship('User', foreign_keys=[user2_id])

    def other_user_id(self, user_id):
        return self.user2_id if self.user1_id == user_id else self.user1_id

    def to_dict(self):
        return {
            'id': self.id,
            'user1_id': self.user1_id,
            'user2_id': self.user2_id,
            'compatibility_score': self.compatibility_score,
            'budget_match': self.budget_match,
            'schedule_match': self.schedule_match,
            'cleanliness_match': self.cleanliness_match,
            'lifestyle_match': self.lifestyle_match,
            'pets_match': self.pets_match,
            'explanation': self.explanation,
            'status': self.status.value if self.status else None,
            'created_at': isoformat(self.created_at)
        }
