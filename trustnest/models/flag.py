from trustnest.extensions import db
from trustnest.utils.helpers import utcnow, isoformat

FLAG_TYPES = (
    'duplicate_email',
    'duplicate_phone',
    'suspicious_documents',
    'fraud_attempt',
    'identity_mismatch',
    'other',
)


class UserFlag(db.Model):
    __tablename__ = 'user_flags'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    flag_type = db.Column(db.String(50), nullable=False)
    description = db.Column(db.Text, nullable=False)
    is_active = db.Column(db.Boolean, default=True, nullable=False)
    created_by = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)
    created_at = db.Column(db.DateTime, default=utcnow)
    removed_by = db.Column(db.Integer, db.ForeignKey('users.id'))
    removed_at = db.Column(db.DateTime)
    removal_reason = db.Column(db.Text)

    def to_dict(self):
        return {
            'id': self.id,
            'user_id': self.user_id,
            'flag_type': self.flag_type,
            'description': self.description,
            'is_active': self.is_active,
            'created_by': self.created_by,
            'created_at': isoformat(self.created_at),
            'removed_at': isoformat(self.removed_at),
            'removal_reason': self.removal_reason
        }
