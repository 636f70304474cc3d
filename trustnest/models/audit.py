from trustnest.extensions import db
from trustnest.utils.helpers import utcnow, isoformat

AUDIT_ACTIONS = (
    'APPROVE_VERIFICATION',
    'REJECT_VERIFICATION',
    'REQUEST_VERIFICATION_INFO',
    'APPROVE_DOCUMENT',
    'REJECT_DOCUMENT',
    'DELETE_DOCUMENT',
    'FLAG_USER',
    'REMOVE_USER_FLAG',
    'SET_TRUST_BADGE',
    'SUSPEND_USER',
    'UNSUSPEND_USER',
)


class AuditLogEntry(db.Model):
    """Write-once record of an administrative action"""
    __tablename__ = 'audit_logs'

    id = db.Column(db.Integer, primary_key=True)
    # Null for actions taken by scheduled jobs
    admin_id = db.Column(db.Integer, db.ForeignKey('users.id'), index=True)
    action = db.Column(db.String(100), nullable=False, index=True)
    target_user_id = db.Column(db.Integer, db.ForeignKey('users.id'), index=True)
    target_type = db.Column(db.String(50))
    target_id = db.Column(db.Integer)
    details = db.Column(db.JSON, default=dict)
    created_at = db.Column(db.DateTime, default=utcnow, index=True)

    def to_dict(self):
        return {
            'id': self.id,
            'admin_id': self.admin_id,
            'action': self.action,
            'target_user_id': self.target_user_id,
            'target_type': self.target_type,
            'target_id': self.target_id,
            'details': self.details or {},
            'created_at': isoformat(self.created_at)
        }
