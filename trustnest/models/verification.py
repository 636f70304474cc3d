from enum import Enum

from trustnest.extensions import db
from trustnest.utils.helpers import utcnow, isoformat

SUB_CHECKS = ('email', 'phone', 'id', 'selfie')


class VerificationStatus(Enum):
    PENDING = 'pending'
    APPROVED = 'approved'
    REJECTED = 'rejected'


class TrustBadge(Enum):
    NOT_VERIFIED = 'not_verified'
    VERIFIED = 'verified'


class DecisionSource(Enum):
    """Who produced the current status: nobody yet, the sub-checks, or an admin"""
    NONE = 'none'
    AUTO = 'auto'
    ADMIN = 'admin'


class VerificationRecord(db.Model):
    __tablename__ = 'verifications'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), unique=True, nullable=False)

    status = db.Column(db.Enum(VerificationStatus), default=VerificationStatus.PENDING, nullable=False)
    trust_badge = db.Column(db.Enum(TrustBadge), default=TrustBadge.NOT_VERIFIED, nullable=False)
    decision_source = db.Column(db.Enum(DecisionSource), default=DecisionSource.NONE, nullable=False)

    email_verified = db.Column(db.Boolean, default=False, nullable=False)
    email_verified_at = db.Column(db.DateTime)
    phone_verified = db.Column(db.Boolean, default=False, nullable=False)
    phone_verified_at = db.Column(db.DateTime)
    phone_otp_attempts = db.Column(db.Integer, default=0, nullable=False)
    id_verified = db.Column(db.Boolean, default=False, nullable=False)
    id_verified_at = db.Column(db.DateTime)
    selfie_verified = db.Column(db.Boolean, default=False, nullable=False)
    selfie_verified_at = db.Column(db.DateTime)

    reviewed_by = db.Column(db.Integer, db.ForeignKey('users.id'))
    reviewed_at = db.Column(db.DateTime)
    rejection_reason = db.Column(db.Text)
    review_notes = db.Column(db.Text)

    # Optimistic lock; SQLAlchemy raises StaleDataError on a concurrent write
    version = db.Column(db.Integer, nullable=False)

    created_at = db.Column(db.DateTime, default=utcnow)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)

    __mapper_args__ = {'version_id_col': version}

    def is_checked(self, check):
        return bool(getattr(self, f'{check}_verified'))

    @property
    def all_checks_complete(self):
        return all(self.is_checked(check) for check in SUB_CHECKS)

    def to_dict(self):
        data = {
            'id': self.id,
            'user_id': self.user_id,
            'status': self.status.value,
            'trust_badge': self.trust_badge.value,
            'phone_otp_attempts': self.phone_otp_attempts,
            'reviewed_by': self.reviewed_by,
            'reviewed_at': isoformat(self.reviewed_at),
            'rejection_reason': self.rejection_reason,
            'created_at': isoformat(self.created_at),
            'updated_at': isoformat(self.updated_at)
        }
        for check in SUB_CHECKS:
            data[f'{check}_verified'] = self.is_checked(check)
            data[f'{check}_verified_at'] = isoformat(getattr(self, f'{check}_verified_at'))
        return data
