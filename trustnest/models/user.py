from trustnest.extensions import db
from trustnest.utils.helpers import utcnow, isoformat


class User(db.Model):
    __tablename__ = 'users'

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(320), unique=True, nullable=False)
    name = db.Column(db.String(255))
    phone = db.Column(db.String(20))
    role = db.Column(db.String(20), default='user', nullable=False)
    user_type = db.Column(db.String(20), default='tenant', nullable=False)
    is_active = db.Column(db.Boolean, default=True, nullable=False)
    suspended_at = db.Column(db.DateTime)
    suspended_until = db.Column(db.DateTime)
    suspension_reason = db.Column(db.Text)
    created_at = db.Column(db.DateTime, default=utcnow)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)

    profile = db.relationship('UserProfile', backref='user', uselist=False)
    verification = db.relationship('VerificationRecord', foreign_keys='VerificationRecord.user_id', backref='user', uselist=False)
    documents = db.relationship('Document', foreign_keys='Document.user_id', backref='owner', lazy='dynamic')
    flags = db.relationship('UserFlag', foreign_keys='UserFlag.user_id', backref='user', lazy='dynamic')

    @property
    def is_admin(self):
        return self.role == 'admin'

    def __repr__(self):
        return f'<User {self.email}>'

    def to_dict(self):
        return {
            'id': self.id,
            'email': self.email,
            'name': self.name,
            'phone': self.phone,
            'role': self.role,
            'user_type': self.user_type,
            'is_active': self.is_active,
            'suspended_until': isoformat(self.suspended_until),
            'created_at': isoformat(self.created_at)
        }
