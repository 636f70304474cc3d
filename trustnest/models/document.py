from enum import Enum

from trustnest.extensions import db
from trustnest.utils.helpers import utcnow, isoformat

MB = 1024 * 1024


class DocumentType(Enum):
    GOVERNMENT_ID = 'government_id'
    SELFIE = 'selfie'
    PROPERTY_PHOTO = 'property_photo'
    OTHER = 'other'


class ReviewStatus(Enum):
    PENDING = 'pending'
    APPROVED = 'approved'
    REJECTED = 'rejected'


ALLOWED_MIME_TYPES = {
    DocumentType.GOVERNMENT_ID: ('image/jpeg', 'image/png', 'application/pdf'),
    DocumentType.SELFIE: ('image/jpeg', 'image/png'),
    DocumentType.PROPERTY_PHOTO: ('image/jpeg', 'image/png', 'image/webp'),
    DocumentType.OTHER: ('application/pdf', 'image/jpeg', 'image/png'),
}

MAX_FILE_SIZES = {
    DocumentType.GOVERNMENT_ID: 10 * MB,
    DocumentType.SELFIE: 5 * MB,
    DocumentType.PROPERTY_PHOTO: 10 * MB,
    DocumentType.OTHER: 15 * MB,
}


class Document(db.Model):
    """Uploaded evidence; the blob behind file_key is encrypted at rest"""
    __tablename__ = 'documents'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    document_type = db.Column(db.Enum(DocumentType), nullable=False)

    file_key = db.Column(db.String(500), unique=True, nullable=False)
    file_url = db.Column(db.Text)
    file_name = db.Column(db.String(255))
    mime_type = db.Column(db.String(100), nullable=False)
    file_size = db.Column(db.Integer, nullable=False)

    encryption_algorithm = db.Column(db.String(50))
    encryption_key_id = db.Column(db.String(100))

    verification_id = db.Column(db.Integer, db.ForeignKey('verifications.id'))
    property_id = db.Column(db.Integer, db.ForeignKey('properties.id'))

    review_status = db.Column(db.Enum(ReviewStatus), default=ReviewStatus.PENDING, nullable=False)
    review_reason = db.Column(db.Text)
    reviewed_by = db.Column(db.Integer, db.ForeignKey('users.id'))
    reviewed_at = db.Column(db.DateTime)

    created_at = db.Column(db.DateTime, default=utcnow)

    verification = db.relationship('VerificationRecord', backref=db.backref('documents', lazy='dynamic'))

    def to_dict(self):
        # Storage URL is only handed out through get_document_url
        return {
            'id': self.id,
            'user_id': self.user_id,
            'document_type': self.document_type.value,
            'file_name': self.file_name,
            'mime_type': self.mime_type,
            'file_size': self.file_size,
            'property_id': self.property_id,
            'review_status': self.review_status.value,
            'review_reason': self.review_reason,
            'reviewed_at': isoformat(self.reviewed_at),
            'created_at': isoformat(self.created_at)
        }
