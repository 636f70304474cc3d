from enum import Enum

from trustnest.extensions import db
from trustnest.utils.helpers import utcnow, isoformat


class PropertyStatus(Enum):
    ACTIVE = 'active'
    INACTIVE = 'inactive'
    RENTED = 'rented'


class Property(db.Model):
    __tablename__ = 'properties'

    id = db.Column(db.Integer, primary_key=True)
    landlord_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    title = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text)
    price = db.Column(db.Numeric(10, 2), nullable=False)
    currency = db.Column(db.String(3), default='EUR', nullable=False)

    country = db.Column(db.String(100), nullable=False)
    city = db.Column(db.String(100), nullable=False, index=True)
    address = db.Column(db.String(255))
    latitude = db.Column(db.Numeric(10, 8))
    longitude = db.Column(db.Numeric(11, 8))

    room_count = db.Column(db.Integer)
    bathroom_count = db.Column(db.Integer)
    square_meters = db.Column(db.Integer)
    amenities = db.Column(db.JSON)

    status = db.Column(db.Enum(PropertyStatus), default=PropertyStatus.ACTIVE, nullable=False)
    created_at = db.Column(db.DateTime, default=utcnow)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)

    landlord = db.relationship('User', backref=db.backref('properties', lazy='dynamic'))
    photos = db.relationship('Document', backref='property', lazy='dynamic')

    def to_dict(self):
        return {
            'id': self.id,
            'landlord_id': self.landlord_id,
            'title': self.title,
            'description': self.description,
            'price': float(self.price) if self.price is not None else None,
            'currency': self.currency,
            'country': self.country,
            'city': self.city,
            'address': self.address,
            'latitude': float(self.latitude) if self.latitude is not None else None,
            'longitude': float(self.longitude) if self.longitude is not None else None,
            'room_count': self.room_count,
            'bathroom_count': self.bathroom_count,
            'square_meters': self.square_meters,
            'amenities': self.amenities or [],
            'status': self.status.value,
            'photo_count': self.photos.count(),
            'created_at': isoformat(self.created_at)
        }
