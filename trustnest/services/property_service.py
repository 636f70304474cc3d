import re
from decimal import Decimal

from trustnest.errors import ForbiddenError, NotFoundError, ValidationError
from trustnest.models.document import DocumentType
from trustnest.models.property import Property, PropertyStatus
from trustnest.utils.security import sanitize_input
from trustnest.utils.validators import (
    require_int_range, require_number, require_string_list, require_text
)


class PropertyService:
    def __init__(self, db, logger, document_service=None):
        self.db = db
        self.logger = logger
        self.document_service = document_service

    def _clean_property(self, data):
        if not isinstance(data, dict):
            raise ValidationError('Property data must be an object')

        cleaned = {
            'title': sanitize_input(require_text('title', data.get('title'), min_length=5, max_length=255)),
            'description': sanitize_input(require_text('description', data.get('description'), min_length=20)),
            'price': require_number('price', data.get('price'), minimum=Decimal('0'), exclusive_minimum=True),
            'country': sanitize_input(require_text('country', data.get('country'), max_length=100)),
            'city': sanitize_input(require_text('city', data.get('city'), max_length=100)),
        }

        currency = data.get('currency', 'EUR')
        if not isinstance(currency, str) or not re.fullmatch(r'[A-Za-z]{3}', currency):
            raise ValidationError('currency must be a 3-letter code', details={'field': 'currency'})
        cleaned['currency'] = currency.upper()

        if data.get('address') is not None:
            cleaned['address'] = sanitize_input(require_text('address', data['address'], max_length=255))

        for field, bound in (('latitude', 90), ('longitude', 180)):
            if data.get(field) is not None:
                value = require_number(field, data[field])
                if not -bound <= value <= bound:
                    raise ValidationError(f'{field} must be between -{bound} and {bound}',
                                          details={'field': field})
                cleaned[field] = value

        for field in ('room_count', 'bathroom_count', 'square_meters'):
            if data.get(field) is not None:
                cleaned[field] = require_int_range(field, data[field], 0, 100000)

        if data.get('amenities') is not None:
            cleaned['amenities'] = require_string_list('amenities', data['amenities'])

        return cleaned

    def create_property(self, landlord_id, data):
        prop = Property(landlord_id=landlord_id, **self._clean_property(data))
        self.db.session.add(prop)
        self.db.session.commit()
        self.logger.info(f"Property {prop.id} listed by landlord {landlord_id}")
        return prop

    def get_my_properties(self, landlord_id):
        return Property.query.filter_by(landlord_id=landlord_id).order_by(Property.created_at.desc()).all()

    def get_active_properties(self, filters=None):
        """Active listings, optionally narrowed by city, country, price and rooms"""
        filters = filters or {}
        query = Property.query.filter_by(status=PropertyStatus.ACTIVE)

        if filters.get('city'):
            query = query.filter(Property.city.ilike(filters['city']))
        if filters.get('country'):
            query = query.filter(Property.country.ilike(filters['country']))
        if filters.get('min_price') is not None:
            query = query.filter(Property.price >= require_number('min_price', filters['min_price']))
        if filters.get('max_price') is not None:
            query = query.filter(Property.price <= require_number('max_price', filters['max_price']))
        if filters.get('min_rooms') is not None:
            query = query.filter(Property.room_count >= require_number('min_rooms', filters['min_rooms']))

        return query.order_by(Property.created_at.desc(), Property.id.desc()).all()

    def get_property(self, property_id):
        prop = self.db.session.get(Property, property_id)
        if not prop:
            raise NotFoundError('Property not found')
        return prop

    def upload_photo(self, user, property_id, filename, mime_type, data):
        prop = self.get_property(property_id)
        if prop.landlord_id != user.id:
            raise ForbiddenError('Only the landlord can add photos to this property')

        return self.document_service.upload(
            user, DocumentType.PROPERTY_PHOTO, filename, mime_type, data, property_id=prop.id
        )
