from decimal import Decimal

from sqlalchemy.exc import IntegrityError

from trustnest.errors import NotFoundError, ValidationError
from trustnest.models.profile import (
    UserProfile, WORK_TYPES, SLEEP_SCHEDULES, SMOKING_PREFERENCES, DRINKING_PREFERENCES
)
from trustnest.models.user import User
from trustnest.utils.security import sanitize_input, strip_html
from trustnest.utils.validators import (
    require_bool, require_choice, require_int_range, require_number,
    require_string_list, require_text
)

CHOICE_FIELDS = {
    'work_type': WORK_TYPES,
    'sleep_schedule': SLEEP_SCHEDULES,
    'smoking_preference': SMOKING_PREFERENCES,
    'drinking_preference': DRINKING_PREFERENCES,
}

SCALE_FIELDS = ('cleanliness_level', 'social_level')


class ProfileService:
    def __init__(self, db, logger):
        self.db = db
        self.logger = logger

    def get_or_create_profile(self, user_id):
        """Get the user's preference profile, creating an empty one on first access"""
        profile = UserProfile.query.filter_by(user_id=user_id).first()
        if profile:
            return profile

        if not self.db.session.get(User, user_id):
            raise NotFoundError('User not found')

        profile = UserProfile(user_id=user_id)
        self.db.session.add(profile)
        try:
            self.db.session.commit()
        except IntegrityError:
            # Created by a concurrent request
            self.db.session.rollback()
            profile = UserProfile.query.filter_by(user_id=user_id).first()

        self.logger.info(f"Created preference profile for user {user_id}")
        return profile

    def _clean_updates(self, profile, data):
        """Validate the whole payload up front; nothing is written on failure"""
        if not isinstance(data, dict):
            raise ValidationError('Profile data must be an object')

        updates = {}

        for field, choices in CHOICE_FIELDS.items():
            if field in data:
                value = data[field]
                updates[field] = None if value is None else require_choice(field, value, choices)

        for field in SCALE_FIELDS:
            if field in data:
                value = data[field]
                updates[field] = None if value is None else require_int_range(field, value, 1, 5)

        if 'age' in data:
            updates['age'] = None if data['age'] is None else require_int_range('age', data['age'], 18, 120)

        if 'pets_allowed' in data:
            value = data['pets_allowed']
            updates['pets_allowed'] = None if value is None else require_bool('pets_allowed', value)

        for field in ('budget_min', 'budget_max'):
            if field in data:
                value = data[field]
                updates[field] = None if value is None else require_number(field, value, minimum=Decimal('0'))

        budget_min = updates.get('budget_min', profile.budget_min)
        budget_max = updates.get('budget_max', profile.budget_max)
        if budget_min is not None and budget_max is not None and Decimal(budget_min) > Decimal(budget_max):
            raise ValidationError('budget_min cannot exceed budget_max', details={'field': 'budget_min'})

        for field in ('languages', 'interests'):
            if field in data:
                value = data[field]
                updates[field] = None if value is None else require_string_list(field, value)

        if 'nationality' in data:
            value = data['nationality']
            updates['nationality'] = None if value is None else sanitize_input(
                require_text('nationality', value, max_length=100)
            )

        for field in ('bio', 'pet_details'):
            if field in data:
                value = data[field]
                if value is None:
                    updates[field] = None
                else:
                    if not isinstance(value, str):
                        raise ValidationError(f'{field} must be text', details={'field': field})
                    updates[field] = strip_html(value.strip())[:5000]

        return updates

    def update_profile(self, user_id, data):
        """Update the owner's preference profile"""
        profile = self.get_or_create_profile(user_id)
        updates = self._clean_updates(profile, data)

        for field, value in updates.items():
            setattr(profile, field, value)

        self.db.session.commit()
        self.logger.info(f"Updated profile for user {user_id}: {sorted(updates)}")
        return profile
