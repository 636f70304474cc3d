from trustnest.extensions import db
from trustnest.utils.helpers import utcnow, isoformat

WORK_TYPES = ('student', 'remote', 'office', 'freelance', 'other')
SLEEP_SCHEDULES = ('early_bird', 'night_owl', 'flexible')
SMOKING_PREFERENCES = ('no_smoking', 'occasional', 'regular')
DRINKING_PREFERENCES = ('no_drinking', 'occasional', 'regular')


class UserProfile(db.Model):
    """Roommate preference profile, one per user"""
    __tablename__ = 'user_profiles'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), unique=True, nullable=False)

    age = db.Column(db.Integer)
    nationality = db.Column(db.String(100))
    languages = db.Column(db.JSON)

    budget_min = db.Column(db.Numeric(10, 2))
    budget_max = db.Column(db.Numeric(10, 2))
    work_type = db.Column(db.String(20))

    sleep_schedule = db.Column(db.String(20))
    cleanliness_level = db.Column(db.Integer)  # 1-5
    smoking_preference = db.Column(db.String(20))
    drinking_preference = db.Column(db.String(20))
    # Nullable on purpose: unset compares equal to unset in matching
    pets_allowed = db.Column(db.Boolean)
    pet_details = db.Column(db.Text)

    social_level = db.Column(db.Integer)  # 1-5: introvert to extrovert
    interests = db.Column(db.JSON)
    bio = db.Column(db.Text)

    created_at = db.Column(db.DateTime, default=utcnow)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'user_id': self.user_id,
            'age': self.age,
            'nationality': self.nationality,
            'languages': self.languages or [],
            'budget_min': float(self.budget_min) if self.budget_min is not None else None,
            'budget_max': float(self.budget_max) if self.budget_max is not None else None,
            'work_type': self.work_type,
            'sleep_schedule': self.sleep_schedule,
            'cleanliness_level': self.cleanliness_level,
            'smoking_preference': self.smoking_preference,
            'drinking_preference': self.drinking_preference,
            'pets_allowed': self.pets_allowed,
            'pet_details': self.pet_details,
            'social_level': self.social_level,
            'interests': self.interests or [],
            'bio': self.bio,
            'created_at': isoformat(self.created_at),
            'updated_at': isoformat(self.updated_at)
        }
