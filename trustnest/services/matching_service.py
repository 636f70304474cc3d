from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from sqlalchemy import or_

from trustnest.errors import ForbiddenError, NotFoundError, ValidationError
from trustnest.models.match import Match, MatchStatus
from trustnest.models.profile import UserProfile
from trustnest.utils.helpers import round_half_up

# Decimal: the overall score is rounded from an exact weighted sum
WEIGHTS = {
    'budget': Decimal('0.25'),
    'schedule': Decimal('0.20'),
    'cleanliness': Decimal('0.20'),
    'lifestyle': Decimal('0.20'),
    'pets': Decimal('0.15'),
}

EXPLANATION_LABELS = (
    ('budget', 'Budget compatibility'),
    ('schedule', 'Sleep schedule match'),
    ('cleanliness', 'Cleanliness preferences aligned'),
    ('lifestyle', 'Lifestyle preferences match'),
    ('pets', 'Pet preferences compatible'),
)

NO_STRONG_MATCH = 'Some differences in preferences'
EXPLANATION_THRESHOLD = 80


@dataclass(frozen=True)
class CompatibilityResult:
    compatibility_score: int
    budget_match: int
    schedule_match: int
    cleanliness_match: int
    lifestyle_match: int
    pets_match: int
    explanation: str

    def to_dict(self):
        return {
            'compatibility_score': self.compatibility_score,
            'budget_match': self.budget_match,
            'schedule_match': self.schedule_match,
            'cleanliness_match': self.cleanliness_match,
            'lifestyle_match': self.lifestyle_match,
            'pets_match': self.pets_match,
            'explanation': self.explanation
        }


def _budget_score(a, b) -> float:
    bounds = (a.budget_min, a.budget_max, b.budget_min, b.budget_max)
    if any(value is None for value in bounds):
        return 100.0

    mid_a = (float(a.budget_min) + float(a.budget_max)) / 2
    mid_b = (float(b.budget_min) + float(b.budget_max)) / 2
    diff = abs(mid_a - mid_b)
    max_diff = max(mid_a, mid_b) * 0.2
    if max_diff == 0:
        return 100.0
    return min(100.0, max(0.0, 100 - (diff / max_diff) * 100))


def _schedule_score(a, b) -> float:
    if a.sleep_schedule is None or b.sleep_schedule is None:
        return 100.0
    return 100.0 if a.sleep_schedule == b.sleep_schedule else 50.0


def _cleanliness_score(a, b) -> float:
    if a.cleanliness_level is None or b.cleanliness_level is None:
        return 100.0
    return float(max(0, 100 - abs(a.cleanliness_level - b.cleanliness_level) * 20))


def _lifestyle_score(a, b) -> float:
    # Strict equality: unset on both sides counts as a match here
    points = 0
    if a.smoking_preference == b.smoking_preference:
        points += 50
    if a.drinking_preference == b.drinking_preference:
        points += 50
    return float(points)


def _pets_score(a, b) -> float:
    return 100.0 if a.pets_allowed == b.pets_allowed else 50.0


def compute_compatibility(profile_a, profile_b) -> CompatibilityResult:
    """
    Score how well two preference profiles fit as roommates.

    Works on any objects exposing the UserProfile preference attributes.
    Dimensions with a missing value on either side score 100 instead of
    penalising an incomplete profile. The overall score is the weighted sum
    of the raw sub-scores, rounded half-up once at the end.
    """
    raw = {
        'budget': _budget_score(profile_a, profile_b),
        'schedule': _schedule_score(profile_a, profile_b),
        'cleanliness': _cleanliness_score(profile_a, profile_b),
        'lifestyle': _lifestyle_score(profile_a, profile_b),
        'pets': _pets_score(profile_a, profile_b),
    }

    overall = round_half_up(sum(Decimal(str(raw[name])) * weight for name, weight in WEIGHTS.items()))

    labels = [label for name, label in EXPLANATION_LABELS if raw[name] > EXPLANATION_THRESHOLD]
    explanation = ', '.join(labels) if labels else NO_STRONG_MATCH

    return CompatibilityResult(
        compatibility_score=max(0, min(100, overall)),
        budget_match=round_half_up(raw['budget']),
        schedule_match=round_half_up(raw['schedule']),
        cleanliness_match=round_half_up(raw['cleanliness']),
        lifestyle_match=round_half_up(raw['lifestyle']),
        pets_match=round_half_up(raw['pets']),
        explanation=explanation
    )


class MatchingService:
    def __init__(self, db, logger):
        self.db = db
        self.logger = logger

    def _get_profile(self, user_id) -> UserProfile:
        profile = UserProfile.query.filter_by(user_id=user_id).first()
        if not profile:
            raise NotFoundError(f'Profile not found for user {user_id}')
        return profile

    def calculate_compatibility(self, user_id, target_user_id) -> CompatibilityResult:
        """Compute compatibility with another user and append it to match history"""
        if user_id == target_user_id:
            raise ValidationError('Cannot calculate compatibility with yourself')

        current_profile = self._get_profile(user_id)
        target_profile = self._get_profile(target_user_id)

        result = compute_compatibility(current_profile, target_profile)

        match = Match(
            user1_id=user_id,
            user2_id=target_user_id,
            compatibility_score=result.compatibility_score,
            budget_match=result.budget_match,
            schedule_match=result.schedule_match,
            cleanliness_match=result.cleanliness_match,
            lifestyle_match=result.lifestyle_match,
            pets_match=result.pets_match,
            explanation=result.explanation,
            status=MatchStatus.ACTIVE
        )
        self.db.session.add(match)
        self.db.session.commit()

        self.logger.info(
            f"Compatibility {user_id}->{target_user_id}: {result.compatibility_score} (match {match.id})"
        )
        return result

    def get_user_matches(self, user_id, status: Optional[str] = None):
        query = Match.query.filter(
            or_(Match.user1_id == user_id, Match.user2_id == user_id)
        )
        if status:
            try:
                query = query.filter(Match.status == MatchStatus(status))
            except ValueError:
                raise ValidationError(f'Invalid match status: {status}')
        return query.order_by(Match.created_at.desc(), Match.id.desc()).all()

    def archive_match(self, user_id, match_id) -> Match:
        match = self.db.session.get(Match, match_id)
        if not match:
            raise NotFoundError('Match not found')

        if user_id not in (match.user1_id, match.user2_id):
            raise ForbiddenError('Not a participant in this match')

        match.status = MatchStatus.ARCHIVED
        self.db.session.commit()
        return match
