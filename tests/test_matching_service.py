import pytest

from trustnest.errors import ForbiddenError, NotFoundError, ValidationError
from trustnest.models.match import Match, MatchStatus


@pytest.fixture
def paired_profiles(user, other_user, make_profile):
    make_profile(user, budget_min=500, budget_max=1000, sleep_schedule='flexible', cleanliness_level=4,
                 smoking_preference='no_smoking', drinking_preference='occasional', pets_allowed=True)
    make_profile(other_user, budget_min=550, budget_max=950, sleep_schedule='flexible', cleanliness_level=4,
                 smoking_preference='no_smoking', drinking_preference='occasional', pets_allowed=True)
    return user, other_user


class TestCalculateCompatibility:
    def test_persists_a_match(self, services, paired_profiles):
        user, other_user = paired_profiles
        result = services.matching.calculate_compatibility(user.id, other_user.id)

        match = Match.query.one()
        assert match.compatibility_score == result.compatibility_score == 100
        assert match.user1_id == user.id
        assert match.user2_id == other_user.id
        assert match.status is MatchStatus.ACTIVE

    def test_appends_instead_of_upserting(self, services, paired_profiles):
        user, other_user = paired_profiles
        services.matching.calculate_compatibility(user.id, other_user.id)
        services.matching.calculate_compatibility(user.id, other_user.id)
        services.matching.calculate_compatibility(other_user.id, user.id)

        assert Match.query.count() == 3

    def test_missing_profile_is_not_found(self, services, user, other_user, make_profile):
        make_profile(user, cleanliness_level=3)
        with pytest.raises(NotFoundError):
            services.matching.calculate_compatibility(user.id, other_user.id)
        assert Match.query.count() == 0

    def test_self_comparison_is_rejected(self, services, user, make_profile):
        make_profile(user)
        with pytest.raises(ValidationError):
            services.matching.calculate_compatibility(user.id, user.id)


class TestMatchHistory:
    def test_matches_from_both_sides(self, services, paired_profiles):
        user, other_user = paired_profiles
        services.matching.calculate_compatibility(user.id, other_user.id)
        services.matching.calculate_compatibility(other_user.id, user.id)

        matches = services.matching.get_user_matches(user.id)

        assert len(matches) == 2
        assert matches[0].id > matches[1].id

    def test_archive(self, services, paired_profiles, make_user):
        user, other_user = paired_profiles
        services.matching.calculate_compatibility(user.id, other_user.id)
        match = Match.query.one()

        with pytest.raises(ForbiddenError):
            services.matching.archive_match(make_user().id, match.id)

        services.matching.archive_match(other_user.id, match.id)

        assert match.status is MatchStatus.ARCHIVED
        assert services.matching.get_user_matches(user.id, status='active') == []
        assert len(services.matching.get_user_matches(user.id, status='archived')) == 1

    def test_bad_status_filter(self, services, user):
        with pytest.raises(ValidationError):
            services.matching.get_user_matches(user.id, status='liked')
