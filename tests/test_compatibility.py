"""
Tests for the pure compatibility scoring function.

No app or database needed: compute_compatibility works on any objects that
expose the preference attributes.
"""
from types import SimpleNamespace

import pytest

from trustnest.services.matching_service import compute_compatibility, NO_STRONG_MATCH

PREFERENCE_FIELDS = (
    'budget_min', 'budget_max', 'sleep_schedule', 'cleanliness_level',
    'smoking_preference', 'drinking_preference', 'pets_allowed',
)


def profile(**fields):
    values = {name: None for name in PREFERENCE_FIELDS}
    values.update(fields)
    return SimpleNamespace(**values)


PROFILE_A = profile(budget_min=500, budget_max=1000, sleep_schedule='flexible', cleanliness_level=4,
                    smoking_preference='no_smoking', drinking_preference='occasional', pets_allowed=True)
PROFILE_B = profile(budget_min=550, budget_max=950, sleep_schedule='flexible', cleanliness_level=4,
                    smoking_preference='no_smoking', drinking_preference='occasional', pets_allowed=True)
PROFILE_C = profile(budget_min=500, budget_max=700, sleep_schedule='early_bird', cleanliness_level=5,
                    smoking_preference='no_smoking', drinking_preference='no_drinking', pets_allowed=False)
PROFILE_D = profile(budget_min=1500, budget_max=2000, sleep_schedule='night_owl', cleanliness_level=1,
                    smoking_preference='regular', drinking_preference='regular', pets_allowed=True)


class TestScenarios:
    def test_similar_profiles(self):
        result = compute_compatibility(PROFILE_A, PROFILE_B)

        assert result.schedule_match == 100
        assert result.cleanliness_match == 100
        assert result.lifestyle_match == 100
        assert result.pets_match == 100
        assert result.budget_match > 80
        assert result.compatibility_score > 80

    def test_similar_profiles_exact_values(self):
        # Both budgets share the 750 midpoint
        result = compute_compatibility(PROFILE_A, PROFILE_B)

        assert result.budget_match == 100
        assert result.compatibility_score == 100

    def test_opposite_profiles(self):
        result = compute_compatibility(PROFILE_C, PROFILE_D)

        assert result.compatibility_score < 50
        assert result.budget_match < 50
        assert result.schedule_match < 100

    def test_opposite_profiles_exact_values(self):
        result = compute_compatibility(PROFILE_C, PROFILE_D)

        assert result.budget_match == 0
        assert result.schedule_match == 50
        assert result.cleanliness_match == 20
        assert result.lifestyle_match == 0
        assert result.pets_match == 50
        # 0 + 10 + 4 + 0 + 7.5 = 21.5, rounded half up
        assert result.compatibility_score == 22
        assert result.explanation == NO_STRONG_MATCH

    def test_weighted_half_rounds_up(self):
        left = profile(sleep_schedule='early_bird', cleanliness_level=1, smoking_preference='regular',
                       drinking_preference='occasional', pets_allowed=True)
        right = profile(sleep_schedule='night_owl', cleanliness_level=3, smoking_preference='no_smoking',
                        drinking_preference='occasional', pets_allowed=False)

        result = compute_compatibility(left, right)

        assert result.cleanliness_match == 60
        # 25 + 10 + 12 + 10 + 7.5 = 64.5
        assert result.compatibility_score == 65


class TestProperties:
    def test_identical_profiles_score_100(self):
        assert compute_compatibility(PROFILE_C, PROFILE_C).compatibility_score == 100
        assert compute_compatibility(PROFILE_D, PROFILE_D).compatibility_score == 100

    def test_unset_profiles_score_100_everywhere(self):
        result = compute_compatibility(profile(), profile())

        assert result.budget_match == 100
        assert result.schedule_match == 100
        assert result.cleanliness_match == 100
        assert result.lifestyle_match == 100
        assert result.pets_match == 100
        assert result.compatibility_score == 100

    @pytest.mark.parametrize('a, b', [
        (PROFILE_A, PROFILE_B),
        (PROFILE_C, PROFILE_D),
        (profile(budget_min=400, budget_max=600), profile(budget_min=450, budget_max=700)),
    ])
    def test_budget_is_symmetric(self, a, b):
        assert compute_compatibility(a, b).budget_match == compute_compatibility(b, a).budget_match

    @pytest.mark.parametrize('left, right, expected', [
        (3, 5, 60),
        (5, 3, 60),
        (4, 4, 100),
        (1, 5, 20),
    ])
    def test_cleanliness_distance(self, left, right, expected):
        result = compute_compatibility(profile(cleanliness_level=left), profile(cleanliness_level=right))
        assert result.cleanliness_match == expected

    def test_score_stays_in_range(self):
        profiles = [PROFILE_A, PROFILE_B, PROFILE_C, PROFILE_D, profile(),
                    profile(budget_min=0, budget_max=0), profile(budget_min=0, budget_max=10000)]
        for a in profiles:
            for b in profiles:
                assert 0 <= compute_compatibility(a, b).compatibility_score <= 100


class TestBudget:
    def test_missing_bound_skips_dimension(self):
        result = compute_compatibility(profile(budget_min=500), profile(budget_min=5000, budget_max=6000))
        assert result.budget_match == 100

    def test_zero_budgets_count_as_set(self):
        result = compute_compatibility(profile(budget_min=0, budget_max=0),
                                       profile(budget_min=0, budget_max=0))
        assert result.budget_match == 100

    def test_zero_against_nonzero_budget(self):
        result = compute_compatibility(profile(budget_min=0, budget_max=0),
                                       profile(budget_min=900, budget_max=1100))
        assert result.budget_match == 0

    def test_partial_overlap(self):
        # midpoints 500 and 550: diff 50, max_diff 110
        result = compute_compatibility(profile(budget_min=400, budget_max=600),
                                       profile(budget_min=450, budget_max=650))
        assert result.budget_match == 55


class TestLifestyleAndPets:
    def test_half_lifestyle_match(self):
        result = compute_compatibility(
            profile(smoking_preference='no_smoking', drinking_preference='regular'),
            profile(smoking_preference='no_smoking', drinking_preference='occasional')
        )
        assert result.lifestyle_match == 50

    def test_unset_versus_set_lifestyle_is_a_mismatch(self):
        result = compute_compatibility(profile(), profile(smoking_preference='regular'))
        assert result.lifestyle_match == 50

    def test_pets_mismatch(self):
        result = compute_compatibility(profile(pets_allowed=True), profile(pets_allowed=False))
        assert result.pets_match == 50

    def test_unset_schedule_is_neutral(self):
        result = compute_compatibility(profile(sleep_schedule='night_owl'), profile())
        assert result.schedule_match == 100


class TestExplanation:
    def test_lists_strong_dimensions_in_order(self):
        result = compute_compatibility(PROFILE_A, PROFILE_B)
        assert result.explanation == (
            'Budget compatibility, Sleep schedule match, Cleanliness preferences aligned, '
            'Lifestyle preferences match, Pet preferences compatible'
        )

    def test_threshold_is_strictly_above_80(self):
        # Cleanliness diff 1 -> exactly 80, not listed
        result = compute_compatibility(
            profile(cleanliness_level=4, pets_allowed=True, sleep_schedule='flexible'),
            profile(cleanliness_level=3, pets_allowed=False, sleep_schedule='night_owl',
                    smoking_preference='regular')
        )
        assert result.cleanliness_match == 80
        assert 'Cleanliness' not in result.explanation
