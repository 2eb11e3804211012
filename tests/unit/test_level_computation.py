"""Level computation tests: 100 XP per level, starting at level 1."""

import pytest

from tq.gamification.leveling import (
    RANKS,
    XP_PER_LEVEL,
    compute_level,
    level_for,
    progress_in_level,
    rank_for_level,
    xp_for_level,
    xp_to_next_level,
)


class TestLevelComputation:
    """Level is a pure function of experience."""

    def test_level_1_at_zero_xp(self):
        result = compute_level(0)
        assert result["level"] == 1
        assert result["title"] == "Initiate"

    def test_level_boundary_99_xp(self):
        """99 XP is still level 1."""
        assert level_for(99) == 1

    def test_level_2_at_100_xp(self):
        result = compute_level(100)
        assert result["level"] == 2
        assert result["title"] == "Mind Warrior"

    def test_level_3_at_250_xp(self):
        assert level_for(250) == 3

    def test_negative_experience_is_level_1(self):
        assert level_for(-40) == 1

    def test_xp_into_level_calculation(self):
        result = compute_level(150)  # 50 XP into level 2
        assert result["xp_into_level"] == 50
        assert result["xp_for_level"] == XP_PER_LEVEL
        assert result["xp_to_next_level"] == 50

    def test_xp_into_level_at_boundary(self):
        result = compute_level(100)  # Exactly at level 2 boundary
        assert result["xp_into_level"] == 0
        assert result["xp_to_next_level"] == 100

    def test_next_level_and_title(self):
        result = compute_level(180)
        assert result["next_level"] == 3
        assert result["next_title"] == "Apprentice of Calm"


class TestLevelHelpers:
    """Threshold helpers used by events and payloads."""

    @pytest.mark.parametrize(("level", "min_xp"), [(1, 0), (2, 100), (5, 400), (10, 900)])
    def test_xp_for_level(self, level, min_xp):
        assert xp_for_level(level) == min_xp

    def test_xp_for_level_roundtrip(self):
        for level in range(1, 30):
            assert level_for(xp_for_level(level)) == level

    def test_progress_wraps_every_level(self):
        assert progress_in_level(199) == 99
        assert progress_in_level(200) == 0

    def test_xp_to_next_level_never_zero(self):
        for xp in range(0, 350, 7):
            assert 1 <= xp_to_next_level(xp) <= XP_PER_LEVEL


class TestRanks:
    """Rank titles decorate levels; levels past the last rank keep the top title."""

    def test_ranks_are_ordered(self):
        levels = [r["level"] for r in RANKS]
        assert levels == sorted(levels)
        assert levels[0] == 1

    def test_every_rank_has_title_and_description(self):
        for rank in RANKS:
            assert rank["title"]
            assert rank["description"]

    def test_level_beyond_last_rank(self):
        assert rank_for_level(42)["title"] == RANKS[-1]["title"]

    def test_rank_below_one_falls_back_to_first(self):
        assert rank_for_level(0) == RANKS[0]
