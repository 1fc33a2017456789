"""Tests for great-circle distance model."""

import pytest

from rakeplan.network import DistanceModel, distance_km, haversine_km
from rakeplan.network.distance import MIN_DISTANCE_KM


class TestHaversine:
    """Test raw great-circle distance."""

    def test_same_point_is_zero(self):
        assert haversine_km(22.0, 86.0, 22.0, 86.0) == 0.0

    def test_one_degree_of_latitude(self):
        """One degree along a meridian is 6371 * pi / 180 km."""
        assert haversine_km(22.0, 86.0, 23.0, 86.0) == pytest.approx(111.19493, rel=1e-6)

    def test_symmetric(self):
        a = haversine_km(22.5, 86.2, 19.1, 72.9)
        b = haversine_km(19.1, 72.9, 22.5, 86.2)
        assert a == pytest.approx(b)


class TestPlanningDistance:
    """Test rounded, floored planning distance."""

    def test_rounds_to_nearest_km(self):
        assert distance_km((22.0, 86.0), (23.0, 86.0)) == 111

    def test_identical_points_floored(self):
        """Zero distance is floored to avoid degenerate candidates."""
        assert distance_km((22.0, 86.0), (22.0, 86.0)) == MIN_DISTANCE_KM == 1

    def test_returns_whole_km(self):
        assert isinstance(distance_km((22.0, 86.0), (21.0, 85.0)), int)

    def test_symmetric(self):
        a = (22.0, 86.0)
        b = (20.0, 84.0)
        assert distance_km(a, b) == distance_km(b, a)


class TestDistanceModel:
    """Test memoized distance lookup."""

    def test_matches_function(self):
        model = DistanceModel()
        assert model.distance_km((22.0, 86.0), (23.0, 86.0)) == distance_km((22.0, 86.0), (23.0, 86.0))

    def test_cache_shared_by_both_directions(self):
        model = DistanceModel()
        a, b = (22.0, 86.0), (20.0, 84.0)

        first = model.distance_km(a, b)
        second = model.distance_km(b, a)

        assert first == second
        assert len(model) == 1

    def test_between_yard_and_customer(self, scenario_a_data):
        model = DistanceModel()
        yard = scenario_a_data.yards[0]
        customer = scenario_a_data.customers[0]

        assert model.between(yard, customer) == 111
