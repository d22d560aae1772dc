import pytest

from rackplan.lib.geometry import (
    distance,
    intervals_overlap,
    pixel_offset_to_u,
    rotate_point,
    snap_to_grid,
    translate_point,
    u_range_end,
    u_to_pixel_offset,
)


class TestSnapToGrid:
    def test_rounds_to_nearest_multiple(self):
        assert snap_to_grid(23, 37, 10) == (20, 40)

    def test_halfway_rounds_up(self):
        assert snap_to_grid(5, 15, 10) == (10, 20)

    def test_negative_coordinates(self):
        assert snap_to_grid(-4, -6, 10) == (0, -10)

    def test_disabled_returns_input(self):
        assert snap_to_grid(23.5, 37.2, 10, enabled=False) == (23.5, 37.2)

    def test_non_positive_grid_returns_input(self):
        assert snap_to_grid(23, 37, 0) == (23, 37)

    def test_already_on_grid(self):
        assert snap_to_grid(60, 120, 20) == (60, 120)


class TestRackCoordinates:
    def test_top_slot_has_zero_offset(self):
        assert u_to_pixel_offset(12, 12, 20) == 0

    def test_bottom_slot_offset(self):
        assert u_to_pixel_offset(1, 12, 20) == 220

    @pytest.mark.parametrize("u", range(1, 13))
    def test_offset_of_slot_maps_back_to_slot(self, u):
        # a point just inside the slot's top edge
        offset = u_to_pixel_offset(u, 12, 20) + 1
        assert pixel_offset_to_u(offset, 12, 20) == u

    def test_offsets_outside_rack_are_clamped(self):
        assert pixel_offset_to_u(-50, 12, 20) == 12
        assert pixel_offset_to_u(500, 12, 20) == 1


class TestIntervals:
    def test_touching_ranges_overlap(self):
        assert intervals_overlap(3, 4, 4, 5)

    def test_adjacent_ranges_do_not_overlap(self):
        assert not intervals_overlap(3, 4, 5, 6)
        assert not intervals_overlap(5, 6, 3, 4)

    def test_containment_overlaps(self):
        assert intervals_overlap(1, 10, 4, 5)

    def test_range_end(self):
        assert u_range_end(3, 2) == 4
        assert u_range_end(7, 1) == 7


def test_translate_and_distance():
    assert translate_point((1, 2), 3, -4) == (4, -2)
    assert distance((0, 0), (3, 4)) == 5


def test_rotate_point_quarter_turn():
    x, y = rotate_point((1, 0), (0, 0), 90)
    assert x == pytest.approx(0)
    assert y == pytest.approx(1)
