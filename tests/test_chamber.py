"""
Tests for the chamber occupancy grid.
"""

import numpy as np
import pytest

from rockfall.core.config_loader import load_config
from rockfall.core.shape_catalog import ShapeCatalog, Shape
from rockfall.core.chamber import Chamber, Tile, INITIAL_CAPACITY
from rockfall.core.drop_cycle import FallingPiece


DOT = Shape(index=0, name="dot", width=1, height=1, cells=((0, 0),))


@pytest.fixture
def config():
    return load_config()


@pytest.fixture
def catalog(config):
    return ShapeCatalog(config)


@pytest.fixture
def chamber(config):
    return Chamber(config)


def place(chamber, shape, col, row):
    chamber.settle(FallingPiece(shape=shape, col=col, row=row))


class TestChamberBasics:
    """Test an empty chamber and its bounds."""

    def test_empty_chamber(self, chamber):
        """A new chamber is 7 wide with no rows and no height."""
        assert chamber.width == 7
        assert chamber.stored_rows == 0
        assert chamber.highest_settled_row == 0
        assert chamber.rock_count == 0

    def test_rows_above_storage_are_air(self, chamber):
        """Unstored rows read as air."""
        assert not chamber.occupied(3, 100)
        assert chamber.tile_at(3, 100) is Tile.AIR

    def test_column_out_of_range(self, chamber):
        """Columns outside [0, width) are a programming error."""
        with pytest.raises(IndexError):
            chamber.occupied(7, 0)
        with pytest.raises(IndexError):
            chamber.occupied(-1, 0)

    def test_negative_row(self, chamber):
        """Rows below the floor are a programming error."""
        with pytest.raises(IndexError):
            chamber.occupied(0, -1)


class TestEnsureHeight:
    """Test grid growth."""

    def test_grows_with_air(self, chamber):
        """New rows are addressable and empty."""
        chamber.ensure_height(5)
        assert chamber.stored_rows == 5
        assert all(not chamber.occupied(c, r) for c in range(7) for r in range(5))

    def test_never_shrinks(self, chamber):
        """A smaller request leaves storage unchanged."""
        chamber.ensure_height(10)
        chamber.ensure_height(3)
        assert chamber.stored_rows == 10

    def test_growth_keeps_rock(self, chamber):
        """Growing past the initial capacity keeps existing rock."""
        place(chamber, DOT, 4, 2)
        chamber.ensure_height(INITIAL_CAPACITY * 3 + 1)
        assert chamber.stored_rows == INITIAL_CAPACITY * 3 + 1
        assert chamber.occupied(4, 2)
        assert chamber.rock_count == 1

    def test_height_is_not_storage(self, chamber):
        """Growing storage does not raise the stack."""
        chamber.ensure_height(20)
        assert chamber.highest_settled_row == 0


class TestSettle:
    """Test fusing pieces into the stack."""

    def test_dash_on_floor(self, chamber, catalog):
        """A dash at column 2 covers columns [2, 6) of row 0."""
        place(chamber, catalog[0], 2, 0)
        assert chamber.highest_settled_row == 1
        assert [chamber.occupied(c, 0) for c in range(7)] == [
            False, False, True, True, True, True, False
        ]

    def test_height_tracks_maximum(self, chamber, catalog):
        """A lower piece does not lower the stack height."""
        place(chamber, catalog[3], 0, 0)  # stick, rows 0-3
        place(chamber, catalog[0], 2, 0)  # dash, row 0
        assert chamber.highest_settled_row == 4

    def test_overlap_rejected(self, chamber, catalog):
        """Settling onto rock violates the no-overlap invariant."""
        place(chamber, catalog[4], 1, 0)
        with pytest.raises(ValueError, match="already rock"):
            place(chamber, DOT, 2, 1)
        # Nothing from the rejected piece was written
        assert chamber.rock_count == 4

    def test_out_of_bounds_rejected(self, chamber, catalog):
        """Pieces outside the walls or below the floor are rejected."""
        with pytest.raises(IndexError):
            place(chamber, catalog[0], 4, 0)
        with pytest.raises(IndexError):
            place(chamber, DOT, 0, -1)

    def test_tile_at(self, chamber):
        """Settled cells read back as rock."""
        place(chamber, DOT, 6, 0)
        assert chamber.tile_at(6, 0) is Tile.ROCK
        assert chamber.tile_at(5, 0) is Tile.AIR


class TestFits:
    """Test placement checks."""

    def test_walls(self, chamber, catalog):
        """Shapes must stay between the walls."""
        dash = catalog[0]
        assert chamber.fits(dash, 0, 0)
        assert chamber.fits(dash, 3, 0)
        assert not chamber.fits(dash, 4, 0)
        assert not chamber.fits(dash, -1, 0)

    def test_floor(self, chamber, catalog):
        """Shapes may not go below row 0."""
        assert not chamber.fits(catalog[4], 2, -1)

    def test_above_storage(self, chamber, catalog):
        """Rows above the stored height are free."""
        assert chamber.fits(catalog[3], 0, 50)

    def test_rock_blocks(self, chamber, catalog):
        """A settled cell blocks any shape covering it."""
        place(chamber, DOT, 1, 1)
        plus = catalog[1]
        assert not chamber.fits(plus, 0, 0)   # centre on (1, 1)
        assert chamber.fits(plus, 2, 0)

    def test_plus_corner_is_free(self, chamber, catalog):
        """A plus can rest with rock tucked under its empty corner."""
        place(chamber, DOT, 0, 0)
        assert chamber.fits(catalog[1], 0, 0)


class TestSurfaceProfile:
    """Test column tops and the surface profile."""

    def test_empty_profile(self, chamber):
        """An empty chamber has a flat zero profile."""
        assert chamber.surface_profile() == (0,) * 7

    def test_profile_relative_to_top(self, chamber, catalog):
        """Depths are measured from the stack height."""
        place(chamber, catalog[3], 0, 0)  # stick, height 4
        place(chamber, DOT, 3, 0)
        assert chamber.surface_profile() == (0, 4, 4, 3, 4, 4, 4)
        np.testing.assert_array_equal(chamber.column_heights(), [4, 0, 0, 1, 0, 0, 0])

    def test_rows_view_is_read_only(self, chamber):
        """The grid view cannot be written through."""
        place(chamber, DOT, 0, 0)
        view = chamber.rows_view()
        assert view.shape == (1, 7)
        with pytest.raises(ValueError):
            view[0, 1] = True

    def test_reset(self, chamber, catalog):
        """Reset empties the chamber."""
        place(chamber, catalog[0], 0, 0)
        chamber.reset()
        assert chamber.highest_settled_row == 0
        assert chamber.stored_rows == 0
        assert not chamber.occupied(0, 0)
