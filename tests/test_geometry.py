"""
Tests for rotated bounds, rotation normalization and size clamping.
"""

# Standard Library
import math

# PIP3 modules
import pytest

# local repo modules
import pdf_stamp_placement.geometry as geometry


#============================================
@pytest.mark.parametrize("width,height", [(40.0, 40.0), (40.0, 24.0), (10.0, 100.0)])
def test_rotated_bounds_identity(width: float, height: float) -> None:
	"""
	No rotation leaves the box unchanged with zero offsets.
	"""
	bounds = geometry.compute_rotated_bounds(width, height, 0.0)
	assert bounds.width == pytest.approx(width)
	assert bounds.height == pytest.approx(height)
	assert bounds.offset_x == pytest.approx(0.0)
	assert bounds.offset_y == pytest.approx(0.0)


#============================================
def test_rotated_bounds_symmetry() -> None:
	"""
	Rotating by theta and by 360 - theta gives the same box.
	"""
	for theta in range(0, 361, 7):
		forward = geometry.compute_rotated_bounds(40.0, 24.0, theta)
		backward = geometry.compute_rotated_bounds(40.0, 24.0, 360 - theta)
		assert forward.width == pytest.approx(backward.width, abs=1e-9)
		assert forward.height == pytest.approx(backward.height, abs=1e-9)
		assert forward.offset_x == pytest.approx(backward.offset_x, abs=1e-9)
		assert forward.offset_y == pytest.approx(backward.offset_y, abs=1e-9)


#============================================
def test_rotated_bounds_quarter_turn_swaps() -> None:
	"""
	A quarter turn swaps width and height.
	"""
	bounds = geometry.compute_rotated_bounds(40.0, 24.0, 90.0)
	assert bounds.width == pytest.approx(24.0)
	assert bounds.height == pytest.approx(40.0)
	assert bounds.offset_x == pytest.approx(-8.0)
	assert bounds.offset_y == pytest.approx(8.0)


#============================================
def test_rotated_bounds_45_degrees() -> None:
	"""
	A square turned 45 degrees grows by sqrt(2).
	"""
	bounds = geometry.compute_rotated_bounds(40.0, 40.0, 45.0)
	assert bounds.width == pytest.approx(40.0 * math.sqrt(2.0))
	assert bounds.height == pytest.approx(40.0 * math.sqrt(2.0))


#============================================
def test_normalize_rotation() -> None:
	"""
	Angles reduce into [0, 360) and non-finite values become 0.
	"""
	assert geometry.normalize_rotation(0.0) == 0.0
	assert geometry.normalize_rotation(360.0) == 0.0
	assert geometry.normalize_rotation(365.0) == pytest.approx(5.0)
	assert geometry.normalize_rotation(-90.0) == pytest.approx(270.0)
	assert geometry.normalize_rotation(-1e-18) == 0.0
	assert geometry.normalize_rotation(float("nan")) == 0.0
	assert geometry.normalize_rotation(float("inf")) == 0.0


#============================================
def test_clamp_size() -> None:
	"""
	Sizes clamp to 10-100 mm and invalid values use the default.
	"""
	assert geometry.clamp_size(40.0) == 40.0
	assert geometry.clamp_size(2.0) == 10.0
	assert geometry.clamp_size(-5.0) == 10.0
	assert geometry.clamp_size(500.0) == 100.0
	assert geometry.clamp_size(float("nan")) == 40.0


#============================================
def test_base_dimensions_longest_edge() -> None:
	"""
	The size is the longest edge whatever the aspect ratio.
	"""
	assert geometry.base_dimensions(40.0, 1.0) == (40.0, 40.0)
	width, height = geometry.base_dimensions(40.0, 2.0)
	assert (width, height) == (40.0, 20.0)
	width, height = geometry.base_dimensions(40.0, 0.5)
	assert (width, height) == (20.0, 40.0)
	assert geometry.base_dimensions(40.0, 0.0) == (40.0, 40.0)


#============================================
@pytest.mark.parametrize("rotation", [0.0, 30.0, 90.0, 135.0, 271.0])
def test_size_for_container_width_inverts_bounds(rotation: float) -> None:
	"""
	The size found for a box width reproduces that width.
	"""
	aspect = 1.0 / 0.6
	size = geometry.size_for_container_width(55.0, aspect, rotation)
	width, height = geometry.base_dimensions(size, aspect)
	bounds = geometry.compute_rotated_bounds(width, height, rotation)
	assert bounds.width == pytest.approx(55.0)
