"""
Tests for page geometry and the mixed-orientation remap.
"""

# PIP3 modules
import pytest

# local repo modules
import pdf_stamp_placement.orientation as orientation
import pdf_stamp_placement.placement as placement


PORTRAIT = orientation.page_geometry_from_mm(210.0, 297.0)
LANDSCAPE = orientation.page_geometry_from_mm(297.0, 210.0)


#============================================
def test_page_geometry_applies_page_rotation() -> None:
	"""
	A portrait media box turned 90 degrees displays as landscape.
	"""
	geometry = orientation.page_geometry_from_mm(210.0, 297.0, 90)
	assert (geometry.width_mm, geometry.height_mm) == (297.0, 210.0)
	assert geometry.is_landscape
	assert geometry.rotation_angle == 90
	assert orientation.page_geometry_from_mm(210.0, 297.0, -90).rotation_angle == 270
	assert orientation.page_geometry_from_mm(210.0, 297.0, 450).rotation_angle == 90


#============================================
def test_page_geometry_from_points() -> None:
	geometry = orientation.page_geometry_from_points(595.2756, 841.8898)
	assert geometry.width_mm == pytest.approx(210.0, abs=1e-3)
	assert geometry.height_mm == pytest.approx(297.0, abs=1e-3)
	assert geometry.is_portrait


#============================================
def test_mixed_detection() -> None:
	"""
	Only landscape pages in a document with portrait pages are mixed.
	"""
	mixed_doc = [PORTRAIT, LANDSCAPE, PORTRAIT]
	assert orientation.is_mixed_orientation(mixed_doc, LANDSCAPE)
	assert not orientation.is_mixed_orientation(mixed_doc, PORTRAIT)
	assert not orientation.is_mixed_orientation([LANDSCAPE, LANDSCAPE], LANDSCAPE)


#============================================
@pytest.mark.parametrize("x,y", [(0.0, 0.0), (120.0, 190.0), (170.0, 5.0), (33.3, 250.0)])
def test_mixed_inverse(x: float, y: float) -> None:
	"""
	The mixed remap followed by its inverse returns the stored position.
	"""
	stored = placement.Position(x, y)
	forward = orientation.remap_to_mixed(stored, 40.0)
	back = orientation.remap_from_mixed(forward, 40.0)
	assert back.x == pytest.approx(x)
	assert back.y == pytest.approx(y)


#============================================
def test_portrait_landscape_portrait_scenario() -> None:
	"""
	A stamp at (120, 190) lands at (190, 50) on the landscape page.
	"""
	geometries = [PORTRAIT, LANDSCAPE, PORTRAIT]
	stored = placement.Position(120.0, 190.0)
	portrait_frame = orientation.resolve_page_frame(geometries, 1)
	landscape_frame = orientation.resolve_page_frame(geometries, 2)
	assert not portrait_frame.mixed
	assert landscape_frame.mixed

	on_portrait = portrait_frame.to_page(stored, 40.0)
	assert (on_portrait.x, on_portrait.y) == (120.0, 190.0)
	on_landscape = landscape_frame.to_page(stored, 40.0)
	assert on_landscape.x == pytest.approx(190.0)
	assert on_landscape.y == pytest.approx(50.0)
	back = landscape_frame.to_stored(on_landscape, 40.0)
	assert back.x == pytest.approx(120.0)
	assert back.y == pytest.approx(190.0)


#============================================
def test_frame_scale_uses_reference_edge() -> None:
	"""
	A4 pages of either orientation map one document mm to one page mm.
	"""
	geometries = [PORTRAIT, LANDSCAPE]
	assert orientation.resolve_page_frame(geometries, 1).scale == pytest.approx(1.0)
	assert orientation.resolve_page_frame(geometries, 2).scale == pytest.approx(1.0)
	a3 = orientation.page_geometry_from_mm(297.0, 420.0)
	frame = orientation.resolve_page_frame([a3], 1)
	assert frame.scale == pytest.approx(297.0 / 210.0)
	assert frame.pt_per_mm() == pytest.approx(72.0 / 25.4 * 297.0 / 210.0)


#============================================
def test_frame_out_of_range() -> None:
	with pytest.raises(IndexError):
		orientation.resolve_page_frame([PORTRAIT], 2)
