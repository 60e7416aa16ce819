"""
Tests for straddle slice widths, clip insets and vertical placement.
"""

# PIP3 modules
import pytest

# local repo modules
import pdf_stamp_placement.straddle as straddle


#============================================
@pytest.mark.parametrize("total_pages", [1, 2, 3, 7, 13])
@pytest.mark.parametrize("stamp_width_px", [1, 10, 472, 1181])
def test_slices_partition_stamp(total_pages: int, stamp_width_px: int) -> None:
	"""
	Slice widths add up to the stamp width and do not overlap.
	"""
	slices = straddle.compute_straddle_slices(total_pages, stamp_width_px)
	assert sum(part.slice_width_px for part in slices) == stamp_width_px
	cursor = 0
	for part in slices:
		assert part.crop_left_px == cursor
		cursor += part.slice_width_px
	for part in slices[:-1]:
		assert part.slice_width_px == stamp_width_px // total_pages


#============================================
@pytest.mark.parametrize("total_pages", [1, 2, 3, 5])
def test_clip_insets_partition(total_pages: int) -> None:
	"""
	Visible clip ranges tile [0, 100] exactly.
	"""
	slices = straddle.compute_straddle_slices(total_pages, 400)
	visible_end = 0.0
	for part in slices:
		assert part.clip_start == pytest.approx(visible_end)
		visible_end = 100.0 - part.clip_end
	assert visible_end == pytest.approx(100.0)


#============================================
def test_three_page_scenario() -> None:
	"""
	A 40 mm stamp over three pages shows thirds, left to right.
	"""
	slices = [straddle.compute_straddle_slice(page, 3, 40.0) for page in (1, 2, 3)]
	assert slices[0].stamp_width_px == 472
	assert [part.crop_left_px for part in slices] == [0, 157, 314]
	assert [part.slice_width_px for part in slices] == [157, 157, 158]
	assert slices[0].clip_path == "inset(0 66.6667% 0 0%)"
	assert slices[1].clip_start == pytest.approx(100.0 / 3.0)
	assert slices[1].clip_end == pytest.approx(100.0 / 3.0)
	assert slices[2].clip_end == pytest.approx(0.0)
	assert [part.translate_x for part in slices] == pytest.approx([50.0 - 100.0 / 3.0, 50.0 - 200.0 / 3.0, -50.0])


#============================================
def test_slice_fractions() -> None:
	part = straddle.split_stamp_width(2, 4, 400)
	assert part.start_fraction == pytest.approx(0.25)
	assert part.width_fraction == pytest.approx(0.25)
	assert part.width_of(80.0) == pytest.approx(20.0)


#============================================
def test_narrow_stamp_leaves_empty_slices() -> None:
	"""
	With fewer pixels than pages, only the last page carries the stamp.
	"""
	slices = straddle.compute_straddle_slices(5, 3)
	assert [part.slice_width_px for part in slices] == [0, 0, 0, 0, 3]


#============================================
def test_out_of_range_inputs_are_clamped() -> None:
	part = straddle.split_stamp_width(9, 3, 300)
	assert part.page_number == 3
	part = straddle.split_stamp_width(1, 0, 300)
	assert part.total_pages == 1
	assert part.slice_width_px == 300


#============================================
def test_straddle_top() -> None:
	"""
	An unset straddle position centers the stamp vertically.
	"""
	assert straddle.straddle_top_mm(140.0, 297.0, 40.0) == 140.0
	assert straddle.straddle_top_mm(None, 297.0, 40.0) == pytest.approx(128.5)


#============================================
@pytest.mark.parametrize("total_pages", [2, 3, 7, 13])
@pytest.mark.parametrize("stamp_width_px", [472, 1181])
def test_pixel_slices_follow_clip_fractions(total_pages: int, stamp_width_px: int) -> None:
	"""
	Pixel slices track the 1/N clip width; only the last one takes the remainder.
	"""
	slices = straddle.compute_straddle_slices(total_pages, stamp_width_px)
	exact_px = stamp_width_px / total_pages
	for part in slices[:-1]:
		assert abs(part.slice_width_px - exact_px) < 1.0
		visible = (100.0 - part.clip_start - part.clip_end) / 100.0 * stamp_width_px
		assert visible == pytest.approx(exact_px)
	last = slices[-1]
	assert last.slice_width_px == stamp_width_px - (total_pages - 1) * (stamp_width_px // total_pages)
	assert last.crop_left_px + last.slice_width_px == stamp_width_px
