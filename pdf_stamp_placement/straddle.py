"""
Straddle stamp slicing.

A straddle stamp crosses the right edge of every page. Page n of N shows the
n-th vertical slice of the stamp, flush against its right edge, so the stacked
pages reassemble one continuous seal.
"""

# Standard Library
import dataclasses

# local repo modules
import pdf_stamp_placement as psp
import pdf_stamp_placement.config
import pdf_stamp_placement.units


RASTER_DPI = psp.config.RASTER_DPI


@dataclasses.dataclass(frozen=True)
class StraddleSlice:
	page_number: int
	total_pages: int
	clip_start: float
	clip_end: float
	translate_x: float
	crop_left_px: int
	slice_width_px: int
	stamp_width_px: int

	@property
	def clip_path(self) -> str:
		return f"inset(0 {self.clip_end:g}% 0 {self.clip_start:g}%)"

	@property
	def start_fraction(self) -> float:
		return self.crop_left_px / self.stamp_width_px

	@property
	def width_fraction(self) -> float:
		return self.slice_width_px / self.stamp_width_px

	def width_of(self, stamp_length: float) -> float:
		"""
		Scale this slice's share of the stamp to another unit.

		Args:
			stamp_length: Full stamp width in points, millimeters or pixels.

		Returns:
			Slice width in the same unit.
		"""
		return stamp_length * self.width_fraction


#============================================
def split_stamp_width(page_number: int, total_pages: int, stamp_width_px: int) -> StraddleSlice:
	"""
	Compute the slice of a stamp that one page shows.

	Every page but the last gets floor(width / pages) pixels; the last page
	absorbs the rounding remainder so the slices cover the stamp exactly.

	Args:
		page_number: 1-based page number. Clamped into the document.
		total_pages: Page count, at least 1.
		stamp_width_px: Full stamp width in pixels.

	Returns:
		StraddleSlice for the page.
	"""
	total_pages = max(1, int(total_pages))
	page_number = max(1, min(total_pages, int(page_number)))
	stamp_width_px = max(1, int(stamp_width_px))

	part_width_px = stamp_width_px // total_pages
	crop_left_px = (page_number - 1) * part_width_px
	slice_width_px = part_width_px
	if page_number == total_pages:
		slice_width_px = stamp_width_px - crop_left_px

	# preview clips use exact fractions; the pixel crop floors and the last
	# page takes the remainder, so the last slice may run wider than 1/N
	clip_start = (page_number - 1) / total_pages * 100.0
	clip_end = (1.0 - page_number / total_pages) * 100.0
	translate_x = 50.0 - (page_number / total_pages) * 100.0
	return StraddleSlice(
		page_number=page_number,
		total_pages=total_pages,
		clip_start=clip_start,
		clip_end=clip_end,
		translate_x=translate_x,
		crop_left_px=crop_left_px,
		slice_width_px=slice_width_px,
		stamp_width_px=stamp_width_px,
	)


#============================================
def compute_straddle_slice(
	page_number: int,
	total_pages: int,
	stamp_size_mm: float,
	dpi: int = RASTER_DPI,
) -> StraddleSlice:
	"""
	Compute the slice for a stamp given in millimeters.

	Args:
		page_number: 1-based page number.
		total_pages: Page count.
		stamp_size_mm: Nominal stamp width in millimeters.
		dpi: Raster resolution used to cut the stamp.

	Returns:
		StraddleSlice for the page.
	"""
	stamp_width_px = psp.units.mm_to_raster_px(stamp_size_mm, dpi)
	return split_stamp_width(page_number, total_pages, stamp_width_px)


#============================================
def compute_straddle_slices(total_pages: int, stamp_width_px: int) -> list[StraddleSlice]:
	"""
	Compute the slices for every page, left to right.

	Args:
		total_pages: Page count.
		stamp_width_px: Full stamp width in pixels.

	Returns:
		One StraddleSlice per page.
	"""
	total_pages = max(1, int(total_pages))
	return [
		split_stamp_width(page_number, total_pages, stamp_width_px)
		for page_number in range(1, total_pages + 1)
	]


#============================================
def straddle_top_mm(straddle_y: float | None, page_height_mm: float, stamp_height_mm: float) -> float:
	"""
	Distance from the page top to the straddle stamp.

	Args:
		straddle_y: Configured distance, or None to center the stamp.
		page_height_mm: Page height in millimeters.
		stamp_height_mm: Stamp height in millimeters.

	Returns:
		Top edge in millimeters.
	"""
	if straddle_y is None:
		return page_height_mm / 2.0 - stamp_height_mm / 2.0
	return straddle_y
