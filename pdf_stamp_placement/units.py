"""
Unit conversion between document millimeters, PDF points and screen pixels.

Every conversion factor in the package is derived here. Preview and PDF output
share these functions so a placement drawn on screen and the one written to
the file cannot drift apart.
"""

# local repo modules
import pdf_stamp_placement as psp
import pdf_stamp_placement.config


MM_PER_INCH = psp.config.MM_PER_INCH
POINTS_PER_INCH = psp.config.POINTS_PER_INCH
PREVIEW_RENDER_SCALE = psp.config.PREVIEW_RENDER_SCALE

POINTS_PER_MM = POINTS_PER_INCH / MM_PER_INCH


#============================================
def mm_to_pt(mm: float) -> float:
	"""
	Convert millimeters to PDF points.

	Args:
		mm: Length in millimeters.

	Returns:
		Length in points.
	"""
	return mm * POINTS_PER_MM


#============================================
def pt_to_mm(pt: float) -> float:
	"""
	Convert PDF points to millimeters.

	Args:
		pt: Length in points.

	Returns:
		Length in millimeters.
	"""
	return pt / POINTS_PER_MM


#============================================
def px_per_mm(zoom: float = 1.0, render_scale: float = PREVIEW_RENDER_SCALE) -> float:
	"""
	Compute the preview pixel density for one millimeter.

	The preview draws a page at one pixel per point, multiplied by the
	interactive zoom and the fixed render scale used to fit pages on screen.

	Args:
		zoom: Interactive zoom factor.
		render_scale: Fixed page render scale of the preview.

	Returns:
		Pixels per millimeter.
	"""
	return POINTS_PER_MM * zoom * render_scale


#============================================
def mm_to_px(mm: float, zoom: float = 1.0, render_scale: float = PREVIEW_RENDER_SCALE) -> float:
	"""
	Convert millimeters to preview pixels.

	Args:
		mm: Length in millimeters.
		zoom: Interactive zoom factor.
		render_scale: Fixed page render scale of the preview.

	Returns:
		Length in preview pixels.
	"""
	return mm * px_per_mm(zoom, render_scale)


#============================================
def px_to_mm(px: float, zoom: float = 1.0, render_scale: float = PREVIEW_RENDER_SCALE) -> float:
	"""
	Convert preview pixels to millimeters.

	Args:
		px: Length in preview pixels.
		zoom: Interactive zoom factor.
		render_scale: Fixed page render scale of the preview.

	Returns:
		Length in millimeters.
	"""
	return px / px_per_mm(zoom, render_scale)


#============================================
def mm_to_raster_px(mm: float, dpi: int) -> int:
	"""
	Convert millimeters to a whole number of raster pixels at a given DPI.

	Args:
		mm: Length in millimeters.
		dpi: Raster resolution in dots per inch.

	Returns:
		Pixel count, at least 1.
	"""
	return max(1, int(round(mm / MM_PER_INCH * dpi)))
