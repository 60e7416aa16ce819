"""
Shared configuration and constants.
"""

import dataclasses


MM_PER_INCH = 25.4
POINTS_PER_INCH = 72.0
RASTER_DPI = 300
PREVIEW_RENDER_SCALE = 0.6

A4_WIDTH_MM = 210.0
A4_HEIGHT_MM = 297.0
REFERENCE_EDGE_MM = A4_WIDTH_MM

DEFAULT_SIZE_MM = 40.0
MIN_SIZE_MM = 10.0
MAX_SIZE_MM = 100.0
DEFAULT_POSITION_MM = (120.0, 190.0)
DEFAULT_STRADDLE_Y_MM = 140.0
MIN_STRADDLE_Y_MM = 0.0
MAX_STRADDLE_Y_MM = A4_HEIGHT_MM
SIGNATURE_ASPECT = 0.6

DEFAULT_OPACITY = 0.8
ROTATION_STEP_DEG = 5.0

DEFAULT_ZOOM = 1.0
MIN_ZOOM = 0.5
MAX_ZOOM = 2.0
ZOOM_STEP = 0.1

PROGRESS_BAR_WIDTH = 20

STAMP_MODE = "stamp"
SIGN_MODE = "sign"

PAGE_SIZES = {
	"A3": (297.0, 420.0),
	"A4": (210.0, 297.0),
	"A5": (148.0, 210.0),
	"B4": (250.0, 353.0),
	"B5": (176.0, 250.0),
	"16K": (184.0, 260.0),
	"Letter": (216.0, 279.0),
	"Legal": (216.0, 356.0),
	"Tabloid": (279.0, 432.0),
}
DEFAULT_PAGE_SIZE = "A4"


@dataclasses.dataclass
class GenerationSettings:
	opacity: float = DEFAULT_OPACITY
	raster_dpi: int = RASTER_DPI
	reference_edge_mm: float = REFERENCE_EDGE_MM
	render_scale: float = PREVIEW_RENDER_SCALE


#============================================
def get_page_size(name: str | None = None) -> tuple[float, float]:
	"""
	Look up a named page size.

	Args:
		name: Page size name such as "A4". Unknown names fall back to A4.

	Returns:
		Tuple of (width_mm, height_mm) in portrait orientation.
	"""
	if name is None:
		name = DEFAULT_PAGE_SIZE
	return PAGE_SIZES.get(name, PAGE_SIZES[DEFAULT_PAGE_SIZE])


#============================================
def format_page_size(name: str) -> str:
	"""
	Format a page size for display, for example "A4 (210x297mm)".

	Args:
		name: Page size name.

	Returns:
		Display string, or an empty string for unknown names.
	"""
	if name not in PAGE_SIZES:
		return ""
	width, height = PAGE_SIZES[name]
	return f"{name} ({width:g}x{height:g}mm)"
