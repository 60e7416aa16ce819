"""
Rasterization and overlay page building.
"""

# Standard Library
import dataclasses
import io
import logging

# PIP3 modules
import PIL.Image
import pypdf
import reportlab.lib.utils
import reportlab.pdfgen.canvas

# local repo modules
import pdf_stamp_placement as psp
import pdf_stamp_placement.config
import pdf_stamp_placement.geometry
import pdf_stamp_placement.orientation
import pdf_stamp_placement.straddle
import pdf_stamp_placement.units


PageGeometry = psp.orientation.PageGeometry
StraddleSlice = psp.straddle.StraddleSlice

RASTER_DPI = psp.config.RASTER_DPI
DEFAULT_OPACITY = psp.config.DEFAULT_OPACITY
PROGRESS_BAR_WIDTH = psp.config.PROGRESS_BAR_WIDTH

logger = logging.getLogger(__name__)


@dataclasses.dataclass
class OverlayImage:
	"""
	One raster drawn onto an overlay page, in displayed-page points.
	"""
	image: PIL.Image.Image
	x: float
	y: float
	width: float
	height: float


#============================================
def print_progress(prefix: str, current: int, total: int) -> None:
	"""
	Print a simple progress bar.

	Args:
		prefix: Label text.
		current: Current count.
		total: Total count.
	"""
	if total <= 0:
		return
	percent = int(round((current / total) * 100.0))
	filled = int(round(PROGRESS_BAR_WIDTH * percent / 100.0))
	bar = "#" * filled + "-" * (PROGRESS_BAR_WIDTH - filled)
	print(f"{prefix} [{bar}] {current}/{total} ({percent}%)", end="\r")


#============================================
def raster_cache_key(
	asset_id: int,
	base_width_mm: float,
	base_height_mm: float,
	rotation: float,
	dpi: int = RASTER_DPI,
) -> tuple[int, int, int, float]:
	"""
	Key identifying a rotated raster.

	Args:
		asset_id: Asset id.
		base_width_mm: Unrotated width.
		base_height_mm: Unrotated height.
		rotation: Rotation in degrees.
		dpi: Raster resolution.

	Returns:
		Hashable cache key.
	"""
	return (
		asset_id,
		psp.units.mm_to_raster_px(base_width_mm, dpi),
		psp.units.mm_to_raster_px(base_height_mm, dpi),
		round(psp.geometry.normalize_rotation(rotation), 6),
	)


#============================================
def rasterize_placement(
	image: PIL.Image.Image,
	base_width_mm: float,
	base_height_mm: float,
	rotation: float,
	dpi: int = RASTER_DPI,
) -> PIL.Image.Image:
	"""
	Resize and rotate an asset onto a transparent bitmap sized to its bounds.

	Rotation is clockwise, as on screen. The rotated image is centered in
	the container, which matches the offsets of the bounds calculator.

	Args:
		image: Decoded RGBA asset image.
		base_width_mm: Unrotated width in millimeters.
		base_height_mm: Unrotated height in millimeters.
		rotation: Rotation in degrees.
		dpi: Raster resolution.

	Returns:
		RGBA image covering the rotated bounding box.
	"""
	base_width_px = psp.units.mm_to_raster_px(base_width_mm, dpi)
	base_height_px = psp.units.mm_to_raster_px(base_height_mm, dpi)
	resized = image.convert("RGBA").resize(
		(base_width_px, base_height_px),
		PIL.Image.Resampling.LANCZOS,
	)
	rotation = psp.geometry.normalize_rotation(rotation)
	if rotation == 0.0:
		return resized
	bounds = psp.geometry.compute_rotated_bounds(base_width_px, base_height_px, rotation)
	container_size = (
		max(1, int(round(bounds.width))),
		max(1, int(round(bounds.height))),
	)
	# PIL rotates counter-clockwise
	rotated = resized.rotate(-rotation, resample=PIL.Image.Resampling.BICUBIC, expand=True)
	container = PIL.Image.new("RGBA", container_size, (0, 0, 0, 0))
	left = (container_size[0] - rotated.width) // 2
	top = (container_size[1] - rotated.height) // 2
	container.paste(rotated, (left, top), rotated)
	return container


#============================================
def crop_straddle_slice(raster: PIL.Image.Image, part: StraddleSlice) -> PIL.Image.Image | None:
	"""
	Cut one page's slice out of a straddle stamp raster.

	Args:
		raster: Full rotated stamp raster.
		part: Slice computed for the raster width.

	Returns:
		Cropped image, or None when the slice is empty.
	"""
	if part.slice_width_px <= 0:
		return None
	box = (
		part.crop_left_px,
		0,
		part.crop_left_px + part.slice_width_px,
		raster.height,
	)
	return raster.crop(box)


#============================================
def draw_image_object(
	pdf: reportlab.pdfgen.canvas.Canvas,
	item: OverlayImage,
	opacity: float = DEFAULT_OPACITY,
) -> None:
	"""
	Draw a raster onto the PDF canvas with fixed opacity.

	Args:
		pdf: ReportLab canvas.
		item: Image and its box in points.
		opacity: Fill alpha used for the image.
	"""
	image_reader = reportlab.lib.utils.ImageReader(item.image)
	pdf.saveState()
	pdf.setFillAlpha(opacity)
	pdf.drawImage(
		image_reader,
		item.x,
		item.y,
		width=item.width,
		height=item.height,
		mask="auto",
		preserveAspectRatio=False,
		anchor="sw",
	)
	pdf.restoreState()


#============================================
def build_overlay_page(
	page_width: float,
	page_height: float,
	items: list[OverlayImage],
	opacity: float = DEFAULT_OPACITY,
) -> pypdf.PageObject:
	"""
	Build a transparent PDF page carrying the placed images.

	Args:
		page_width: Displayed page width in points.
		page_height: Displayed page height in points.
		items: Images to draw.
		opacity: Fill alpha for every image.

	Returns:
		PDF page object.
	"""
	buffer = io.BytesIO()
	pdf = reportlab.pdfgen.canvas.Canvas(buffer, pagesize=(page_width, page_height))
	for item in items:
		draw_image_object(pdf, item, opacity)
	pdf.showPage()
	pdf.save()
	buffer.seek(0)
	reader = pypdf.PdfReader(buffer)
	return reader.pages[0]


#============================================
def display_to_user_transform(
	rotation_angle: int,
	display_width: float,
	display_height: float,
	origin_x: float = 0.0,
	origin_y: float = 0.0,
) -> pypdf.Transformation:
	"""
	Map displayed-page coordinates into a page's own user space.

	A viewer turns a page clockwise by its /Rotate value; the overlay is drawn
	upright at the displayed size and must be turned back before merging.

	Args:
		rotation_angle: Page /Rotate value.
		display_width: Displayed page width in points.
		display_height: Displayed page height in points.
		origin_x: Media box lower-left x.
		origin_y: Media box lower-left y.

	Returns:
		pypdf Transformation.
	"""
	rotation = psp.orientation.normalize_page_rotation(rotation_angle)
	transform = pypdf.Transformation()
	if rotation == 90:
		transform = transform.rotate(90).translate(display_height, 0)
	elif rotation == 180:
		transform = transform.rotate(180).translate(display_width, display_height)
	elif rotation == 270:
		transform = transform.rotate(270).translate(0, display_width)
	return transform.translate(origin_x, origin_y)


#============================================
def read_page_geometry(page: pypdf.PageObject) -> PageGeometry:
	"""
	Read the displayed geometry of a PDF page.

	Args:
		page: pypdf page.

	Returns:
		PageGeometry in millimeters.
	"""
	mediabox = page.mediabox
	return psp.orientation.page_geometry_from_points(
		float(mediabox.width),
		float(mediabox.height),
		page.rotation,
	)


#============================================
def merge_overlay(
	page: pypdf.PageObject,
	overlay: pypdf.PageObject,
	geometry: PageGeometry,
) -> None:
	"""
	Stamp an overlay page onto a document page.

	Args:
		page: Target page, modified in place.
		overlay: Overlay built at the displayed page size.
		geometry: Displayed geometry of the target page.
	"""
	origin_x = float(page.mediabox.left)
	origin_y = float(page.mediabox.bottom)
	if geometry.rotation_angle == 0 and origin_x == 0.0 and origin_y == 0.0:
		page.merge_page(overlay)
		return
	transform = display_to_user_transform(
		geometry.rotation_angle,
		psp.units.mm_to_pt(geometry.width_mm),
		psp.units.mm_to_pt(geometry.height_mm),
		origin_x,
		origin_y,
	)
	page.merge_transformed_page(overlay, transform)
