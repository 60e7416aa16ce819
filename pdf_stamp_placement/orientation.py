"""
Page orientation normalization.

Positions are authored against a portrait reference page whose short edge is
the reference length (210 mm, the A4 short edge). A landscape page inside a
document that also has portrait pages is "mixed": stored positions are turned
by 90 degrees onto it so the placement lands in the analogous visual spot.

The same PageFrame is used by the preview and by the PDF writer.
"""

# Standard Library
import dataclasses

# local repo modules
import pdf_stamp_placement as psp
import pdf_stamp_placement.config
import pdf_stamp_placement.placement
import pdf_stamp_placement.units


Position = psp.placement.Position

REFERENCE_EDGE_MM = psp.config.REFERENCE_EDGE_MM


@dataclasses.dataclass(frozen=True)
class PageGeometry:
	"""
	Displayed page size in millimeters, after the page's own /Rotate.
	"""
	width_mm: float
	height_mm: float
	is_landscape: bool
	rotation_angle: int = 0

	@property
	def is_portrait(self) -> bool:
		return self.width_mm < self.height_mm


#============================================
def normalize_page_rotation(rotation_angle: int | float | None) -> int:
	"""
	Snap a page /Rotate value to 0, 90, 180 or 270.

	Args:
		rotation_angle: Raw rotation value.

	Returns:
		Rotation in quarter turns, expressed in degrees.
	"""
	if rotation_angle is None:
		return 0
	quarter_turns = int(round(float(rotation_angle) / 90.0))
	return (quarter_turns % 4) * 90


#============================================
def page_geometry_from_mm(width_mm: float, height_mm: float, rotation_angle: int = 0) -> PageGeometry:
	"""
	Build page geometry from an unrotated page size.

	Args:
		width_mm: Media box width in millimeters.
		height_mm: Media box height in millimeters.
		rotation_angle: The page /Rotate value.

	Returns:
		PageGeometry describing the page as displayed.
	"""
	rotation = normalize_page_rotation(rotation_angle)
	if rotation in (90, 270):
		width_mm, height_mm = height_mm, width_mm
	return PageGeometry(
		width_mm=width_mm,
		height_mm=height_mm,
		is_landscape=width_mm > height_mm,
		rotation_angle=rotation,
	)


#============================================
def page_geometry_from_points(width_pt: float, height_pt: float, rotation_angle: int = 0) -> PageGeometry:
	"""
	Build page geometry from a PDF page size in points.

	Args:
		width_pt: Media box width in points.
		height_pt: Media box height in points.
		rotation_angle: The page /Rotate value.

	Returns:
		PageGeometry describing the page as displayed.
	"""
	return page_geometry_from_mm(
		psp.units.pt_to_mm(width_pt),
		psp.units.pt_to_mm(height_pt),
		rotation_angle,
	)


#============================================
def document_has_portrait(geometries: list[PageGeometry]) -> bool:
	return any(geometry.is_portrait for geometry in geometries)


#============================================
def is_mixed_orientation(geometries: list[PageGeometry], page: PageGeometry) -> bool:
	"""
	Decide whether a page is a landscape page among portrait pages.

	Args:
		geometries: Every page of the document.
		page: The page being rendered or embedded.

	Returns:
		True when the page needs the mixed-orientation remap.
	"""
	return document_has_portrait(geometries) and page.is_landscape


#============================================
def remap_to_mixed(position: Position, box_width: float, reference_length: float = REFERENCE_EDGE_MM) -> Position:
	"""
	Turn a portrait-authored position onto a mixed landscape page.

	Args:
		position: Stored top-left corner in millimeters.
		box_width: Width of the placement's bounding box.
		reference_length: Short edge of the portrait reference page.

	Returns:
		Top-left corner on the landscape page.
	"""
	return Position(
		x=position.y,
		y=reference_length - position.x - box_width,
	)


#============================================
def remap_from_mixed(position: Position, box_width: float, reference_length: float = REFERENCE_EDGE_MM) -> Position:
	"""
	Inverse of remap_to_mixed.

	Args:
		position: Top-left corner on the landscape page.
		box_width: Width of the placement's bounding box.
		reference_length: Short edge of the portrait reference page.

	Returns:
		Stored portrait-space position.
	"""
	return Position(
		x=reference_length - box_width - position.y,
		y=position.x,
	)


@dataclasses.dataclass(frozen=True)
class PageFrame:
	page_number: int
	geometry: PageGeometry
	mixed: bool
	reference_length_mm: float = REFERENCE_EDGE_MM

	@property
	def reference_edge_mm(self) -> float:
		# landscape pages, mixed or uniform, measure against their height
		if self.geometry.is_landscape:
			return self.geometry.height_mm
		return self.geometry.width_mm

	@property
	def scale(self) -> float:
		"""
		Page millimeters per document millimeter.
		"""
		if self.reference_length_mm <= 0.0:
			return 1.0
		return self.reference_edge_mm / self.reference_length_mm

	def px_per_mm(self, zoom: float, render_scale: float) -> float:
		return psp.units.mm_to_px(self.scale, zoom, render_scale)

	def pt_per_mm(self) -> float:
		return psp.units.mm_to_pt(self.scale)

	def to_page(self, stored: Position, box_width: float) -> Position:
		"""
		Map a stored position onto this page, in document millimeters.
		"""
		if self.mixed:
			return remap_to_mixed(stored, box_width, self.reference_length_mm)
		return Position(stored.x, stored.y)

	def to_stored(self, page_position: Position, box_width: float) -> Position:
		"""
		Map a position on this page back to the stored position.
		"""
		if self.mixed:
			return remap_from_mixed(page_position, box_width, self.reference_length_mm)
		return Position(page_position.x, page_position.y)


#============================================
def resolve_page_frame(
	geometries: list[PageGeometry],
	page_number: int,
	reference_length: float = REFERENCE_EDGE_MM,
) -> PageFrame:
	"""
	Resolve the orientation frame for one page of a document.

	Args:
		geometries: Every page of the document, in page order.
		page_number: 1-based page number.
		reference_length: Short edge of the portrait reference page.

	Returns:
		PageFrame for the page.
	"""
	if page_number < 1 or page_number > len(geometries):
		raise IndexError(f"Page {page_number} is outside the document")
	geometry = geometries[page_number - 1]
	return PageFrame(
		page_number=page_number,
		geometry=geometry,
		mixed=is_mixed_orientation(geometries, geometry),
		reference_length_mm=reference_length,
	)
