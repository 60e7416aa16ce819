"""
Preview adapter between on-screen gestures and the placement model.

Screen boxes are derived from the model on every render; gestures are turned
back into millimeters at the moment they end. The adapter never stores pixel
positions of its own, so rendering the same model twice gives the same boxes.
"""

# Standard Library
import dataclasses
import logging

# local repo modules
import pdf_stamp_placement as psp
import pdf_stamp_placement.config
import pdf_stamp_placement.geometry
import pdf_stamp_placement.orientation
import pdf_stamp_placement.placement
import pdf_stamp_placement.straddle
import pdf_stamp_placement.units


PageFrame = psp.orientation.PageFrame
PageGeometry = psp.orientation.PageGeometry
Placement = psp.placement.Placement
PlacementInstance = psp.placement.PlacementInstance
PlacementModel = psp.placement.PlacementModel
Position = psp.placement.Position

DEFAULT_ZOOM = psp.config.DEFAULT_ZOOM
MIN_ZOOM = psp.config.MIN_ZOOM
MAX_ZOOM = psp.config.MAX_ZOOM
ZOOM_STEP = psp.config.ZOOM_STEP
PREVIEW_RENDER_SCALE = psp.config.PREVIEW_RENDER_SCALE
REFERENCE_EDGE_MM = psp.config.REFERENCE_EDGE_MM
ROTATION_STEP_DEG = psp.config.ROTATION_STEP_DEG
RASTER_DPI = psp.config.RASTER_DPI

logger = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True)
class ScreenBox:
	placement_id: int
	page_number: int
	left: float
	top: float
	width: float
	height: float
	image_left: float
	image_top: float
	image_width: float
	image_height: float
	rotation: float
	mixed: bool
	selected: bool


@dataclasses.dataclass(frozen=True)
class StraddleBox:
	config_id: int
	page_number: int
	left: float
	top: float
	width: float
	height: float
	clip_start: float
	clip_end: float
	clip_path: str
	visible_left: float
	visible_width: float


#============================================
def clamp_zoom(zoom: float) -> float:
	"""
	Keep a zoom factor inside the preview limits.

	Args:
		zoom: Requested zoom.

	Returns:
		Zoom rounded to two decimals within [MIN_ZOOM, MAX_ZOOM].
	"""
	return round(max(MIN_ZOOM, min(MAX_ZOOM, zoom)), 2)


class PreviewAdapter:
	"""
	Translate preview gestures into placement model mutations.

	Args:
		model: Placement model shown by the preview.
		geometries: Page geometry for every page, in page order.
		zoom: Interactive zoom factor.
		render_scale: Fixed scale at which pages are drawn on screen.
		reference_length: Short edge of the portrait reference page in mm.
	"""

	def __init__(
		self,
		model: PlacementModel,
		geometries: list[PageGeometry],
		zoom: float = DEFAULT_ZOOM,
		render_scale: float = PREVIEW_RENDER_SCALE,
		reference_length: float = REFERENCE_EDGE_MM,
	) -> None:
		self.model = model
		self.geometries = list(geometries)
		self.zoom = clamp_zoom(zoom)
		self.render_scale = render_scale
		self.reference_length = reference_length

	#============================================
	def set_zoom(self, zoom: float) -> float:
		self.zoom = clamp_zoom(zoom)
		return self.zoom

	#============================================
	def zoom_in(self) -> float:
		return self.set_zoom(self.zoom + ZOOM_STEP)

	#============================================
	def zoom_out(self) -> float:
		return self.set_zoom(self.zoom - ZOOM_STEP)

	#============================================
	def reset_zoom(self) -> float:
		return self.set_zoom(DEFAULT_ZOOM)

	@property
	def page_count(self) -> int:
		return len(self.geometries)

	#============================================
	def frame(self, page_number: int) -> PageFrame:
		return psp.orientation.resolve_page_frame(self.geometries, page_number, self.reference_length)

	#============================================
	def px_per_mm(self, page_number: int) -> float:
		"""
		Preview pixels per document millimeter on a page.

		Args:
			page_number: 1-based page number.

		Returns:
			Pixel ratio for the current zoom.
		"""
		return self.frame(page_number).px_per_mm(self.zoom, self.render_scale)

	#============================================
	def page_size_px(self, page_number: int) -> tuple[float, float]:
		geometry = self.geometries[page_number - 1]
		return (
			psp.units.mm_to_px(geometry.width_mm, self.zoom, self.render_scale),
			psp.units.mm_to_px(geometry.height_mm, self.zoom, self.render_scale),
		)

	#============================================
	def _instance(self, placement_id: int, action: str) -> PlacementInstance | None:
		instance = self.model.instances.get(placement_id)
		if instance is None:
			logger.warning("Ignoring %s for unknown instance %s", action, placement_id)
			return None
		if instance.page_number < 1 or instance.page_number > self.page_count:
			logger.warning("Ignoring %s for instance %s on missing page %s", action, placement_id, instance.page_number)
			return None
		return instance

	#============================================
	def render_box(self, placement_id: int) -> ScreenBox | None:
		"""
		Compute the on-screen box of an instance.

		Args:
			placement_id: Instance id.

		Returns:
			ScreenBox in preview pixels relative to the page's top-left corner.
		"""
		instance = self._instance(placement_id, "render")
		if instance is None:
			return None
		frame = self.frame(instance.page_number)
		ratio = frame.px_per_mm(self.zoom, self.render_scale)
		page_position = frame.to_page(instance.position, instance.container_width)
		bounds = instance.bounds
		return ScreenBox(
			placement_id=instance.placement_id,
			page_number=instance.page_number,
			left=page_position.x * ratio,
			top=page_position.y * ratio,
			width=instance.container_width * ratio,
			height=instance.container_height * ratio,
			# negative offsets are expected: the unrotated image may overhang the box
			image_left=bounds.offset_x * ratio,
			image_top=bounds.offset_y * ratio,
			image_width=instance.base_width * ratio,
			image_height=instance.base_height * ratio,
			rotation=instance.rotation,
			mixed=frame.mixed,
			selected=self.model.selected_id == instance.placement_id,
		)

	#============================================
	def render_page(self, page_number: int) -> list[ScreenBox]:
		boxes = []
		for instance in self.model.instances_for_page(page_number):
			box = self.render_box(instance.placement_id)
			if box is not None:
				boxes.append(box)
		return boxes

	#============================================
	def render_straddle(self, config_id: int, page_number: int) -> StraddleBox | None:
		"""
		Compute the clipped straddle stamp shown on one page.

		Args:
			config_id: Straddle config id.
			page_number: 1-based page number.

		Returns:
			StraddleBox, or None when the config is not a straddle stamp.
		"""
		config = self.model.configs.get(config_id)
		if config is None or not config.is_straddle:
			return None
		if page_number < 1 or page_number > self.page_count:
			return None
		frame = self.frame(page_number)
		ratio = frame.px_per_mm(self.zoom, self.render_scale)
		stamp_width = config.container_width * ratio
		stamp_height = config.container_height * ratio
		page_width, _page_height = self.page_size_px(page_number)
		part = psp.straddle.compute_straddle_slice(
			page_number, self.page_count, config.container_width, RASTER_DPI,
		)
		start = part.clip_start / 100.0
		end = 1.0 - part.clip_end / 100.0
		left = page_width - end * stamp_width
		page_height_mm = frame.geometry.height_mm / frame.scale
		top_mm = psp.straddle.straddle_top_mm(config.straddle_y, page_height_mm, config.container_height)
		return StraddleBox(
			config_id=config.placement_id,
			page_number=page_number,
			left=left,
			top=top_mm * ratio,
			width=stamp_width,
			height=stamp_height,
			clip_start=part.clip_start,
			clip_end=part.clip_end,
			clip_path=part.clip_path,
			visible_left=left + start * stamp_width,
			visible_width=(end - start) * stamp_width,
		)

	#============================================
	def _clamp_to_page(self, frame: PageFrame, position: Position, width: float, height: float) -> Position:
		page_width = frame.geometry.width_mm / frame.scale
		page_height = frame.geometry.height_mm / frame.scale
		max_x = max(0.0, page_width - width)
		max_y = max(0.0, page_height - height)
		return Position(
			max(0.0, min(max_x, position.x)),
			max(0.0, min(max_y, position.y)),
		)

	#============================================
	def end_drag(self, placement_id: int, delta_x_px: float, delta_y_px: float) -> Placement | None:
		"""
		Commit a finished drag.

		The pixel delta moves the rotated bounding box on the page it was
		dragged on; the result is mapped back to the stored position.

		Args:
			placement_id: Instance id.
			delta_x_px: Horizontal drag distance in preview pixels.
			delta_y_px: Vertical drag distance in preview pixels.

		Returns:
			The updated instance, or None.
		"""
		instance = self._instance(placement_id, "drag")
		if instance is None:
			return None
		frame = self.frame(instance.page_number)
		ratio = frame.px_per_mm(self.zoom, self.render_scale)
		page_position = frame.to_page(instance.position, instance.container_width)
		moved = Position(
			page_position.x + delta_x_px / ratio,
			page_position.y + delta_y_px / ratio,
		)
		moved = self._clamp_to_page(frame, moved, instance.container_width, instance.container_height)
		stored = frame.to_stored(moved, instance.container_width)
		return self.model.update_position(placement_id, stored.x, stored.y)

	#============================================
	def end_resize(
		self,
		placement_id: int,
		new_width_px: float,
		delta_x_px: float = 0.0,
		delta_y_px: float = 0.0,
	) -> Placement | None:
		"""
		Commit a finished resize from the new on-screen box width.

		Args:
			placement_id: Instance id.
			new_width_px: Width of the rotated bounding box after resizing.
			delta_x_px: Movement of the box's left edge, if the handle moved it.
			delta_y_px: Movement of the box's top edge, if the handle moved it.

		Returns:
			The updated instance, or None.
		"""
		instance = self._instance(placement_id, "resize")
		if instance is None:
			return None
		ratio = self.px_per_mm(instance.page_number)
		container_width = new_width_px / ratio
		size = psp.geometry.size_for_container_width(
			container_width,
			self.model.aspect_ratio_for(instance),
			instance.rotation,
		)
		self.model.update_size(placement_id, size)
		if delta_x_px or delta_y_px:
			return self.end_drag(placement_id, delta_x_px, delta_y_px)
		return instance

	#============================================
	def rotate(self, placement_id: int, step: float = ROTATION_STEP_DEG) -> Placement | None:
		return self.model.rotate_step(placement_id, step)

	#============================================
	def drop_instance(self, config_id: int, page_number: int) -> PlacementInstance | None:
		"""
		Drop a config onto a page of the preview.

		Args:
			config_id: Config id.
			page_number: 1-based page number.

		Returns:
			New instance, or None.
		"""
		if page_number < 1 or page_number > self.page_count:
			logger.warning("Ignoring drop on missing page %s", page_number)
			return None
		return self.model.add_instance(config_id, page_number)
