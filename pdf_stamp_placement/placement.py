"""
Placement model shared by the stamp and sign features.

A PlacementConfig is a reusable template for one asset. A PlacementInstance
is a frozen copy of a config placed on one page and edited on its own
afterwards. The stamp feature keeps one instance per selected page; the sign
feature lets the user drop any number of instances.

All lengths are document millimeters. A placement position is always the
top-left corner of the rotated bounding box, never the corner of the
unrotated asset.
"""

# Standard Library
import dataclasses
import itertools
import logging
import math
import random

# local repo modules
import pdf_stamp_placement as psp
import pdf_stamp_placement.assets
import pdf_stamp_placement.config
import pdf_stamp_placement.geometry


Asset = psp.assets.Asset
RotatedBounds = psp.geometry.RotatedBounds

DEFAULT_SIZE_MM = psp.config.DEFAULT_SIZE_MM
DEFAULT_POSITION_MM = psp.config.DEFAULT_POSITION_MM
DEFAULT_STRADDLE_Y_MM = psp.config.DEFAULT_STRADDLE_Y_MM
MIN_STRADDLE_Y_MM = psp.config.MIN_STRADDLE_Y_MM
MAX_STRADDLE_Y_MM = psp.config.MAX_STRADDLE_Y_MM
ROTATION_STEP_DEG = psp.config.ROTATION_STEP_DEG
SIGNATURE_ASPECT = psp.config.SIGNATURE_ASPECT
STAMP_MODE = psp.config.STAMP_MODE
SIGN_MODE = psp.config.SIGN_MODE

logger = logging.getLogger(__name__)


@dataclasses.dataclass
class Position:
	x: float
	y: float


#============================================
def default_position() -> Position:
	"""
	Build the default placement position.

	Returns:
		Position at DEFAULT_POSITION_MM.
	"""
	return Position(DEFAULT_POSITION_MM[0], DEFAULT_POSITION_MM[1])


@dataclasses.dataclass
class Placement:
	placement_id: int = 0
	size: float = DEFAULT_SIZE_MM
	rotation: float = 0.0
	position: Position = dataclasses.field(default_factory=default_position)
	base_width: float = 0.0
	base_height: float = 0.0
	container_width: float = 0.0
	container_height: float = 0.0

	@property
	def bounds(self) -> RotatedBounds:
		return psp.geometry.compute_rotated_bounds(self.base_width, self.base_height, self.rotation)

	@property
	def center(self) -> tuple[float, float]:
		return (
			self.position.x + self.container_width / 2.0,
			self.position.y + self.container_height / 2.0,
		)


@dataclasses.dataclass
class PlacementConfig(Placement):
	"""
	Reusable template. Its position is the default position handed to new
	instances; straddle stamps use straddle_y instead.
	"""
	asset_id: int = 0
	selected_pages: list[int] = dataclasses.field(default_factory=list)
	is_straddle: bool = False
	straddle_y: float | None = DEFAULT_STRADDLE_Y_MM
	random_angle: bool = False

	@property
	def default_position(self) -> Position:
		return self.position


@dataclasses.dataclass
class PlacementInstance(Placement):
	config_id: int = 0
	page_number: int = 1


#============================================
def clamp_straddle_y(value: float | None) -> float | None:
	"""
	Clamp a straddle vertical position to the page range.

	Args:
		value: Distance from the page top in millimeters, or None to center.

	Returns:
		Clamped value, or None.
	"""
	if value is None:
		return None
	if not math.isfinite(value):
		return DEFAULT_STRADDLE_Y_MM
	return max(MIN_STRADDLE_Y_MM, min(MAX_STRADDLE_Y_MM, float(value)))


class PlacementModel:
	"""
	Session state for one feature: assets, configs, instances and selection.

	Mutations on ids that no longer exist are ignored and logged. The UI can
	deliver a drag end after the user removed the same placement.
	"""

	def __init__(self, mode: str = STAMP_MODE, rng: random.Random | None = None) -> None:
		if mode not in (STAMP_MODE, SIGN_MODE):
			raise ValueError(f"Unknown placement mode: {mode}")
		self.mode = mode
		self.assets: dict[int, Asset] = {}
		self.configs: dict[int, PlacementConfig] = {}
		self.instances: dict[int, PlacementInstance] = {}
		self.selected_id: int | None = None
		self._rng = rng or random.Random()
		self._ids = itertools.count(1)

	#============================================
	def _next_id(self) -> int:
		return next(self._ids)

	#============================================
	def add_asset(self, asset: Asset) -> Asset:
		"""
		Register an asset under a fresh id.

		Args:
			asset: Decoded asset.

		Returns:
			The stored asset carrying its new id.
		"""
		stored = dataclasses.replace(asset, asset_id=self._next_id())
		self.assets[stored.asset_id] = stored
		return stored

	#============================================
	def remove_asset(self, asset_id: int) -> None:
		"""
		Forget an asset. Configs that reference it stay and fail at generation.

		Args:
			asset_id: Asset id.
		"""
		if self.assets.pop(asset_id, None) is None:
			logger.warning("Ignoring removal of unknown asset %s", asset_id)

	#============================================
	def aspect_ratio_for(self, placement: Placement) -> float:
		"""
		Aspect ratio (width / height) of the asset behind a placement.

		Args:
			placement: Config or instance.

		Returns:
			Asset aspect ratio, or the feature default when the asset is gone.
		"""
		config = self.config_for(placement)
		asset = None
		if config is not None:
			asset = self.assets.get(config.asset_id)
		if asset is not None:
			return asset.aspect_ratio
		if self.mode == SIGN_MODE:
			return 1.0 / SIGNATURE_ASPECT
		return 1.0

	#============================================
	def config_for(self, placement: Placement) -> PlacementConfig | None:
		if isinstance(placement, PlacementConfig):
			return placement
		if isinstance(placement, PlacementInstance):
			return self.configs.get(placement.config_id)
		return None

	#============================================
	def asset_for(self, placement: Placement) -> Asset | None:
		config = self.config_for(placement)
		if config is None:
			return None
		return self.assets.get(config.asset_id)

	#============================================
	def get(self, placement_id: int) -> Placement | None:
		"""
		Find a config or instance by id.

		Args:
			placement_id: Config or instance id.

		Returns:
			The placement, or None.
		"""
		if placement_id in self.configs:
			return self.configs[placement_id]
		return self.instances.get(placement_id)

	#============================================
	def _lookup(self, placement_id: int, action: str) -> Placement | None:
		placement = self.get(placement_id)
		if placement is None:
			logger.warning("Ignoring %s for unknown placement %s", action, placement_id)
		return placement

	#============================================
	def _apply_geometry(self, placement: Placement) -> None:
		"""
		Recompute base and container dimensions from size and rotation.

		Args:
			placement: Config or instance to update in place.
		"""
		aspect = self.aspect_ratio_for(placement)
		base_width, base_height = psp.geometry.base_dimensions(placement.size, aspect)
		bounds = psp.geometry.compute_rotated_bounds(base_width, base_height, placement.rotation)
		placement.base_width = base_width
		placement.base_height = base_height
		placement.container_width = bounds.width
		placement.container_height = bounds.height

	#============================================
	def create_config(
		self,
		asset: Asset,
		size: float = DEFAULT_SIZE_MM,
		rotation: float = 0.0,
		position: Position | None = None,
		is_straddle: bool = False,
		straddle_y: float | None = DEFAULT_STRADDLE_Y_MM,
		random_angle: bool = False,
	) -> PlacementConfig:
		"""
		Create a config for an asset and select it for editing.

		Args:
			asset: Asset to place. Registered first if the model does not know it.
			size: Longest-edge size in millimeters.
			rotation: Rotation in degrees.
			position: Default top-left of the rotated bounding box.
			is_straddle: Whether the config is a straddle stamp.
			straddle_y: Straddle distance from the page top, None to center.
			random_angle: Give new page placements a random rotation.

		Returns:
			New PlacementConfig.
		"""
		if self.assets.get(asset.asset_id) is not asset:
			asset = self.add_asset(asset)
		if position is None:
			position = default_position()
		config = PlacementConfig(
			placement_id=self._next_id(),
			size=psp.geometry.clamp_size(size),
			rotation=psp.geometry.normalize_rotation(rotation),
			position=Position(float(position.x), float(position.y)),
			asset_id=asset.asset_id,
			is_straddle=bool(is_straddle),
			straddle_y=clamp_straddle_y(straddle_y),
			random_angle=bool(random_angle),
		)
		self._apply_geometry(config)
		self.configs[config.placement_id] = config
		self.selected_id = config.placement_id
		return config

	#============================================
	def update_rotation(self, placement_id: int, rotation: float) -> Placement | None:
		"""
		Rotate a placement about its visual center.

		The old and new rotated bounding boxes share a center, so only the
		top-left corner moves.

		Args:
			placement_id: Config or instance id.
			rotation: New rotation in degrees.

		Returns:
			The updated placement, or None for an unknown id.
		"""
		placement = self._lookup(placement_id, "rotation update")
		if placement is None:
			return None
		new_rotation = psp.geometry.normalize_rotation(rotation)
		old_bounds = psp.geometry.compute_rotated_bounds(
			placement.base_width, placement.base_height, placement.rotation,
		)
		new_bounds = psp.geometry.compute_rotated_bounds(
			placement.base_width, placement.base_height, new_rotation,
		)
		center_x, center_y = psp.geometry.bounds_center(
			placement.position.x, placement.position.y, old_bounds,
		)
		placement.rotation = new_rotation
		placement.position = Position(
			center_x - new_bounds.width / 2.0,
			center_y - new_bounds.height / 2.0,
		)
		placement.container_width = new_bounds.width
		placement.container_height = new_bounds.height
		return placement

	#============================================
	def rotate_step(self, placement_id: int, step: float = ROTATION_STEP_DEG) -> Placement | None:
		"""
		Rotate a placement by one button step.

		Args:
			placement_id: Config or instance id.
			step: Degrees to add.

		Returns:
			The updated placement, or None for an unknown id.
		"""
		placement = self._lookup(placement_id, "rotation step")
		if placement is None:
			return None
		return self.update_rotation(placement_id, placement.rotation + step)

	#============================================
	def update_position(self, placement_id: int, x: float, y: float) -> Placement | None:
		"""
		Replace the top-left corner of the rotated bounding box.

		Args:
			placement_id: Config or instance id.
			x: New left edge in millimeters.
			y: New top edge in millimeters.

		Returns:
			The updated placement, or None for an unknown id.
		"""
		placement = self._lookup(placement_id, "position update")
		if placement is None:
			return None
		if not (math.isfinite(x) and math.isfinite(y)):
			logger.warning("Ignoring non-finite position (%s, %s) for %s", x, y, placement_id)
			return placement
		placement.position = Position(float(x), float(y))
		return placement

	#============================================
	def update_size(self, placement_id: int, size: float) -> Placement | None:
		"""
		Replace the longest-edge size and recompute the boxes.

		Args:
			placement_id: Config or instance id.
			size: New size in millimeters, clamped to the valid range.

		Returns:
			The updated placement, or None for an unknown id.
		"""
		placement = self._lookup(placement_id, "size update")
		if placement is None:
			return None
		placement.size = psp.geometry.clamp_size(size)
		self._apply_geometry(placement)
		return placement

	#============================================
	def update_straddle(
		self,
		config_id: int,
		is_straddle: bool | None = None,
		straddle_y: float | None = None,
	) -> PlacementConfig | None:
		"""
		Change the straddle settings of a config.

		Args:
			config_id: Config id.
			is_straddle: New straddle flag, None to keep.
			straddle_y: New vertical position in millimeters, None to keep.

		Returns:
			The updated config, or None for an unknown id.
		"""
		config = self.configs.get(config_id)
		if config is None:
			logger.warning("Ignoring straddle update for unknown config %s", config_id)
			return None
		if is_straddle is not None:
			config.is_straddle = bool(is_straddle)
		if straddle_y is not None:
			config.straddle_y = clamp_straddle_y(straddle_y)
		if config.is_straddle and config.straddle_y is None:
			config.straddle_y = DEFAULT_STRADDLE_Y_MM
		return config

	#============================================
	def set_random_angle(self, config_id: int, enabled: bool) -> PlacementConfig | None:
		config = self.configs.get(config_id)
		if config is None:
			logger.warning("Ignoring random angle update for unknown config %s", config_id)
			return None
		config.random_angle = bool(enabled)
		return config

	#============================================
	def add_instance(
		self,
		config_id: int,
		page_number: int,
		rotation: float | None = None,
	) -> PlacementInstance | None:
		"""
		Place a frozen copy of a config on a page and select it.

		Args:
			config_id: Source config id.
			page_number: 1-based page number.
			rotation: Optional rotation override for the new copy.

		Returns:
			New PlacementInstance, or None for an unknown config.
		"""
		config = self.configs.get(config_id)
		if config is None:
			logger.warning("Ignoring new instance for unknown config %s", config_id)
			return None
		instance = PlacementInstance(
			placement_id=self._next_id(),
			size=config.size,
			rotation=config.rotation,
			position=Position(config.position.x, config.position.y),
			config_id=config.placement_id,
			page_number=int(page_number),
		)
		if rotation is not None:
			instance.rotation = psp.geometry.normalize_rotation(rotation)
		self._apply_geometry(instance)
		if rotation is not None:
			# turn the copy about the config's center
			center_x, center_y = config.center
			instance.position = Position(
				center_x - instance.container_width / 2.0,
				center_y - instance.container_height / 2.0,
			)
		self.instances[instance.placement_id] = instance
		self.selected_id = instance.placement_id
		return instance

	#============================================
	def select_pages(self, config_id: int, pages: list[int]) -> PlacementConfig | None:
		"""
		Set the pages a stamp config is placed on.

		Newly selected pages get an instance copied from the config, with a
		random rotation when the config asks for one. Deselected pages lose
		their instance.

		Args:
			config_id: Stamp config id.
			pages: 1-based page numbers.

		Returns:
			The updated config, or None.
		"""
		if self.mode != STAMP_MODE:
			logger.warning("Page selection is only used by the stamp feature")
			return None
		config = self.configs.get(config_id)
		if config is None:
			logger.warning("Ignoring page selection for unknown config %s", config_id)
			return None
		selected = sorted({int(page) for page in pages if int(page) >= 1})
		for instance in list(self.instances.values()):
			if instance.config_id == config_id and instance.page_number not in selected:
				self.remove_instance(instance.placement_id)
		for page_number in selected:
			if self.page_instance(config_id, page_number) is not None:
				continue
			rotation = None
			if config.random_angle:
				rotation = float(self._rng.randrange(360))
			self.add_instance(config_id, page_number, rotation=rotation)
		config.selected_pages = selected
		self.selected_id = config_id
		return config

	#============================================
	def toggle_page(self, config_id: int, page_number: int) -> PlacementConfig | None:
		config = self.configs.get(config_id)
		if config is None:
			logger.warning("Ignoring page toggle for unknown config %s", config_id)
			return None
		pages = list(config.selected_pages)
		if page_number in pages:
			pages.remove(page_number)
		else:
			pages.append(page_number)
		return self.select_pages(config_id, pages)

	#============================================
	def select_all_pages(self, config_id: int, page_count: int) -> PlacementConfig | None:
		return self.select_pages(config_id, list(range(1, page_count + 1)))

	#============================================
	def page_instance(self, config_id: int, page_number: int) -> PlacementInstance | None:
		"""
		Find the instance of a config on a page.

		Args:
			config_id: Config id.
			page_number: 1-based page number.

		Returns:
			The first matching instance, or None.
		"""
		for instance in self.instances.values():
			if instance.config_id == config_id and instance.page_number == page_number:
				return instance
		return None

	#============================================
	def remove_instance(self, instance_id: int) -> None:
		if self.instances.pop(instance_id, None) is None:
			logger.warning("Ignoring removal of unknown instance %s", instance_id)
			return
		if self.selected_id == instance_id:
			self.selected_id = None

	#============================================
	def remove_config(self, config_id: int) -> None:
		"""
		Remove a config together with the instances placed from it.

		Args:
			config_id: Config id.
		"""
		if self.configs.pop(config_id, None) is None:
			logger.warning("Ignoring removal of unknown config %s", config_id)
			return
		for instance in list(self.instances.values()):
			if instance.config_id == config_id:
				self.remove_instance(instance.placement_id)
		if self.selected_id == config_id:
			self.selected_id = None

	#============================================
	def select(self, placement_id: int | None) -> Placement | None:
		if placement_id is None:
			self.selected_id = None
			return None
		placement = self._lookup(placement_id, "selection")
		if placement is not None:
			self.selected_id = placement_id
		return placement

	#============================================
	def clear_selection(self) -> None:
		self.selected_id = None

	@property
	def selected(self) -> Placement | None:
		if self.selected_id is None:
			return None
		return self.get(self.selected_id)

	#============================================
	def instances_for_page(self, page_number: int) -> list[PlacementInstance]:
		return [
			instance for instance in self.instances.values()
			if instance.page_number == page_number
		]

	#============================================
	def instances_for_config(self, config_id: int) -> list[PlacementInstance]:
		return [
			instance for instance in self.instances.values()
			if instance.config_id == config_id
		]

	#============================================
	def straddle_configs(self) -> list[PlacementConfig]:
		return [config for config in self.configs.values() if config.is_straddle]

	#============================================
	def clear(self) -> None:
		"""
		Drop all session state when the feature is left.
		"""
		self.assets.clear()
		self.configs.clear()
		self.instances.clear()
		self.selected_id = None
