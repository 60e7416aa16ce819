"""
Rotation bounds and size normalization for placed assets.
"""

# Standard Library
import dataclasses
import math

# local repo modules
import pdf_stamp_placement as psp
import pdf_stamp_placement.config


DEFAULT_SIZE_MM = psp.config.DEFAULT_SIZE_MM
MIN_SIZE_MM = psp.config.MIN_SIZE_MM
MAX_SIZE_MM = psp.config.MAX_SIZE_MM


@dataclasses.dataclass(frozen=True)
class RotatedBounds:
	width: float
	height: float
	offset_x: float
	offset_y: float


#============================================
def normalize_rotation(rotation: float) -> float:
	"""
	Reduce an angle to the range [0, 360).

	Args:
		rotation: Angle in degrees, any sign or magnitude.

	Returns:
		Equivalent angle in [0, 360). Non-finite input becomes 0.
	"""
	if rotation is None or not math.isfinite(rotation):
		return 0.0
	value = float(rotation) % 360.0
	# tiny negative inputs round up to exactly 360.0
	if value >= 360.0:
		value = 0.0
	return value


#============================================
def compute_rotated_bounds(width: float, height: float, rotation: float) -> RotatedBounds:
	"""
	Compute the axis-aligned box that encloses a rotated rectangle.

	The offsets are where the unrotated rectangle must be drawn inside the
	box so that both share the same center.

	Args:
		width: Unrotated width.
		height: Unrotated height.
		rotation: Rotation in degrees.

	Returns:
		RotatedBounds in the same unit as width and height.
	"""
	radian = math.radians(normalize_rotation(rotation))
	cos_value = abs(math.cos(radian))
	sin_value = abs(math.sin(radian))
	new_width = width * cos_value + height * sin_value
	new_height = width * sin_value + height * cos_value
	offset_x = (new_width - width) / 2.0
	offset_y = (new_height - height) / 2.0
	return RotatedBounds(
		width=new_width,
		height=new_height,
		offset_x=offset_x,
		offset_y=offset_y,
	)


#============================================
def clamp_size(
	size: float,
	min_size: float = MIN_SIZE_MM,
	max_size: float = MAX_SIZE_MM,
	default_size: float = DEFAULT_SIZE_MM,
) -> float:
	"""
	Clamp a requested size to the valid range.

	Args:
		size: Requested longest-edge size in millimeters.
		min_size: Smallest allowed size.
		max_size: Largest allowed size.
		default_size: Used when the request is not a finite number.

	Returns:
		Size within [min_size, max_size].
	"""
	if size is None or not math.isfinite(size):
		size = default_size
	return max(min_size, min(max_size, float(size)))


#============================================
def base_dimensions(size: float, aspect_ratio: float) -> tuple[float, float]:
	"""
	Compute unrotated width and height from a longest-edge size.

	Args:
		size: Length of the longest edge.
		aspect_ratio: Asset width divided by height.

	Returns:
		Tuple of (width, height).
	"""
	if aspect_ratio <= 0.0 or not math.isfinite(aspect_ratio):
		aspect_ratio = 1.0
	if aspect_ratio >= 1.0:
		return (size, size / aspect_ratio)
	return (size * aspect_ratio, size)


#============================================
def size_for_container_width(container_width: float, aspect_ratio: float, rotation: float) -> float:
	"""
	Invert the bounds calculation: find the size whose rotated box has a width.

	Args:
		container_width: Target width of the rotated bounding box.
		aspect_ratio: Asset width divided by height.
		rotation: Rotation in degrees.

	Returns:
		Longest-edge size producing that bounding box width.
	"""
	unit_width, unit_height = base_dimensions(1.0, aspect_ratio)
	unit_bounds = compute_rotated_bounds(unit_width, unit_height, rotation)
	if unit_bounds.width <= 0.0:
		return container_width
	return container_width / unit_bounds.width


#============================================
def bounds_center(x: float, y: float, bounds: RotatedBounds) -> tuple[float, float]:
	"""
	Center of a bounding box given its top-left corner.

	Args:
		x: Box left edge.
		y: Box top edge.
		bounds: Box dimensions.

	Returns:
		Tuple of (center_x, center_y).
	"""
	return (x + bounds.width / 2.0, y + bounds.height / 2.0)
