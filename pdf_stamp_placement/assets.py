"""
Raster asset decoding.
"""

# Standard Library
import dataclasses
import io
import pathlib

# PIP3 modules
import PIL.Image

# local repo modules
import pdf_stamp_placement as psp
import pdf_stamp_placement.errors


AssetError = psp.errors.AssetError

SUPPORTED_FORMATS = ("PNG", "JPEG")


@dataclasses.dataclass(frozen=True)
class Asset:
	asset_id: int
	data: bytes
	width_px: int
	height_px: int
	image_format: str

	@property
	def aspect_ratio(self) -> float:
		if self.height_px <= 0:
			return 1.0
		return self.width_px / self.height_px


#============================================
def decode_asset(data: bytes, asset_id: int = 0) -> Asset:
	"""
	Decode PNG or JPEG bytes into an Asset.

	Args:
		data: Encoded image bytes.
		asset_id: Identifier to store on the asset.

	Returns:
		Asset with its natural pixel size.
	"""
	if not data:
		raise AssetError("Asset has no image data", asset_id)
	try:
		image = PIL.Image.open(io.BytesIO(data))
		image.load()
	except (PIL.UnidentifiedImageError, PIL.Image.DecompressionBombError, OSError) as error:
		raise AssetError(f"Asset image could not be decoded: {error}", asset_id) from error
	if image.format not in SUPPORTED_FORMATS:
		raise AssetError(f"Unsupported asset format: {image.format}", asset_id)
	width, height = image.size
	if width <= 0 or height <= 0:
		raise AssetError("Asset image is empty", asset_id)
	return Asset(
		asset_id=asset_id,
		data=bytes(data),
		width_px=width,
		height_px=height,
		image_format=image.format,
	)


#============================================
def load_asset(path: pathlib.Path, asset_id: int = 0) -> Asset:
	"""
	Read and decode an asset image file.

	Args:
		path: PNG or JPEG file path.
		asset_id: Identifier to store on the asset.

	Returns:
		Asset.
	"""
	try:
		data = pathlib.Path(path).read_bytes()
	except OSError as error:
		raise AssetError(f"Asset file could not be read: {error}", asset_id) from error
	return decode_asset(data, asset_id)


#============================================
def open_asset_image(asset: Asset) -> PIL.Image.Image:
	"""
	Open an asset as an RGBA PIL image.

	Args:
		asset: Decoded asset.

	Returns:
		Loaded RGBA image.
	"""
	if not asset.data:
		raise AssetError("Asset has no image data", asset.asset_id)
	try:
		image = PIL.Image.open(io.BytesIO(asset.data))
		image.load()
	except (PIL.UnidentifiedImageError, PIL.Image.DecompressionBombError, OSError) as error:
		raise AssetError(f"Asset image could not be decoded: {error}", asset.asset_id) from error
	return image.convert("RGBA")
