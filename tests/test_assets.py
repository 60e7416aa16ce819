"""
Tests for decoding stamp and signature images.
"""

# Standard Library
import io

# PIP3 modules
import PIL.Image
import pytest

# local repo modules
import pdf_stamp_placement.assets as assets
import pdf_stamp_placement.errors as errors

import conftest


#============================================
def test_decode_png() -> None:
	asset = assets.decode_asset(conftest.build_png_bytes(90, 30), asset_id=4)
	assert (asset.width_px, asset.height_px) == (90, 30)
	assert asset.aspect_ratio == pytest.approx(3.0)
	assert asset.image_format == "PNG"
	assert assets.open_asset_image(asset).mode == "RGBA"


#============================================
def test_decode_jpeg() -> None:
	buffer = io.BytesIO()
	PIL.Image.new("RGB", (40, 20), (0, 0, 200)).save(buffer, format="JPEG")
	asset = assets.decode_asset(buffer.getvalue())
	assert asset.image_format == "JPEG"


#============================================
@pytest.mark.parametrize("data", [b"", b"GIF89a not really"])
def test_decode_rejects_bad_data(data: bytes) -> None:
	with pytest.raises(errors.AssetError):
		assets.decode_asset(data)


#============================================
def test_decode_rejects_other_formats() -> None:
	"""
	Only PNG and JPEG are accepted.
	"""
	buffer = io.BytesIO()
	PIL.Image.new("RGB", (10, 10)).save(buffer, format="BMP")
	with pytest.raises(errors.AssetError):
		assets.decode_asset(buffer.getvalue())


#============================================
def test_load_missing_file(tmp_path) -> None:
	with pytest.raises(errors.AssetError):
		assets.load_asset(tmp_path / "nope.png")


#============================================
def test_decode_rejects_oversized_image(monkeypatch) -> None:
	"""
	Pillow's pixel limit surfaces as an asset error, not a crash.
	"""
	monkeypatch.setattr(PIL.Image, "MAX_IMAGE_PIXELS", 100)
	with pytest.raises(errors.AssetError, match="could not be decoded"):
		assets.decode_asset(conftest.build_png_bytes(60, 60))
