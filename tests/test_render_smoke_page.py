"""
Smoke tests that render stamped pages and check where the ink lands.
"""

# PIP3 modules
import fitz
import PIL.Image

# local repo modules
import pdf_stamp_placement.assets
import pdf_stamp_placement.embed
import pdf_stamp_placement.placement

import conftest


DPI = 72
INK_THRESHOLD = 200
PAPER_THRESHOLD = 245


#============================================
def _render_pdf_page(data: bytes, page_index: int = 0) -> PIL.Image.Image:
	"""
	Render one page of a PDF to an image, as a viewer shows it.

	Args:
		data: PDF bytes.
		page_index: 0-based page index.

	Returns:
		PIL image.
	"""
	document = fitz.open(stream=data, filetype="pdf")
	page = document[page_index]
	scale = DPI / 72.0
	matrix = fitz.Matrix(scale, scale)
	pixmap = page.get_pixmap(matrix=matrix, alpha=False)
	image = PIL.Image.frombytes("RGB", [pixmap.width, pixmap.height], pixmap.samples)
	document.close()
	return image


#============================================
def _pixel_at_mm(image: PIL.Image.Image, x_mm: float, y_mm: float) -> tuple[int, int, int]:
	scale = DPI / 25.4
	return image.getpixel((int(round(x_mm * scale)), int(round(y_mm * scale))))


#============================================
def _stamp_pdf(source: bytes, x_mm: float, y_mm: float, page_number: int = 1) -> bytes:
	"""
	Stamp a solid red 40 mm square on one page.
	"""
	model = pdf_stamp_placement.placement.PlacementModel(mode="sign")
	asset = pdf_stamp_placement.assets.decode_asset(conftest.build_png_bytes(80, 80, (255, 0, 0, 255)))
	config = model.create_config(asset)
	instance = model.add_instance(config.placement_id, page_number)
	model.update_position(instance.placement_id, x_mm, y_mm)
	return pdf_stamp_placement.embed.EmbeddingGenerator().generate(source, model)


#============================================
def _is_ink(pixel: tuple[int, int, int]) -> bool:
	red, green, blue = pixel
	return red > INK_THRESHOLD and green < INK_THRESHOLD and blue < INK_THRESHOLD


#============================================
def _is_paper(pixel: tuple[int, int, int]) -> bool:
	return min(pixel) > PAPER_THRESHOLD


#============================================
def test_rendered_stamp_lands_top_left() -> None:
	"""
	A stamp placed near the top-left corner shows there, not at the bottom.
	"""
	source = conftest.build_pdf_bytes([conftest.A4_PT])
	image = _render_pdf_page(_stamp_pdf(source, 20.0, 30.0))
	assert _is_ink(_pixel_at_mm(image, 40.0, 50.0))
	assert _is_paper(_pixel_at_mm(image, 40.0, 297.0 - 50.0))
	assert _is_paper(_pixel_at_mm(image, 10.0, 50.0))
	assert _is_paper(_pixel_at_mm(image, 70.0, 50.0))


#============================================
def test_rendered_stamp_on_rotated_page() -> None:
	"""
	On a page with /Rotate 90 the stamp lands where it was placed on screen.
	"""
	source = conftest.build_pdf_bytes([conftest.A4_PT], rotations=[90])
	image = _render_pdf_page(_stamp_pdf(source, 20.0, 30.0))
	# displayed as landscape
	assert image.width > image.height
	assert _is_ink(_pixel_at_mm(image, 40.0, 50.0))
	assert _is_paper(_pixel_at_mm(image, 297.0 - 40.0, 50.0))
	assert _is_paper(_pixel_at_mm(image, 40.0, 210.0 - 50.0))


#============================================
def test_rendered_stamp_on_landscape_page_between_portraits() -> None:
	"""
	A landscape page in a portrait document gets the remapped spot.
	"""
	landscape = (conftest.A4_PT[1], conftest.A4_PT[0])
	source = conftest.build_pdf_bytes([conftest.A4_PT, landscape, conftest.A4_PT])
	stamped = _stamp_pdf(source, 120.0, 190.0, page_number=2)
	image = _render_pdf_page(stamped, page_index=1)
	assert image.width > image.height
	# remapped box spans x 190-230 mm, y 50-90 mm
	assert _is_ink(_pixel_at_mm(image, 210.0, 70.0))
	# where the unremapped box would have been
	assert _is_paper(_pixel_at_mm(image, 140.0, 200.0))
	assert _is_paper(_pixel_at_mm(image, 210.0, 150.0))
	# portrait neighbours stay blank
	for page_index in (0, 2):
		neighbour = _render_pdf_page(stamped, page_index=page_index)
		assert _is_paper(_pixel_at_mm(neighbour, 140.0, 210.0))
