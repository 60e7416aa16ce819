"""
Pytest configuration for local imports and shared document builders.
"""

# Standard Library
import io
import os
import sys

# PIP3 modules
import PIL.Image
import pypdf
import pytest

#============================================


def _ensure_repo_on_path() -> None:
	"""
	Ensure the repository root is on sys.path.
	"""
	repo_root = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
	if repo_root not in sys.path:
		sys.path.insert(0, repo_root)


_ensure_repo_on_path()

A4_PT = (595.2756, 841.8898)


#============================================
def build_pdf_bytes(page_sizes: list[tuple[float, float]], rotations: list[int] | None = None) -> bytes:
	"""
	Build a blank PDF with the given page sizes in points.

	Args:
		page_sizes: (width, height) per page, before /Rotate.
		rotations: Optional /Rotate value per page.

	Returns:
		PDF bytes.
	"""
	writer = pypdf.PdfWriter()
	for index, (width, height) in enumerate(page_sizes):
		page = writer.add_blank_page(width=width, height=height)
		if rotations is not None and rotations[index]:
			page.rotate(rotations[index])
	buffer = io.BytesIO()
	writer.write(buffer)
	return buffer.getvalue()


#============================================
def build_png_bytes(width: int = 60, height: int = 60, color: tuple = (200, 0, 0, 255)) -> bytes:
	"""
	Build a solid PNG image.

	Args:
		width: Pixel width.
		height: Pixel height.
		color: RGBA fill.

	Returns:
		PNG bytes.
	"""
	image = PIL.Image.new("RGBA", (width, height), color)
	buffer = io.BytesIO()
	image.save(buffer, format="PNG")
	return buffer.getvalue()


@pytest.fixture
def make_pdf():
	return build_pdf_bytes


@pytest.fixture
def make_png():
	return build_png_bytes


@pytest.fixture
def a4_pdf() -> bytes:
	return build_pdf_bytes([A4_PT, A4_PT, A4_PT])


@pytest.fixture
def stamp_png() -> bytes:
	return build_png_bytes()
