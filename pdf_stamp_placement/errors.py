"""
Error types raised by the placement and embedding engine.
"""


class PlacementError(RuntimeError):
	"""Base error for anything that stops a generation run."""


class AssetError(PlacementError):
	"""Raised when a referenced asset is missing or cannot be decoded."""

	def __init__(self, message: str, asset_id: int | None = None) -> None:
		super().__init__(message)
		self.asset_id = asset_id


class PageIndexError(PlacementError):
	"""Raised when a placement targets a page the document does not have."""

	def __init__(self, page_number: int, page_count: int) -> None:
		super().__init__(f"Page {page_number} is outside the document (1-{page_count})")
		self.page_number = page_number
		self.page_count = page_count


class PdfLoadError(PlacementError):
	"""Raised when the input PDF cannot be opened."""


class NothingToPlaceError(PlacementError):
	"""Raised when a generation run has no placement to embed."""


class GenerationInProgressError(PlacementError):
	"""Raised when generate() is entered while another run is still active."""


class PdfWriteError(PlacementError):
	"""Raised when the stamped PDF cannot be assembled or serialized."""
