"""
Embedding generator: write placements into a copy of the input PDF.

One run walks Idle -> Loading -> Rendering -> Saving -> Done, or ends in
Failed. Placements are processed one after another. A missing asset aborts
the run before any page is touched; a placement on a page the document does
not have is skipped with a warning.
"""

# Standard Library
import dataclasses
import enum
import io
import logging
import typing

# PIP3 modules
import PIL.Image
import pypdf
import pypdf.errors

# local repo modules
import pdf_stamp_placement as psp
import pdf_stamp_placement.assets
import pdf_stamp_placement.config
import pdf_stamp_placement.errors
import pdf_stamp_placement.orientation
import pdf_stamp_placement.placement
import pdf_stamp_placement.render
import pdf_stamp_placement.straddle
import pdf_stamp_placement.units


GenerationSettings = psp.config.GenerationSettings
PageFrame = psp.orientation.PageFrame
PageGeometry = psp.orientation.PageGeometry
PlacementConfig = psp.placement.PlacementConfig
PlacementInstance = psp.placement.PlacementInstance
PlacementModel = psp.placement.PlacementModel
OverlayImage = psp.render.OverlayImage

AssetError = psp.errors.AssetError
PageIndexError = psp.errors.PageIndexError
PdfLoadError = psp.errors.PdfLoadError
PdfWriteError = psp.errors.PdfWriteError
PlacementError = psp.errors.PlacementError
NothingToPlaceError = psp.errors.NothingToPlaceError
GenerationInProgressError = psp.errors.GenerationInProgressError

STAMP_MODE = psp.config.STAMP_MODE

ProgressCallback = typing.Callable[[int, int], None]

logger = logging.getLogger(__name__)


class GenerationState(str, enum.Enum):
	IDLE = "idle"
	LOADING = "loading"
	RENDERING = "rendering"
	SAVING = "saving"
	DONE = "done"
	FAILED = "failed"


@dataclasses.dataclass
class GenerationResult:
	pdf_bytes: bytes | None
	state: GenerationState
	error_message: str | None = None
	warnings: list[str] = dataclasses.field(default_factory=list)
	embedded: int = 0

	@property
	def ok(self) -> bool:
		return self.pdf_bytes is not None


@dataclasses.dataclass
class EmbedJob:
	"""
	One unit of rendering work: an instance, or one page of a straddle stamp.
	"""
	config: PlacementConfig
	page_number: int
	instance: PlacementInstance | None = None


#============================================
def load_pdf(pdf_bytes: bytes) -> pypdf.PdfReader:
	"""
	Open PDF bytes, decrypting with an empty password when needed.

	Args:
		pdf_bytes: Input document.

	Returns:
		pypdf reader with at least one page.
	"""
	if not pdf_bytes:
		raise PdfLoadError("Input PDF is empty")
	try:
		reader = pypdf.PdfReader(io.BytesIO(pdf_bytes))
		if reader.is_encrypted:
			if reader.decrypt("") == pypdf.PasswordType.NOT_DECRYPTED:
				raise PdfLoadError("Input PDF is password protected")
		page_count = len(reader.pages)
	except (pypdf.errors.PyPdfError, ValueError, KeyError, OSError) as error:
		raise PdfLoadError(f"Input PDF could not be read: {error}") from error
	if page_count == 0:
		raise PdfLoadError("Input PDF has no pages")
	return reader


#============================================
def collect_jobs(model: PlacementModel, page_count: int, warnings: list[str]) -> list[EmbedJob]:
	"""
	List the work for one run in embedding order.

	Args:
		model: Placement model to embed.
		page_count: Number of pages in the document.
		warnings: Collects messages for skipped placements.

	Returns:
		EmbedJob list.
	"""
	jobs = []
	for config in model.configs.values():
		if config.is_straddle:
			for page_number in range(1, page_count + 1):
				jobs.append(EmbedJob(config=config, page_number=page_number))
			continue
		if model.mode == STAMP_MODE and not model.instances_for_config(config.placement_id):
			raise NothingToPlaceError(f"Stamp {config.placement_id} has no selected pages")

	for instance in model.instances.values():
		config = model.configs.get(instance.config_id)
		if config is None:
			raise AssetError(f"Placement {instance.placement_id} has no stamp or signature", None)
		if instance.page_number < 1 or instance.page_number > page_count:
			error = PageIndexError(instance.page_number, page_count)
			logger.warning("Skipping placement %s: %s", instance.placement_id, error)
			warnings.append(f"Skipped placement {instance.placement_id}: {error}")
			continue
		jobs.append(EmbedJob(config=config, page_number=instance.page_number, instance=instance))

	if not jobs:
		raise NothingToPlaceError("Nothing to place: add a stamp or signature first")
	return jobs


#============================================
def load_job_images(model: PlacementModel, jobs: list[EmbedJob]) -> dict[int, PIL.Image.Image]:
	"""
	Decode every asset the run needs, before any page is rendered.

	Args:
		model: Placement model.
		jobs: Work list.

	Returns:
		Mapping of asset id to RGBA image.
	"""
	images = {}
	for job in jobs:
		asset_id = job.config.asset_id
		if asset_id in images:
			continue
		asset = model.assets.get(asset_id)
		if asset is None:
			raise AssetError(f"Asset {asset_id} is missing", asset_id)
		images[asset_id] = psp.assets.open_asset_image(asset)
	return images


class EmbeddingGenerator:
	"""
	Write the placements of a model into a PDF.

	Args:
		settings: Opacity, raster resolution and reference edge for the run.
	"""

	def __init__(self, settings: GenerationSettings | None = None) -> None:
		self.settings = settings or GenerationSettings()
		self.state = GenerationState.IDLE
		self.error_message: str | None = None
		self.warnings: list[str] = []
		self.embedded = 0
		self._raster_cache: dict[tuple, PIL.Image.Image] = {}

	@property
	def loading(self) -> bool:
		return self.state in (
			GenerationState.LOADING,
			GenerationState.RENDERING,
			GenerationState.SAVING,
		)

	#============================================
	def _raster_for(self, job: EmbedJob, image: PIL.Image.Image) -> PIL.Image.Image:
		placement = job.instance if job.instance is not None else job.config
		key = psp.render.raster_cache_key(
			job.config.asset_id,
			placement.base_width,
			placement.base_height,
			placement.rotation,
			self.settings.raster_dpi,
		)
		raster = self._raster_cache.get(key)
		if raster is None:
			try:
				raster = psp.render.rasterize_placement(
					image,
					placement.base_width,
					placement.base_height,
					placement.rotation,
					self.settings.raster_dpi,
				)
			except (PIL.Image.DecompressionBombError, MemoryError, OSError, ValueError) as error:
				raise AssetError(
					f"Asset {job.config.asset_id} could not be rasterized: {error}",
					job.config.asset_id,
				) from error
			self._raster_cache[key] = raster
		return raster

	#============================================
	def _place_instance(self, job: EmbedJob, frame: PageFrame, raster: PIL.Image.Image) -> OverlayImage:
		instance = job.instance
		pt_per_mm = frame.pt_per_mm()
		page_height = psp.units.mm_to_pt(frame.geometry.height_mm)
		page_position = frame.to_page(instance.position, instance.container_width)
		width = instance.container_width * pt_per_mm
		height = instance.container_height * pt_per_mm
		x = page_position.x * pt_per_mm
		# PDF origin is bottom-left
		y = page_height - page_position.y * pt_per_mm - height
		logger.debug(
			"Placement %s on page %s at (%.2f, %.2f) pt, %.2f x %.2f pt",
			instance.placement_id, job.page_number, x, y, width, height,
		)
		return OverlayImage(image=raster, x=x, y=y, width=width, height=height)

	#============================================
	def _place_straddle(self, job: EmbedJob, frame: PageFrame, raster: PIL.Image.Image, page_count: int) -> OverlayImage | None:
		config = job.config
		part = psp.straddle.split_stamp_width(job.page_number, page_count, raster.width)
		image = psp.render.crop_straddle_slice(raster, part)
		if image is None:
			message = f"Straddle stamp {config.placement_id} is too narrow to show on page {job.page_number}"
			logger.warning(message)
			self.warnings.append(message)
			return None
		pt_per_mm = frame.pt_per_mm()
		page_width = psp.units.mm_to_pt(frame.geometry.width_mm)
		page_height = psp.units.mm_to_pt(frame.geometry.height_mm)
		stamp_width = config.container_width * pt_per_mm
		height = config.container_height * pt_per_mm
		width = part.width_of(stamp_width)
		top_mm = psp.straddle.straddle_top_mm(
			config.straddle_y,
			frame.geometry.height_mm / frame.scale,
			config.container_height,
		)
		x = page_width - width
		y = page_height - top_mm * pt_per_mm - height
		logger.debug(
			"Straddle %s slice %s/%s at (%.2f, %.2f) pt, %.2f x %.2f pt",
			config.placement_id, job.page_number, page_count, x, y, width, height,
		)
		return OverlayImage(image=image, x=x, y=y, width=width, height=height)

	#============================================
	def _write_output(
		self,
		reader: pypdf.PdfReader,
		geometries: list[PageGeometry],
		overlays: dict[int, list[OverlayImage]],
	) -> bytes:
		"""
		Merge the overlays into a copy of the document and serialize it.

		Args:
			reader: Source document.
			geometries: Displayed geometry per page.
			overlays: Images to draw, keyed by 1-based page number.

		Returns:
			Output PDF bytes.
		"""
		try:
			writer = pypdf.PdfWriter(clone_from=reader)
			for page_number, items in sorted(overlays.items()):
				geometry = geometries[page_number - 1]
				overlay = psp.render.build_overlay_page(
					psp.units.mm_to_pt(geometry.width_mm),
					psp.units.mm_to_pt(geometry.height_mm),
					items,
					self.settings.opacity,
				)
				psp.render.merge_overlay(writer.pages[page_number - 1], overlay, geometry)
			buffer = io.BytesIO()
			writer.write(buffer)
		except (pypdf.errors.PyPdfError, OSError, ValueError, KeyError, TypeError) as error:
			raise PdfWriteError(f"Output PDF could not be written: {error}") from error
		return buffer.getvalue()

	#============================================
	def generate(
		self,
		pdf_bytes: bytes,
		model: PlacementModel,
		progress_callback: ProgressCallback | None = None,
	) -> bytes:
		"""
		Embed every placement of the model and return the new PDF.

		Args:
			pdf_bytes: Input document.
			model: Placement model to embed.
			progress_callback: Called with (done, total) after each placement.

		Returns:
			Output PDF bytes with the same pages, order and sizes as the input.
		"""
		if self.loading:
			raise GenerationInProgressError("A PDF is already being generated")
		self.state = GenerationState.LOADING
		self.error_message = None
		self.warnings = []
		self.embedded = 0
		self._raster_cache = {}
		try:
			reader = load_pdf(pdf_bytes)
			geometries = [psp.render.read_page_geometry(page) for page in reader.pages]
			page_count = len(geometries)
			jobs = collect_jobs(model, page_count, self.warnings)
			images = load_job_images(model, jobs)

			self.state = GenerationState.RENDERING
			overlays: dict[int, list[OverlayImage]] = {}
			total = len(jobs)
			for index, job in enumerate(jobs, start=1):
				frame = psp.orientation.resolve_page_frame(
					geometries, job.page_number, self.settings.reference_edge_mm,
				)
				raster = self._raster_for(job, images[job.config.asset_id])
				if job.instance is None:
					item = self._place_straddle(job, frame, raster, page_count)
				else:
					item = self._place_instance(job, frame, raster)
				if item is not None:
					overlays.setdefault(job.page_number, []).append(item)
					self.embedded += 1
				if progress_callback is not None:
					progress_callback(index, total)

			self.state = GenerationState.SAVING
			pdf_data = self._write_output(reader, geometries, overlays)
		except Exception:
			self.state = GenerationState.FAILED
			raise
		finally:
			self._raster_cache = {}
		self.state = GenerationState.DONE
		return pdf_data

	#============================================
	def run(
		self,
		pdf_bytes: bytes,
		model: PlacementModel,
		progress_callback: ProgressCallback | None = None,
	) -> GenerationResult:
		"""
		Generate and turn any engine error into a failed result.

		Args:
			pdf_bytes: Input document.
			model: Placement model to embed.
			progress_callback: Called with (done, total) after each placement.

		Returns:
			GenerationResult; pdf_bytes is None when the run failed.
		"""
		try:
			pdf_data = self.generate(pdf_bytes, model, progress_callback)
		except GenerationInProgressError as error:
			# the active run keeps its own state
			return GenerationResult(pdf_bytes=None, state=self.state, error_message=str(error))
		except PlacementError as error:
			self.error_message = str(error)
			logger.error("PDF generation failed: %s", error)
			return GenerationResult(
				pdf_bytes=None,
				state=self.state,
				error_message=self.error_message,
				warnings=list(self.warnings),
			)
		return GenerationResult(
			pdf_bytes=pdf_data,
			state=self.state,
			warnings=list(self.warnings),
			embedded=self.embedded,
		)
