"""
CLI entry points for stamping and signing PDF files.
"""

# Standard Library
import argparse
import logging
import pathlib
import sys
import time

# local repo modules
import pdf_stamp_placement as psp
import pdf_stamp_placement.assets
import pdf_stamp_placement.config
import pdf_stamp_placement.embed
import pdf_stamp_placement.errors
import pdf_stamp_placement.placement
import pdf_stamp_placement.render


GenerationSettings = psp.config.GenerationSettings
PlacementModel = psp.placement.PlacementModel
Position = psp.placement.Position
PlacementError = psp.errors.PlacementError

DEFAULT_SIZE_MM = psp.config.DEFAULT_SIZE_MM
DEFAULT_POSITION_MM = psp.config.DEFAULT_POSITION_MM
DEFAULT_STRADDLE_Y_MM = psp.config.DEFAULT_STRADDLE_Y_MM
DEFAULT_OPACITY = psp.config.DEFAULT_OPACITY
RASTER_DPI = psp.config.RASTER_DPI
PAGE_SIZES = psp.config.PAGE_SIZES
DEFAULT_PAGE_SIZE = psp.config.DEFAULT_PAGE_SIZE
STAMP_MODE = psp.config.STAMP_MODE
SIGN_MODE = psp.config.SIGN_MODE


#============================================
def parse_page_list(value: str) -> list[int]:
	"""
	Parse a page list such as "1,3-5".

	Args:
		value: Comma separated page numbers and ranges.

	Returns:
		Sorted unique 1-based page numbers.
	"""
	pages = set()
	for token in value.split(","):
		token = token.strip()
		if not token:
			continue
		try:
			if "-" in token:
				start_text, end_text = token.split("-", 1)
				start, end = int(start_text), int(end_text)
				if start > end:
					start, end = end, start
				pages.update(range(start, end + 1))
			else:
				pages.add(int(token))
		except ValueError:
			raise argparse.ArgumentTypeError(f"Invalid page list: {value}")
	if not pages or min(pages) < 1:
		raise argparse.ArgumentTypeError(f"Invalid page list: {value}")
	return sorted(pages)


#============================================
def parse_place(value: str) -> tuple[int, float, float, float | None, float | None]:
	"""
	Parse a signature placement "PAGE:X:Y[:ROT[:SIZE]]".

	Args:
		value: Placement text.

	Returns:
		Tuple of (page, x_mm, y_mm, rotation or None, size or None).
	"""
	parts = value.split(":")
	if len(parts) < 3 or len(parts) > 5:
		raise argparse.ArgumentTypeError(f"Expected PAGE:X:Y[:ROT[:SIZE]], got {value}")
	try:
		page = int(parts[0])
		x = float(parts[1])
		y = float(parts[2])
		rotation = float(parts[3]) if len(parts) > 3 and parts[3] else None
		size = float(parts[4]) if len(parts) > 4 and parts[4] else None
	except ValueError:
		raise argparse.ArgumentTypeError(f"Invalid placement: {value}")
	if page < 1:
		raise argparse.ArgumentTypeError(f"Page numbers start at 1: {value}")
	return (page, x, y, rotation, size)


#============================================
def build_settings(args: argparse.Namespace) -> GenerationSettings:
	"""
	Build generation settings from CLI args.

	Args:
		args: Parsed argparse namespace.

	Returns:
		GenerationSettings.
	"""
	opacity = max(0.0, min(1.0, args.opacity))
	reference_width, _reference_height = psp.config.get_page_size(args.reference_size)
	return GenerationSettings(
		opacity=opacity,
		raster_dpi=args.dpi,
		reference_edge_mm=reference_width,
	)


#============================================
def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
	"""
	Parse command line arguments.

	Args:
		argv: Argument list, defaults to sys.argv.

	Returns:
		Parsed argparse namespace.
	"""
	parser = argparse.ArgumentParser(description="Place stamps and signatures on PDF pages.")
	subparsers = parser.add_subparsers(dest="mode", required=True)

	common = argparse.ArgumentParser(add_help=False)
	common.add_argument("input_path", help="Input PDF file.")
	common.add_argument("asset_path", help="Stamp or signature image (PNG or JPEG).")
	common.add_argument("-o", "--output", dest="output_path", required=True, help="Output PDF path.")
	common.add_argument("-s", "--size", dest="size", type=float, default=DEFAULT_SIZE_MM, help="Longest edge in mm.")
	common.add_argument("-a", "--opacity", dest="opacity", type=float, default=DEFAULT_OPACITY, help="Image opacity 0-1.")
	common.add_argument("--dpi", dest="dpi", type=int, default=RASTER_DPI, help="Raster resolution of placed images.")
	common.add_argument(
		"--reference-size",
		dest="reference_size",
		choices=sorted(PAGE_SIZES),
		default=DEFAULT_PAGE_SIZE,
		help="Portrait page size positions are authored against.",
	)
	common.add_argument("-v", "--verbose", dest="verbose", action="store_true", help="Print debug logging.")

	stamp_parser = subparsers.add_parser(STAMP_MODE, parents=[common], help="Stamp the same image on many pages.")
	stamp_parser.add_argument("-r", "--rotation", dest="rotation", type=float, default=0.0, help="Rotation in degrees.")
	stamp_parser.add_argument("-x", "--x", dest="x", type=float, default=DEFAULT_POSITION_MM[0], help="Left edge in mm.")
	stamp_parser.add_argument("-y", "--y", dest="y", type=float, default=DEFAULT_POSITION_MM[1], help="Top edge in mm.")
	page_group = stamp_parser.add_mutually_exclusive_group()
	page_group.add_argument("-p", "--pages", dest="pages", type=parse_page_list, default=None, help="Pages such as 1,3-5.")
	page_group.add_argument("-A", "--all-pages", dest="all_pages", action="store_true", help="Stamp every page.")
	stamp_parser.add_argument("-R", "--random-angle", dest="random_angle", action="store_true", help="Random rotation per page.")
	stamp_parser.add_argument("-S", "--straddle", dest="straddle", action="store_true", help="Split the stamp across the right edge of all pages.")
	stamp_parser.add_argument("--straddle-y", dest="straddle_y", type=float, default=DEFAULT_STRADDLE_Y_MM, help="Straddle top edge in mm.")

	sign_parser = subparsers.add_parser(SIGN_MODE, parents=[common], help="Place a signature at explicit spots.")
	sign_parser.add_argument(
		"-P",
		"--place",
		dest="placements",
		type=parse_place,
		action="append",
		required=True,
		help="PAGE:X:Y[:ROT[:SIZE]] in mm and degrees; repeat for more.",
	)

	args = parser.parse_args(argv)
	return args


#============================================
def build_model(args: argparse.Namespace, asset: psp.assets.Asset, page_count: int) -> PlacementModel:
	"""
	Build a placement model from CLI args.

	Args:
		args: Parsed argparse namespace.
		asset: Decoded stamp or signature.
		page_count: Pages in the input document.

	Returns:
		PlacementModel ready to embed.
	"""
	model = PlacementModel(mode=args.mode)
	if args.mode == STAMP_MODE:
		config = model.create_config(
			asset,
			size=args.size,
			rotation=args.rotation,
			position=Position(args.x, args.y),
			is_straddle=args.straddle,
			straddle_y=args.straddle_y,
			random_angle=args.random_angle,
		)
		if args.straddle:
			return model
		if args.all_pages:
			model.select_all_pages(config.placement_id, page_count)
		else:
			model.select_pages(config.placement_id, args.pages or [1])
		return model

	config = model.create_config(asset, size=args.size)
	for page, x, y, rotation, size in args.placements:
		instance = model.add_instance(config.placement_id, page, rotation=rotation)
		if size is not None:
			model.update_size(instance.placement_id, size)
		model.update_position(instance.placement_id, x, y)
	return model


#============================================
def run_pipeline(args: argparse.Namespace) -> bool:
	"""
	Load, place, embed and save.

	Args:
		args: Parsed argparse namespace.

	Returns:
		True when the output PDF was written.
	"""
	settings = build_settings(args)
	print(f"Mode: {args.mode}")
	print(f"Input PDF: {args.input_path}")
	print(f"Asset: {args.asset_path}")
	print(f"Output PDF: {args.output_path}")
	print(f"Size: {args.size:g} mm")
	print(f"Opacity: {settings.opacity:g}")
	print(f"Reference page: {psp.config.format_page_size(args.reference_size)}")
	if args.mode == STAMP_MODE:
		print(f"Rotation: {args.rotation:g}")
		print(f"Straddle: {args.straddle}")
		if args.random_angle:
			print("Random angle: True")
	else:
		print(f"Placements: {len(args.placements)}")

	start_time = time.perf_counter()
	try:
		pdf_bytes = pathlib.Path(args.input_path).read_bytes()
	except OSError as error:
		print(f"Error: cannot read input PDF: {error}")
		return False
	try:
		asset = psp.assets.load_asset(pathlib.Path(args.asset_path))
		reader = psp.embed.load_pdf(pdf_bytes)
	except PlacementError as error:
		print(f"Error: {error}")
		return False
	page_count = len(reader.pages)
	print(f"Pages: {page_count}")

	model = build_model(args, asset, page_count)
	generator = psp.embed.EmbeddingGenerator(settings)

	def report(current: int, total: int) -> None:
		psp.render.print_progress("Embedding", current, total)

	result = generator.run(pdf_bytes, model, progress_callback=report)
	print()
	for message in result.warnings:
		print(f"Warning: {message}")
	if not result.ok:
		print(f"Error: {result.error_message}")
		return False

	output_path = pathlib.Path(args.output_path)
	output_path.write_bytes(result.pdf_bytes)
	total_time = time.perf_counter() - start_time
	print(f"Placements embedded: {result.embedded}")
	print(f"Warnings: {len(result.warnings)}")
	print(f"Timing: total={total_time:.2f}s")
	print(f"Output written: {output_path}")
	return True


#============================================
def main(argv: list[str] | None = None) -> None:
	"""
	Main entry point.
	"""
	args = parse_args(argv)
	if args.verbose:
		logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
	if not run_pipeline(args):
		sys.exit(1)
