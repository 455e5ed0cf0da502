#!/usr/bin/env python3
"""
Command line front end: turn image files into one PDF.

Usage:
    snapdoc photo1.jpg photo2.png -o exports --paper letter --orientation landscape
    snapdoc *.jpg --caption "Arrival" --caption "Harbour at dusk"
    OPENAI_API_KEY=... snapdoc *.jpg --auto-caption

Images become pages in the order given. Explicit --caption values are
applied to the accepted images in order; --auto-caption asks the caption
service for every image still without a caption.
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import List, Optional, Sequence

from snapdoc import __version__
from snapdoc.captions import CaptionService, OpenAICaptionAdapter
from snapdoc.collection import ImageBlob, PageCollection
from snapdoc.controller import export_document
from snapdoc.layout import Orientation, PaperSize, RenderConfig
from snapdoc.output import OUTPUT_FILENAME, RenderError
from snapdoc.settings import SettingsStore, get_api_key

logger = logging.getLogger("snapdoc")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="snapdoc",
        description=f"Combine images into a single PDF ({OUTPUT_FILENAME}), one image per page.",
    )
    parser.add_argument("images", nargs="+", type=Path, help="Image files, in page order")
    parser.add_argument(
        "-o", "--output-dir",
        type=Path,
        default=None,
        help="Directory for the PDF (default: stored setting, else current directory)",
    )
    parser.add_argument(
        "--paper",
        type=PaperSize.parse,
        default=None,
        help="Paper size: a4 or letter (default: stored setting, else a4)",
    )
    parser.add_argument(
        "--orientation",
        type=Orientation.parse,
        default=None,
        help="portrait or landscape (default: stored setting, else portrait)",
    )
    captions = parser.add_mutually_exclusive_group()
    captions.add_argument(
        "--captions", dest="include_captions", action="store_true", default=None,
        help="Render captions below images",
    )
    captions.add_argument(
        "--no-captions", dest="include_captions", action="store_false",
        help="Do not render captions",
    )
    parser.add_argument(
        "--caption",
        action="append",
        default=[],
        metavar="TEXT",
        help="Caption for the next image (repeat in page order)",
    )
    parser.add_argument(
        "--auto-caption",
        action="store_true",
        help="Generate captions with the AI caption service (needs OPENAI_API_KEY)",
    )
    parser.add_argument("--model", default=None, help="Caption model override")
    parser.add_argument("--settings", type=Path, default=None, help="Settings file path")
    parser.add_argument(
        "--save-defaults",
        action="store_true",
        help="Store the paper, orientation, captions and output directory used",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def _resolve_config(args: argparse.Namespace, settings: SettingsStore) -> RenderConfig:
    stored = settings.get_render_config()
    return RenderConfig(
        include_captions=stored.include_captions if args.include_captions is None else args.include_captions,
        paper_size=args.paper or stored.paper_size,
        orientation=args.orientation or stored.orientation,
    )


def _read_blobs(paths: Sequence[Path]) -> List[ImageBlob]:
    blobs: List[ImageBlob] = []
    for path in paths:
        try:
            blobs.append(ImageBlob.from_path(path))
        except OSError as e:
            logger.warning(f"Skipped {path}: {e.strerror or e}")
    return blobs


def _auto_caption(pages: PageCollection, settings: SettingsStore, model: Optional[str]) -> None:
    adapter = OpenAICaptionAdapter(
        api_key=get_api_key() or "",
        model=model or settings.get_caption_model(),
    )
    if not adapter.has_credential:
        logger.error("AI captions skipped: API key is missing (set OPENAI_API_KEY)")
        return

    with CaptionService(pages, adapter) as service:
        requested = service.request_all()
        logger.info(f"Requesting {len(requested)} caption(s) with {adapter.model}")
        outcomes = service.wait_all()

    failed = [o for o in outcomes if o.error is not None]
    if failed:
        logger.warning(f"{len(failed)} caption request(s) failed; those pages keep their caption empty")


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(message)s",
    )

    settings = SettingsStore(args.settings)
    config = _resolve_config(args, settings)
    output_dir = args.output_dir or settings.get_output_dir() or Path.cwd()

    with PageCollection() as pages:
        report = pages.insert(_read_blobs(args.images))
        for name in report.filtered:
            logger.warning(f"Skipped {name}: not an image")

        entries = pages.snapshot()
        if len(args.caption) > len(entries):
            logger.warning(
                f"{len(args.caption)} captions given for {len(entries)} images; extra captions ignored"
            )
        for entry, text in zip(entries, args.caption):
            pages.update_caption(entry.id, text)

        if args.auto_caption:
            _auto_caption(pages, settings, args.model)

        try:
            result = export_document(pages, config, output_dir)
        except RenderError as e:
            logger.error(f"Failed to generate PDF: {e}")
            return 1

    if result.path is None:
        logger.error("No images to export")
        return 1

    if args.save_defaults:
        settings.set_render_config(config)
        settings.set_output_dir(output_dir)

    print(result.path)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
