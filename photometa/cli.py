from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

from photometa import config
from photometa.services.export import exif_notice, export_filename, to_document, to_text, write_metadata_json
from photometa.services.image_utils import UnreadableImageError
from photometa.services.metadata import ImageMetadata, build_metadata

logger = logging.getLogger(__name__)


def extract_file(path: Path, follow_exif_ifd: bool = True) -> ImageMetadata:
	data = path.read_bytes()
	mtime = datetime.fromtimestamp(path.stat().st_mtime, tz=timezone.utc)
	return build_metadata(data, file_name=path.name, last_modified=mtime, follow_exif_ifd=follow_exif_ifd)


def main(argv: Optional[List[str]] = None) -> int:
	parser = argparse.ArgumentParser(description="Show image dimensions and EXIF metadata")
	parser.add_argument("path", help="Image file to inspect")
	fmt = parser.add_mutually_exclusive_group()
	fmt.add_argument("--json", action="store_true", help="Print the JSON document instead of text")
	fmt.add_argument("--text", action="store_true", help="Print 'Label: value' lines (default)")
	parser.add_argument("--out", "-o", help="Also write <name>-metadata.json into this directory")
	parser.add_argument("--no-exif-ifd", action="store_true", help="Only decode IFD0, skip the Exif sub-IFD")
	args = parser.parse_args(argv)

	logging.basicConfig(level=config.LOG_LEVEL, format=config.LOG_FORMAT)

	path = Path(args.path)
	if not path.is_file():
		print(f"No such file: {path}", file=sys.stderr)
		return 1
	try:
		meta = extract_file(path, follow_exif_ifd=config.FOLLOW_EXIF_IFD and not args.no_exif_ifd)
	except UnreadableImageError as e:
		print(f"Failed {path}: {e}", file=sys.stderr)
		return 1

	if args.json:
		print(json.dumps(to_document(meta), indent=2, ensure_ascii=False))
	else:
		print(to_text(meta))
		notice = exif_notice(meta)
		if notice:
			print(notice)

	if args.out:
		out_path = write_metadata_json(to_document(meta), Path(args.out) / export_filename(meta))
		print(f"Saved metadata -> {out_path}")
	return 0


if __name__ == "__main__":
	sys.exit(main())
