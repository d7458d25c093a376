from __future__ import annotations

import argparse
import asyncio
from pathlib import Path

import uvicorn

from .config import settings
from .errors import ConversionError
from .logging_utils import get_logger
from .models import FileField, Rejected, format_for_extension
from .services import mp3_filename
from .services.validation import VIDEO_FIELD, UploadValidator
from .transcoders import TranscoderRegistry


logger = get_logger(__name__)


def _serve(args: argparse.Namespace) -> int:
    uvicorn.run("mp3_gateway.main:app", host=args.host, port=args.port)
    return 0


def _convert(args: argparse.Namespace) -> int:
    in_path = Path(args.input)
    if not in_path.is_file():
        logger.error("Input file %s does not exist", in_path)
        return 2

    fmt = format_for_extension(in_path.name)
    validator = UploadValidator(
        max_upload_bytes=settings.max_upload_bytes,
        max_upload_label=settings.max_upload_label,
    )
    with in_path.open("rb") as fh:
        data = fh.read(settings.max_upload_bytes + 1)
    field = FileField(
        name=VIDEO_FIELD,
        filename=in_path.name,
        media_type=fmt.media_type if fmt is not None else "",
        data=data,
    )
    result = validator.validate({VIDEO_FIELD: field})
    if isinstance(result, Rejected):
        logger.error("%s: %s", in_path, result.reason)
        return 2

    try:
        transcoder = TranscoderRegistry(settings).create(args.transcoder)
    except ValueError as exc:
        logger.error("%s", exc)
        return 2

    upload = result.upload
    try:
        mp3 = asyncio.run(
            asyncio.wait_for(
                transcoder.convert(upload.data, upload.media_type),
                timeout=settings.transcode_timeout_seconds,
            )
        )
    except asyncio.TimeoutError:
        logger.error("Conversion of %s timed out", in_path)
        return 1
    except ConversionError as exc:
        logger.error("Conversion of %s failed: %s", in_path, exc.message)
        return 1

    out_path = Path(args.out) if args.out else in_path.with_name(mp3_filename(in_path.name))
    out_path.write_bytes(mp3)
    logger.info("Wrote %s (%d bytes, audio/mpeg)", out_path, len(mp3))
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="mp3-gateway CLI")
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", default="0.0.0.0")
    serve.add_argument("--port", type=int, default=8000)
    serve.set_defaults(func=_serve)

    convert = sub.add_parser("convert", help="Convert a local video file to MP3")
    convert.add_argument("--input", required=True, help="Video file to convert")
    convert.add_argument(
        "--out",
        default=None,
        help="Output MP3 path (defaults to the input name with .mp3)",
    )
    convert.add_argument(
        "--transcoder",
        default=settings.transcoder,
        help="Transcoder id (placeholder, unimplemented, ffmpeg)",
    )
    convert.set_defaults(func=_convert)

    args = parser.parse_args(argv)
    return args.func(args)


if __name__ == "__main__":
    raise SystemExit(main())
