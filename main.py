#!/usr/bin/env python3
"""
Command line entry point for the video diary recap engine.

Usage:
    python main.py scan
    python main.py run [--kind weekly|monthly] [--now 2024-03-15T20:00]
    python main.py today
    python main.py delete 2024-03-15_20-05-33.mp4
    python main.py serve
"""

import argparse
import asyncio
import sys
from datetime import datetime
from typing import List, Optional

from diary_recap.config import config
from diary_recap.recap_generator.exceptions.recap_exceptions import (
    ParseError, RecapDeletionForbiddenError, StorageUnavailableError, VideoProcessingError
)
from diary_recap.recap_generator.models.run_models import RecapRunResult, RunState
from diary_recap.utils.logger_utils import setup_logging

logger = setup_logging(__name__)


def _services(args):
    from diary_recap.api.api_main import build_services
    return build_services(args.videos_dir)


def cmd_scan(args) -> int:
    service, _ = _services(args)
    scan = service.index.scan()
    if not scan.storage_available:
        print(f"❌ {scan.storage_error}")
        return 1

    print(f"📂 {scan.directory}")
    print(f"Clips ({len(scan.clips)}):")
    for clip in scan.clips:
        print(f"  {clip.captured_at:%Y-%m-%d %H:%M:%S}  {clip.path.name}")
    print(f"Recaps ({len(scan.recaps)}):")
    for recap in scan.recaps:
        print(f"  {recap.title:<24} {recap.path.name}")
    if scan.skipped_entries:
        print(f"Skipped ({len(scan.skipped_entries)}): {', '.join(scan.skipped_entries)}")
    return 0


def _print_result(result: RecapRunResult) -> None:
    period = result.period.token if result.period else "-"
    line = f"{result.kind.value:<8} {period:<9} {result.state.value}"
    if result.skip_reason:
        line += f" ({result.skip_reason.value})"
    if result.recap:
        line += f" -> {result.recap.path.name}"
    if result.error:
        line += f": {result.error}"
    print(line)


def cmd_run(args) -> int:
    _, orchestrator = _services(args)
    try:
        orchestrator.assembler.media_backend.validate_ffmpeg_installation()
    except VideoProcessingError as e:
        print(f"❌ {e}")
        return 1

    if args.kind == "weekly":
        results = [asyncio.run(orchestrator.run_weekly(args.now))]
    elif args.kind == "monthly":
        results = [asyncio.run(orchestrator.run_monthly(args.now))]
    else:
        results = asyncio.run(orchestrator.run(args.now))

    for result in results:
        _print_result(result)
    return 1 if any(r.state == RunState.FAILED for r in results) else 0


def cmd_today(args) -> int:
    service, _ = _services(args)
    now = datetime.now()
    recorded = service.has_recorded_today(now)
    if recorded:
        remaining = service.time_until_next_recording(now)
        hours, rest = divmod(int(remaining.total_seconds()), 3600)
        print(f"✅ Today's video is recorded. Next recording in {hours:02d}:{rest // 60:02d}")
    else:
        print("🎥 No video recorded today yet")
    print(f"Next reminder: {service.next_reminder_at(now):%Y-%m-%d %H:%M}")
    return 0


def cmd_delete(args) -> int:
    service, _ = _services(args)
    try:
        deleted = service.delete_clip(args.file)
    except (RecapDeletionForbiddenError, ParseError, StorageUnavailableError) as e:
        print(f"❌ {e}")
        return 1
    print(f"✓ Deleted {args.file}" if deleted else f"ℹ  {args.file} was already gone")
    return 0


def cmd_serve(args) -> int:
    import uvicorn
    from diary_recap.api.api_main import create_app

    service, orchestrator = _services(args)
    uvicorn.run(create_app(service, orchestrator), host=args.host, port=args.port)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Video diary library and recap generation",
        formatter_class=argparse.RawDescriptionHelpFormatter
    )
    parser.add_argument(
        '--videos-dir',
        type=str,
        default=None,
        help=f'Storage directory (default: {config.videos_dir})'
    )
    subparsers = parser.add_subparsers(dest='command', required=True)

    scan_parser = subparsers.add_parser('scan', help='List clips and recaps')
    scan_parser.set_defaults(func=cmd_scan)

    run_parser = subparsers.add_parser('run', help='Generate any recaps that are due')
    run_parser.add_argument('--kind', choices=['weekly', 'monthly'], help='Only check one kind')
    run_parser.add_argument('--now', type=datetime.fromisoformat,
                            help='Reference time in ISO format (default: now)')
    run_parser.set_defaults(func=cmd_run)

    today_parser = subparsers.add_parser('today', help="Show whether today's video is recorded")
    today_parser.set_defaults(func=cmd_today)

    delete_parser = subparsers.add_parser('delete', help='Delete a daily clip')
    delete_parser.add_argument('file', help='Clip filename')
    delete_parser.set_defaults(func=cmd_delete)

    serve_parser = subparsers.add_parser('serve', help='Run the HTTP API')
    serve_parser.add_argument('--host', default=config.api_host)
    serve_parser.add_argument('--port', type=int, default=config.api_port)
    serve_parser.set_defaults(func=cmd_serve)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        return args.func(args)
    except Exception as e:
        logger.error(f"An error occurred: {e}")
        raise


if __name__ == "__main__":
    sys.exit(main())
