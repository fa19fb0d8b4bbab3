"""Command-line interface for Transcribe Meetings.

WHY: Users need a single command that takes a recording and leaves a
transcript next to it. The CLI wires together flag parsing, validation,
AWS client construction and the async pipeline, and maps outcomes to
exit codes.

HOW: argparse builds the flag surface (defaults from config / .env).
build_config() validates before any AWS call. boto3 clients are created
from one Session for the chosen region and wrapped in the services. The
pipeline runs under asyncio.run(); status messages go to stderr.

RULES:
- Flags mirror the short forms -f -o -b -r -l -d -m -v
- Validation errors exit 1 before anything is uploaded
- Cancelled runs (Ctrl-C or --timeout) exit 130 and write nothing
- Status output goes to stderr (not stdout)
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from typing import List, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from transcribe_meetings import __commit__, __version__
from transcribe_meetings.aws.s3 import S3Service
from transcribe_meetings.aws.transcribe import JobOutcome, TranscribeService
from transcribe_meetings.config import (
    DEFAULT_BUCKET,
    DEFAULT_LANGUAGE_CODE,
    DEFAULT_MAX_SPEAKERS,
    DEFAULT_POLL_INTERVAL_S,
    DEFAULT_REGION,
    DEFAULT_TIMEOUT_S,
    SUPPORTED_MEDIA_FORMATS,
    AppConfig,
    ConfigError,
    build_config,
)
from transcribe_meetings.pipeline import (
    PipelineResult,
    TranscriptionJobFailedError,
    run_pipeline,
)

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_CANCELLED = 130


def _status(msg: str) -> None:
    """Print a status message to stderr."""
    print(msg, file=sys.stderr, flush=True)


def _version_string() -> str:
    return "Version: {}\nCommit: {}".format(__version__, __commit__[:7])


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    # botocore at DEBUG dumps every request body, audio included.
    for name in ("boto3", "botocore", "urllib3"):
        logging.getLogger(name).setLevel(logging.WARNING)


def build_services(config: AppConfig) -> tuple:
    """Create the S3 and Transcribe services for ``config.region``."""
    session = boto3.Session(region_name=config.region)
    return (
        S3Service(session.client("s3")),
        TranscribeService(session.client("transcribe")),
    )


async def _run(config: AppConfig) -> PipelineResult:
    s3, transcriber = build_services(config)
    return await run_pipeline(config, s3, transcriber, on_status=_status)


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="transcribe-meetings",
        description="Transcribe an audio file with Amazon Transcribe and save the text. "
                    "Re-running on the same file reuses the upload and the job.",
    )

    parser.add_argument(
        "-f", "--file",
        dest="input_file",
        help="Path to the input audio file ({}).".format(
            ", ".join(sorted(SUPPORTED_MEDIA_FORMATS))
        ),
    )

    parser.add_argument(
        "-o", "--output",
        dest="output_file",
        help="Path to the output text file.",
    )

    parser.add_argument(
        "-b", "--bucket",
        default=DEFAULT_BUCKET or None,
        help="S3 bucket for the upload and the result (default: $TRANSCRIBE_BUCKET).",
    )

    parser.add_argument(
        "-r", "--region",
        default=DEFAULT_REGION,
        help="AWS region (default: %(default)s).",
    )

    parser.add_argument(
        "-l", "--language-code",
        default=DEFAULT_LANGUAGE_CODE,
        help="Language code for transcription (default: %(default)s).",
    )

    parser.add_argument(
        "-d", "--diarization",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Label paragraphs by speaker; --no-diarization turns it off "
             "for one run (default: $TRANSCRIBE_DIARIZATION, else off).",
    )

    parser.add_argument(
        "-m", "--max-speakers",
        type=int,
        default=None,
        help="Maximum number of speakers for diarization "
             "(default: $TRANSCRIBE_MAX_SPEAKERS, else {}).".format(DEFAULT_MAX_SPEAKERS),
    )

    parser.add_argument(
        "--force",
        action="store_true",
        help="Start a new transcription job even if one exists for this file.",
    )

    parser.add_argument(
        "--poll-interval",
        type=float,
        default=None,
        help="Seconds between job status checks "
             "(default: $TRANSCRIBE_POLL_INTERVAL, else {:g}).".format(DEFAULT_POLL_INTERVAL_S),
    )

    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Give up waiting for the job after this many seconds; 0 waits "
             "forever (default: $TRANSCRIBE_TIMEOUT, else {:g}).".format(DEFAULT_TIMEOUT_S),
    )

    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging.",
    )

    parser.add_argument(
        "-v", "--version",
        action="version",
        version=_version_string(),
        help="Print version and exit.",
    )

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for the CLI.

    RULES:
    - argv=None means use sys.argv (normal CLI invocation)
    - Explicit argv is for testing
    - Always exits via sys.exit with EXIT_OK, EXIT_ERROR or EXIT_CANCELLED
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    _setup_logging(args.verbose)

    if not args.input_file or not args.output_file or not args.bucket:
        parser.print_usage(sys.stderr)
        print("Error: -f, -o and -b are required", file=sys.stderr)
        sys.exit(EXIT_ERROR)

    try:
        config = build_config(
            input_path=args.input_file,
            output_path=args.output_file,
            bucket=args.bucket,
            region=args.region,
            language_code=args.language_code,
            diarization=args.diarization,
            max_speakers=args.max_speakers,
            force=args.force,
            poll_interval_s=args.poll_interval,
            timeout_s=args.timeout,
        )
    except ConfigError as e:
        print("Error: {}".format(e), file=sys.stderr)
        sys.exit(EXIT_ERROR)

    try:
        result = asyncio.run(_run(config))
    except KeyboardInterrupt:
        _status("\nCancelled by user.")
        sys.exit(EXIT_CANCELLED)
    except TranscriptionJobFailedError as e:
        print("Could not transcribe audio: {}".format(e), file=sys.stderr)
        if not config.force:
            print("Re-run with --force to start a new job.", file=sys.stderr)
        sys.exit(EXIT_ERROR)
    except (ClientError, BotoCoreError, ValueError, OSError) as e:
        logger.debug("Pipeline failed", exc_info=True)
        print("Could not transcribe audio: {}".format(e), file=sys.stderr)
        sys.exit(EXIT_ERROR)

    if result.outcome == JobOutcome.CANCELLED:
        _status("Cancelled: {}. No output written.".format(result.reason))
        sys.exit(EXIT_CANCELLED)

    sys.exit(EXIT_OK)


if __name__ == "__main__":
    main()
