"""Configuration defaults, supported media formats, and run configuration.

WHY: Centralizes every configurable value so it is easy to find and
override. Defaults come from the environment (or a .env file) so a team
can pin its bucket and region once instead of passing flags every run.

HOW: python-dotenv loads the .env file on import. Module-level constants
hold the defaults. build_config() validates raw CLI values and returns a
frozen AppConfig that the pipeline passes to each collaborator.

RULES:
- Validation happens before any AWS call; failures raise ConfigError
- AppConfig is immutable and never stored in module-level state
- SUPPORTED_MEDIA_FORMATS maps file extensions to Transcribe MediaFormat
- All defaults can be overridden via environment variables
- Numeric and boolean environment values are parsed in build_config(),
  never at import time
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

# ---------------------------------------------------------------------------
# Supported audio/video file extensions → Transcribe MediaFormat
# ---------------------------------------------------------------------------

SUPPORTED_MEDIA_FORMATS: dict[str, str] = {
    ".amr": "amr",
    ".flac": "flac",
    ".m4a": "m4a",
    ".mp3": "mp3",
    ".mp4": "mp4",
    ".ogg": "ogg",
    ".wav": "wav",
    ".webm": "webm",
}

# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------

DEFAULT_BUCKET = os.getenv("TRANSCRIBE_BUCKET", "")
DEFAULT_REGION = os.getenv("AWS_REGION", "us-east-1")
DEFAULT_LANGUAGE_CODE = os.getenv("TRANSCRIBE_LANGUAGE_CODE", "en-US")

# Used when the matching TRANSCRIBE_* variable is unset; build_config()
# parses the variables.
DEFAULT_DIARIZATION = False
DEFAULT_MAX_SPEAKERS = 10
DEFAULT_POLL_INTERVAL_S = 10.0
DEFAULT_TIMEOUT_S = 3600.0

ENV_DIARIZATION = "TRANSCRIBE_DIARIZATION"
ENV_MAX_SPEAKERS = "TRANSCRIBE_MAX_SPEAKERS"
ENV_POLL_INTERVAL = "TRANSCRIBE_POLL_INTERVAL"
ENV_TIMEOUT = "TRANSCRIBE_TIMEOUT"

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES = frozenset({"0", "false", "no", "off", ""})

# Transcribe accepts 2-30 speakers for diarization.
MIN_SPEAKERS = 2
MAX_SPEAKERS = 30

_BUCKET_NAME_RE = re.compile(r"^[a-z0-9][a-z0-9.-]{1,61}[a-z0-9]$")


class ConfigError(ValueError):
    """Raised when command-line values or environment defaults are invalid."""


def env_number(name: str, default: float, kind: type = float) -> float:
    """Read a numeric setting from the environment.

    Raises:
        ConfigError: If the variable is set but not a ``kind`` literal.
    """
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return kind(raw.strip())
    except ValueError:
        raise ConfigError(
            "environment variable {} must be {}, got {!r}".format(
                name, "an integer" if kind is int else "a number", raw
            )
        ) from None


def env_flag(name: str, default: bool) -> bool:
    """Read a true/false setting from the environment."""
    raw = os.getenv(name)
    if raw is None:
        return default
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ConfigError("environment variable {} must be true or false, got {!r}".format(name, raw))


@dataclass(frozen=True)
class AppConfig:
    """Resolved parameters for one transcription run.

    RULES:
    - input_path points to an existing file with a supported extension
    - output_path's parent directory exists
    - max_speakers is only meaningful when diarization is True
    - timeout_s is None when polling has no deadline
    """

    input_path: Path
    output_path: Path
    bucket: str
    region: str = DEFAULT_REGION
    language_code: str = DEFAULT_LANGUAGE_CODE
    diarization: bool = False
    max_speakers: int = DEFAULT_MAX_SPEAKERS
    force: bool = False
    poll_interval_s: float = DEFAULT_POLL_INTERVAL_S
    timeout_s: float | None = DEFAULT_TIMEOUT_S

    @property
    def media_format(self) -> str:
        """Transcribe MediaFormat for the input file."""
        return SUPPORTED_MEDIA_FORMATS[self.input_path.suffix.lower()]


def validate_bucket_name(bucket: str) -> bool:
    """Return True if ``bucket`` is a syntactically valid S3 bucket name."""
    return bool(_BUCKET_NAME_RE.match(bucket))


def build_config(
    input_path: str | None,
    output_path: str | None,
    bucket: str | None,
    region: str = DEFAULT_REGION,
    language_code: str = DEFAULT_LANGUAGE_CODE,
    diarization: bool | None = None,
    max_speakers: int | None = None,
    force: bool = False,
    poll_interval_s: float | None = None,
    timeout_s: float | None = None,
) -> AppConfig:
    """Validate raw values and build an AppConfig.

    WHY: Bad flags should fail fast, before anything is uploaded or
    billed.

    RULES:
    - input, output and bucket are required
    - diarization, max_speakers, poll_interval_s and timeout_s left as
      None are read from TRANSCRIBE_* environment variables, falling back
      to the DEFAULT_* constants
    - A timeout of 0 means no deadline
    - Raises ConfigError with a message naming the offending value

    Returns:
        A frozen AppConfig ready for the pipeline.
    """
    if diarization is None:
        diarization = env_flag(ENV_DIARIZATION, DEFAULT_DIARIZATION)
    if max_speakers is None:
        max_speakers = env_number(ENV_MAX_SPEAKERS, DEFAULT_MAX_SPEAKERS, int)
    if poll_interval_s is None:
        poll_interval_s = env_number(ENV_POLL_INTERVAL, DEFAULT_POLL_INTERVAL_S)
    if timeout_s is None:
        timeout_s = env_number(ENV_TIMEOUT, DEFAULT_TIMEOUT_S)

    missing = [
        name
        for name, value in (("input file", input_path), ("output file", output_path), ("bucket", bucket))
        if not value
    ]
    if missing:
        raise ConfigError("missing required value(s): {}".format(", ".join(missing)))

    source = Path(input_path).expanduser()
    if not source.is_file():
        raise ConfigError("input file not found: {}".format(source))

    ext = source.suffix.lower()
    if ext not in SUPPORTED_MEDIA_FORMATS:
        raise ConfigError(
            "unsupported input file type '{}'. Supported formats: {}".format(
                ext, ", ".join(sorted(SUPPORTED_MEDIA_FORMATS))
            )
        )

    target = Path(output_path).expanduser()
    if not target.parent.is_dir():
        raise ConfigError("output directory does not exist: {}".format(target.parent))

    if not validate_bucket_name(bucket):
        raise ConfigError("invalid bucket name {!r}".format(bucket))

    if diarization and not MIN_SPEAKERS <= max_speakers <= MAX_SPEAKERS:
        raise ConfigError(
            "max speakers must be between {} and {}, got {}".format(
                MIN_SPEAKERS, MAX_SPEAKERS, max_speakers
            )
        )

    if poll_interval_s <= 0:
        raise ConfigError("poll interval must be positive, got {}".format(poll_interval_s))

    if timeout_s < 0:
        raise ConfigError("timeout must not be negative, got {}".format(timeout_s))

    return AppConfig(
        input_path=source,
        output_path=target,
        bucket=bucket,
        region=region,
        language_code=language_code,
        diarization=diarization,
        max_speakers=max_speakers,
        force=force,
        poll_interval_s=poll_interval_s,
        timeout_s=timeout_s or None,
    )
