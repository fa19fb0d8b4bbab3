"""Content addressing and the decoded transcription result model.

WHY: The core package holds the parts of the tool that know nothing
about AWS: how file content maps to remote names, and what a
Transcribe result document looks like once decoded.

HOW: fingerprint.py derives storage keys and job names from a content
hash; models.py validates and decodes the result JSON into frozen
dataclasses consumed by every formatter.

RULES:
- No boto3 imports in this package
- Models are immutable once decoded
"""
