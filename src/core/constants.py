"""Core constants used across TagTree modules.

This module centralizes wire-format limits and configuration defaults.
Keeping values here avoids magic literals in codec and store logic.
"""

from __future__ import annotations

BYTE_MIN = -(2**7)
BYTE_MAX = 2**7 - 1
SHORT_MIN = -(2**15)
SHORT_MAX = 2**15 - 1
INT_MIN = -(2**31)
INT_MAX = 2**31 - 1
LONG_MIN = -(2**63)
LONG_MAX = 2**63 - 1
FLOAT32_MAX = 3.4028234663852886e38
MAX_NAME_BYTES = 0xFFFF
ROOT_TAG_NAME = ""
DEFAULT_MAX_DEPTH = 256
# Encode and decode recurse about two interpreter frames per nesting level.
MAX_SUPPORTED_DEPTH = 256
DEFAULT_COMPRESSION = "none"
SUPPORTED_COMPRESSIONS = ("none", "gzip")
DEFAULT_DETACHED_SAVE_POLICY = "noop"
SUPPORTED_DETACHED_SAVE_POLICIES = ("noop", "error")
GZIP_COMPRESS_LEVEL = 6
TEMP_FILE_SUFFIX = ".tmp"
SNBT_INDENT = "  "
