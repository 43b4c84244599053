"""Response line helpers shared by the device adapters."""

import re
from typing import List, Optional

IMSI_REGEX = re.compile(r'([0-9]{5,15})')
IMEI_REGEX = re.compile(r'\+CGSN: ([0-9]{5,15})')
CCID_REGEX = re.compile(r'\+CCID: ([0-9]{5,20})')


def trim_quotes(value: str) -> str:
    """Strip one pair of surrounding double quotes, if present."""
    if len(value) >= 2 and value[0] == '"' and value[-1] == '"':
        return value[1:-1]
    return value


def strip_prefix(line: str, prefix: str) -> Optional[str]:
    """Return the rest of line after prefix, or None if it doesn't start with it."""
    if line.startswith(prefix):
        return line[len(prefix):]
    return None


def split_fields(value: str) -> List[str]:
    """Split a comma separated parameter list, trimming whitespace."""
    return [part.strip() for part in value.split(',')]
