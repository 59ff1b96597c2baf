"""
Upload parsers module.
"""

from parsers.upload_parser import (
    parse_upload,
    collect_columns,
    ParsedUpload,
)

__all__ = [
    "parse_upload",
    "collect_columns",
    "ParsedUpload",
]
