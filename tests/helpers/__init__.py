"""Test helper utilities."""

from .console import assert_console_contains, assert_console_omits, capture_console_output
from .factories import (
    make_file_tree,
    make_static_reference,
    make_type_reference,
)
from .temp_files import temp_json_file

__all__ = [
    "assert_console_contains",
    "assert_console_omits",
    "capture_console_output",
    "make_file_tree",
    "make_static_reference",
    "make_type_reference",
    "temp_json_file",
]
