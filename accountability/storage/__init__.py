"""Storage module - normalization helpers and file persistence."""

from accountability.storage.files import JsonFileSink, dump_json, write_text_atomic

__all__ = [
    "JsonFileSink",
    "dump_json",
    "write_text_atomic",
]
