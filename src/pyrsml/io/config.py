"""
Reader configuration for RSML loading.

A single dataclass carries every knob of the reading pipeline so the
temporal/snapshot choice and the clock used for undated files are passed
explicitly at the call boundary instead of living in module state.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Callable

from pyrsml.io.dates import DATE_FORMATS, DATE_PATTERNS


@dataclass(frozen=True)
class ReaderConfig:
    """
    Configuration for :class:`~pyrsml.io.rsml_reader.RSMLReader` and
    :class:`~pyrsml.io.model_loader.RootModelLoader`.

    Attributes:
        temporal: Read spatio-temporal points (``coord_x``, ``coord_t``, ...)
            and build a date-indexed series; otherwise read plain ``x``/``y``
            points into a single snapshot
        date_formats: ``strptime`` formats tried when parsing a date string
        date_patterns: Regular expressions locating date-shaped substrings
        clock: Returns "now"; used for undated files and ``today`` dates
        unknown_label: Placeholder for missing property definition parts
    """

    temporal: bool = False
    date_formats: tuple[str, ...] = DATE_FORMATS
    date_patterns: tuple[str, ...] = DATE_PATTERNS
    clock: Callable[[], datetime] = field(default=datetime.now, compare=False)
    unknown_label: str = "Unknown"

    def with_temporal(self, temporal: bool) -> ReaderConfig:
        """Return a copy with the temporal flag replaced."""
        return replace(self, temporal=temporal)
