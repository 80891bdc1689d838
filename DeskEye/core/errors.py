"""
Exception hierarchy for DeskEye.

Per-frame problems (no face, degenerate geometry, detector hiccups) are not
exceptions: they are logged and the frame is dropped. These classes cover
configuration, storage and model loading.
"""
from __future__ import annotations


class DeskEyeError(Exception):
    """Base class for all DeskEye errors."""


class SettingsError(DeskEyeError):
    """A configuration value is missing or out of range."""


class StorageError(DeskEyeError):
    """The metric store could not be written."""


class ModelError(DeskEyeError):
    """A strain model file is missing or cannot be loaded."""
