"""DeskEye: webcam eye-strain monitor with break reminders."""

__version__ = "0.3.0"
