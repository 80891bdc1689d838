"""Thin launcher: `python run.py [--mode headless ...]` forwards to DeskEye.app.main."""
import os
import sys

# Ensure project root is on sys.path for module imports
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

if os.name == "nt":
    os.environ.setdefault("QT_ENABLE_HIGHDPI_SCALING", "1")
    os.environ.setdefault("QT_SCALE_FACTOR_ROUNDING_POLICY", "PassThrough")

from DeskEye.app import main

if __name__ == "__main__":
    raise SystemExit(main())
