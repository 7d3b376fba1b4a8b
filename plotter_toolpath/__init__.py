"""
Plotter Toolpath Package.

Planning and program emission for pen-plotter / CNC drawings. Takes a
finished vector model (nested paths with local origins), discovers
continuous strokes, reorders them to reduce pen-up travel and writes a
G-code program for one of the supported machine dialects.

Subpackages:
    model: Path primitives, vector model tree, document loading
    planning: Chain discovery, consolidation, orphans, parallel fields, ordering
    gcode: Post-processor dialects, program emission, stats estimation
    configs: Configuration loading and validation
    scripts: Command-line entry points
"""

import logging

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = ["model", "planning", "gcode", "configs", "scripts"]
