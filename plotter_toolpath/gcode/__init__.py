"""
G-code module.

Dialect post-processors, program emission (single and multi-layer) and
the stats estimator.  All drawing-to-machine transforms happen here.
"""

from plotter_toolpath.gcode.generator import (
    GCodeError,
    ToolpathError,
    ToolpathExporter,
    generate_gcode,
    generate_gcode_for_layers,
    machine_polyline,
)
from plotter_toolpath.gcode.postprocessors import (
    LinuxCNCPostProcessor,
    PostProcessor,
    RepRapPostProcessor,
    StandardPostProcessor,
    file_extension,
    get_post_processor,
)
from plotter_toolpath.gcode.stats import (
    ToolpathStats,
    estimate_layer_stats,
    estimate_stats,
)

__all__ = [
    "GCodeError",
    "LinuxCNCPostProcessor",
    "PostProcessor",
    "RepRapPostProcessor",
    "StandardPostProcessor",
    "ToolpathError",
    "ToolpathExporter",
    "ToolpathStats",
    "estimate_layer_stats",
    "estimate_stats",
    "file_extension",
    "generate_gcode",
    "generate_gcode_for_layers",
    "get_post_processor",
    "machine_polyline",
]
