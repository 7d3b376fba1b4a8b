#!/usr/bin/env python3
"""
Export G-code Script.

Plan and write a plotter program for a vector model document, or print
its stats.

Usage:
    python -m plotter_toolpath.scripts.export_gcode drawing.json
    python -m plotter_toolpath.scripts.export_gcode drawing.json -d linuxcnc
    python -m plotter_toolpath.scripts.export_gcode drawing.json --layers -o out/plot
    python -m plotter_toolpath.scripts.export_gcode drawing.json --stats

The output file gets the extension of the selected dialect (``.ngc`` for
LinuxCNC, ``.gcode`` otherwise) and is written atomically.
"""

from __future__ import annotations

import argparse
import dataclasses
import json
import logging
import sys
from pathlib import Path

from plotter_toolpath import fs
from plotter_toolpath.configs.loader import ConfigError, Dialect, load_config
from plotter_toolpath.gcode.generator import ToolpathError, ToolpathExporter
from plotter_toolpath.gcode.stats import estimate_layer_stats, estimate_stats
from plotter_toolpath.logging_config import setup_logging
from plotter_toolpath.model.schema import ModelError, load_layers, load_model

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Export a vector model as a plotter G-code program",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=f"Dialects: {', '.join(d.value for d in Dialect)}",
    )
    parser.add_argument(
        "model",
        type=str,
        help="Vector model document (JSON or YAML)",
    )
    parser.add_argument(
        "--config",
        "-c",
        type=str,
        help="Configuration file path (default: shipped default.yaml)",
    )
    parser.add_argument(
        "--dialect",
        "-d",
        type=str,
        choices=[d.value for d in Dialect],
        help="Dialect override",
    )
    parser.add_argument(
        "--layers",
        action="store_true",
        help="Export top-level sub-models as separate layers",
    )
    parser.add_argument(
        "--stats",
        action="store_true",
        help="Print stats as JSON instead of writing a program",
    )
    parser.add_argument(
        "--output",
        "-o",
        type=str,
        help="Output file (default: model name next to the model file)",
    )
    return parser


def output_path(model_path: Path, output: str | None, extension: str) -> Path:
    """Resolve the program file name; the dialect extension always wins."""
    target = Path(output) if output else model_path
    return target.with_suffix(extension)


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    # Load config
    try:
        config = load_config(args.config)
        if args.dialect:
            config = dataclasses.replace(config, dialect=Dialect.parse(args.dialect))
    except (ConfigError, FileNotFoundError) as e:
        print(f"Error loading config: {e}", file=sys.stderr)
        return 1

    setup_logging(
        config.log.level,
        config.log.fmt_mode,
        config.log.log_file,
        context={"dialect": config.dialect.value},
    )

    # Load model
    model_path = Path(args.model)
    try:
        if args.layers:
            source = load_layers(model_path)
        else:
            source = load_model(model_path)
    except (ModelError, FileNotFoundError) as e:
        logger.error("Error loading model: %s", e)
        return 1

    try:
        if args.stats:
            if args.layers:
                stats = estimate_layer_stats(source, config)
            else:
                stats = estimate_stats(source, config)
            summary = stats.to_dict()
            summary["estimatedSeconds"] = stats.estimated_seconds(
                config.feeds.feed_rate, config.feeds.travel_rate,
            )
            print(json.dumps(summary, indent=2))
            return 0

        exporter = ToolpathExporter(config)
        if args.layers:
            program = exporter.export_layers(source)
        else:
            program = exporter.export(source)
    except ToolpathError as e:
        logger.error("%s", e)
        return 1

    out = output_path(model_path, args.output, exporter.file_extension)
    try:
        fs.atomic_write_text(out, program + "\n")
    except RuntimeError as e:
        logger.error("%s", e)
        return 1

    logger.info("Wrote %s", out)
    return 0


if __name__ == "__main__":
    sys.exit(main())
