"""File input and output for documents, configs and G-code programs.

Readers:
    load_yaml(path)       config files and YAML model documents
    load_json(path)       JSON model documents
    load_document(path)   picks the reader from the file suffix

Writer:
    atomic_write_text(path, program)
        The program goes to a hidden sibling temp file first and is moved
        over the target only once it is complete, so a sender polling the
        output directory never streams a truncated job.

Usage:
    from plotter_toolpath import fs
    cfg = fs.load_yaml("plotter.yaml")
    fs.atomic_write_text("out/drawing.gcode", program)
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Any, Union

import yaml

YAML_SUFFIXES = (".yaml", ".yml")


def _existing(path: Union[str, Path], kind: str) -> Path:
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"{kind} file not found: {path}")
    return path


def load_yaml(path: Union[str, Path]) -> Any:
    """Parse a YAML file with ``yaml.safe_load``.

    Returns ``None`` for an empty file.

    Raises
    ------
    FileNotFoundError
        If *path* is not a file.
    yaml.YAMLError
        If the text is not valid YAML; the message names the file.
    """
    path = _existing(path, "YAML")
    text = path.read_text(encoding="utf-8")
    try:
        return yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise yaml.YAMLError(f"Failed to parse YAML file {path}: {e}") from e


def load_json(path: Union[str, Path]) -> Any:
    """Parse a JSON file.

    Raises
    ------
    FileNotFoundError
        If *path* is not a file.
    json.JSONDecodeError
        If the text is not valid JSON.
    """
    path = _existing(path, "JSON")
    return json.loads(path.read_text(encoding="utf-8"))


def load_document(path: Union[str, Path]) -> Any:
    """Read a model document: YAML for ``.yaml``/``.yml``, JSON otherwise."""
    if Path(path).suffix.lower() in YAML_SUFFIXES:
        return load_yaml(path)
    return load_json(path)


def atomic_write_text(
    path: Union[str, Path],
    text: str,
    encoding: str = "utf-8",
) -> Path:
    """Write *text* to *path* through a temp file in the same directory.

    Missing parent directories are created.  An existing target is
    replaced in one ``os.replace`` step.

    Returns
    -------
    Path
        The written path.

    Raises
    ------
    RuntimeError
        If the file cannot be written; the temp file is removed first.
    """
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=path.parent, prefix=f".{path.name}.", suffix=".part",
        )
    except OSError as e:
        raise RuntimeError(f"Cannot write {path}: {e}") from e

    try:
        with os.fdopen(fd, "w", encoding=encoding, newline="") as f:
            f.write(text)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_name, path)
    except OSError as e:
        Path(tmp_name).unlink(missing_ok=True)
        raise RuntimeError(f"Cannot write {path}: {e}") from e
    return path
