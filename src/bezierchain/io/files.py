"""
File helpers for bezierchain.

Reads and writes collections as JSON and share strings as plain text.
"""

import json
import os

from bezierchain.models import CurveCollection
from bezierchain.serialize.share_string import parse_url_fragment
from bezierchain.tracer import get_tracer


def ensure_dir(path):
    """Create directory if it does not exist."""
    if path:
        os.makedirs(path, exist_ok=True)


def save_json(data, path, indent=2):
    """
    Save a dictionary or Pydantic model to JSON.
    """
    ensure_dir(os.path.dirname(path))

    if hasattr(data, "model_dump"):
        data = data.model_dump(mode="json")

    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=indent, default=str)

    get_tracer().event(f"Saved JSON: {path}")


def load_json(path):
    if not os.path.exists(path):
        raise FileNotFoundError(f"JSON file not found: {path}")

    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def load_collection(path):
    """
    Load a CurveCollection from JSON.

    Accepts either a full collection object or a bare list of curves.
    """
    data = load_json(path)
    if isinstance(data, list):
        data = {"curves": data, "active_curve_index": len(data) - 1}
    return CurveCollection.model_validate(data)


def read_share_string(path):
    """Read a share string (or a URL carrying one) from a text file."""
    if not os.path.exists(path):
        raise FileNotFoundError(f"Share string file not found: {path}")

    with open(path, "r", encoding="utf-8") as f:
        return parse_url_fragment(f.read().strip())


def write_text(text, path):
    ensure_dir(os.path.dirname(path))

    with open(path, "w", encoding="utf-8") as f:
        f.write(text + "\n")

    get_tracer().event(f"Saved text: {path}")
