import json
import logging
from typing import Any

logger = logging.getLogger(__name__)


def read_json_file(filepath: str, default: Any = None) -> Any:
    """
    Reads a JSON file and returns its content.
    Returns ``default`` if the file doesn't exist or is empty; a file that
    exists but is not valid JSON raises ``ValueError``.
    """
    try:
        with open(filepath, 'r', encoding='utf-8') as f:
            content = f.read()
    except FileNotFoundError:
        logger.warning("%s does not exist", filepath)
        return default
    if not content.strip():
        return default
    try:
        return json.loads(content)
    except json.JSONDecodeError as e:
        raise ValueError(f"Could not decode JSON from {filepath}: {e}") from e


def write_json_file(filepath: str, data: Any):
    """
    Writes the data to the JSON file with an indent for readability.
    """
    with open(filepath, 'w', encoding='utf-8') as f:
        json.dump(data, f, indent=4, default=str)
