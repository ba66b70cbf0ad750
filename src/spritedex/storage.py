"""
Flat JSON persistence for the stage files of the pipeline.

Every stage reads one complete input file and writes one complete output
file. Outputs are written atomically so a failed stage never leaves a
partial file behind.
"""

import json
import logging
from pathlib import Path
from typing import Any, Iterable, TypeVar

from pydantic import BaseModel, ValidationError

logger = logging.getLogger("spritedex")

ModelT = TypeVar("ModelT", bound=BaseModel)


class StageInputError(Exception):
    """Raised when a stage input file is missing or malformed.

    Fatal for the invoking stage only. The message is meant to be shown
    to the user as-is.
    """


def load_json(path: Path) -> Any:
    """Load a JSON document.

    Args:
        path: File to read

    Returns:
        The decoded document

    Raises:
        StageInputError: If the file is missing or not valid JSON
    """
    if not path.exists():
        raise StageInputError(f"File '{path}' not found")

    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        raise StageInputError(f"Invalid JSON in '{path}': {e}") from e


def write_json_atomic(path: Path, data: Any) -> None:
    """Write data to file atomically (write to temp, then rename).

    Args:
        path: Destination file
        data: JSON-serializable data
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    temp_file = path.with_name(path.name + ".tmp")
    try:
        with open(temp_file, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
        temp_file.replace(path)
    except Exception:
        if temp_file.exists():
            temp_file.unlink()
        raise
    logger.debug(f"Wrote {path}")


def dump_grouped(groups: dict[int, Iterable[BaseModel]]) -> dict[str, list[dict[str, Any]]]:
    """Serialize an ``id -> [model]`` mapping with ids in ascending numeric order."""
    return {
        str(creature_id): [item.model_dump(mode="json") for item in groups[creature_id]]
        for creature_id in sorted(groups)
    }


def load_grouped(path: Path, model: type[ModelT]) -> dict[int, list[ModelT]]:
    """Load an ``id -> [model]`` stage file.

    Args:
        path: Stage file to read
        model: Pydantic model each list item is validated against

    Returns:
        Mapping from integer creature id to the validated items, in file order

    Raises:
        StageInputError: If the file is missing, not JSON, or has the wrong shape
    """
    data = load_json(path)
    if not isinstance(data, dict):
        raise StageInputError(f"Expected a JSON object in '{path}', got {type(data).__name__}")

    groups: dict[int, list[ModelT]] = {}
    for raw_id, items in data.items():
        try:
            creature_id = int(raw_id)
        except ValueError as e:
            raise StageInputError(f"Invalid creature id '{raw_id}' in '{path}'") from e
        if not isinstance(items, list):
            raise StageInputError(f"Expected a list for creature id {raw_id} in '{path}'")
        try:
            groups[creature_id] = [model.model_validate(item) for item in items]
        except ValidationError as e:
            raise StageInputError(f"Malformed entry for creature id {raw_id} in '{path}': {e}") from e
    return groups
