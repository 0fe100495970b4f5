"""
Plant catalog reader.

The catalog is a static JSON array of plant records. It is read from disk on
every query; there is no in-process cache to invalidate.
"""

import json
from pathlib import Path
from typing import Dict, List, Optional

from pydantic import ValidationError as PydanticValidationError

from errors import InternalError, NotFound
from log import logger
from schemas import PlantRecord

FILTER_FIELDS = ("maintenance", "sunlight", "climate", "soilType", "toxicity", "wateringFrequency")


def load_plants(path: Path) -> List[dict]:
    try:
        with open(path, encoding="utf-8") as fh:
            data = json.load(fh)
    except (OSError, ValueError) as e:
        logger.error(f"Failed to load plant data from {path}: {e}")
        raise InternalError("Failed to load plant data")
    if not isinstance(data, list):
        logger.error(f"Plant data in {path} is not a JSON array")
        raise InternalError("Failed to load plant data")
    return data


def _record(plant: dict) -> PlantRecord:
    try:
        return PlantRecord.model_validate(plant)
    except PydanticValidationError as e:
        logger.error(f"Invalid plant record {plant!r}: {e}")
        raise InternalError("Failed to load plant data")


def filter_plants(path: Path, filters: Optional[Dict[str, Optional[str]]] = None) -> List[PlantRecord]:
    """Exact-match AND over the given filters; empty values do not constrain."""
    active = {k: v for k, v in (filters or {}).items() if k in FILTER_FIELDS and v}
    return [
        _record(plant)
        for plant in load_plants(path)
        if all(plant.get(field) == value for field, value in active.items())
    ]


def find_plant(path: Path, name: str) -> PlantRecord:
    wanted = name.strip().lower()
    for plant in load_plants(path):
        if str(plant.get("name", "")).lower() == wanted:
            return _record(plant)
    raise NotFound("Plant not found")
