"""Export JSON schemas for the itinerary service contract and edit batches."""

import json
from pathlib import Path

from tripsync.models import ItineraryRequest, ItineraryResponse, ModificationBatch


def main() -> None:
    """Export schemas to docs/schemas/."""
    schemas_dir = Path("docs/schemas")
    schemas_dir.mkdir(parents=True, exist_ok=True)

    for model in (ItineraryRequest, ItineraryResponse, ModificationBatch):
        path = schemas_dir / f"{model.__name__}.schema.json"
        with open(path, "w") as f:
            json.dump(model.model_json_schema(), f, indent=2)
        print(f"Exported {model.__name__} schema to {path}")


if __name__ == "__main__":
    main()
