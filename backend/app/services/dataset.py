"""Bundled JSON dataset used when the database is disabled."""
import json
import logging
from pathlib import Path
from typing import Dict, List

logger = logging.getLogger(__name__)

DATA_DIR = Path(__file__).parent.parent / "data"


def load_dataset(name: str) -> List[Dict]:
    """Load app/data/<name>.json as a list of records."""
    data_file = DATA_DIR / f"{name}.json"
    with open(data_file, "r") as f:
        records = json.load(f)
    logger.debug(f"Loaded {len(records)} records from {data_file.name}")
    return records
