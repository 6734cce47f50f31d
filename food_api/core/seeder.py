"""
core/seeder.py – FoodSeeder class.
One-shot startup load of JSON seed files into the store.

The store is authoritative: existing rows are never overwritten, duplicates
are skipped with a warning and any other failure is logged without aborting.
"""
import json
import logging
from dataclasses import dataclass
from pathlib import Path

from pydantic import TypeAdapter, ValidationError

from ..models import FoodItem
from .errors import AlreadyExists
from .store import FoodStore

logger = logging.getLogger(__name__)

_food_list = TypeAdapter(list[FoodItem])


@dataclass
class SeedReport:
    inserted: int = 0
    skipped: int = 0
    failed: int = 0


class FoodSeeder:

    def __init__(self, store: FoodStore, seed_dir: str | Path) -> None:
        self._store = store
        self._seed_dir = Path(seed_dir)

    # ── Public API ─────────────────────────────────────────────────────────────

    def load_seed_files(self) -> list[FoodItem]:
        """Parse every file in the seed directory (name order) as a JSON array of foods."""
        if not self._seed_dir.is_dir():
            logger.warning(f"Seed directory {self._seed_dir} not found, nothing to seed.")
            return []

        foods: list[FoodItem] = []
        for path in sorted(p for p in self._seed_dir.iterdir() if p.is_file()):
            try:
                data = json.loads(path.read_text(encoding="utf-8"))
                foods.extend(_food_list.validate_python(data))
            except (OSError, UnicodeDecodeError) as e:
                logger.warning(f"Could not read seed file {path.name}: {e}")
            except (json.JSONDecodeError, ValidationError) as e:
                logger.warning(f"{path.name} is not a valid array of foods, skipping: {e}")
        return foods

    async def run(self) -> SeedReport:
        report = SeedReport()
        for food in self.load_seed_files():
            try:
                inserted = await self._store.insert_food(food)
            except AlreadyExists as e:
                logger.warning(str(e))
                report.skipped += 1
            except Exception as e:
                logger.error(f"Could not seed {food.description!r}: {e}")
                report.failed += 1
            else:
                logger.info(f"Seeded {food.description!r} with id {inserted.id}.")
                report.inserted += 1

        logger.info(
            f"Seeding done: {report.inserted} inserted, "
            f"{report.skipped} already present, {report.failed} failed."
        )
        return report
