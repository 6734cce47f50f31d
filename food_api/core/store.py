"""
core/store.py – FoodStore class.
Persistence for foods and their normalized side tables (SQLite via SQLAlchemy).

Public methods are async; the blocking SQLAlchemy work runs in the default
executor so the event loop stays free. Writes are serialized by a lock,
reads run concurrently on the engine's pool.
"""
import asyncio
import json
import logging
import threading
from typing import Optional

from slugify import slugify
from sqlalchemy import func, select, text
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..db.models import (
    Allergen, Food, FoodImage, FoodSource, ServingDescription, Tag,
    food_allergens, food_servings, food_tags,
)
from ..db.session import db_session, get_engine
from ..models import NUTRIENT_FIELDS, FoodItem
from .errors import AlreadyExists, NotFound, StoreFailure

logger = logging.getLogger(__name__)


def make_slug(description: str) -> str:
    """Fuji Elma → fuji-elma, Çiğ Köfte → cig-kofte."""
    return slugify(description)


# ── Hydration query ────────────────────────────────────────────────────────────
# One row per food: tags, allergens and servings are folded into JSON by
# correlated subqueries, so a whole result set costs a single round-trip.

_tags_json = (
    select(func.json_group_array(Tag.description))
    .join_from(Tag, food_tags, Tag.id == food_tags.c.tag_id)
    .where(food_tags.c.food_id == Food.id)
    .correlate(Food)
    .scalar_subquery()
)

_allergens_json = (
    select(func.json_group_array(Allergen.description))
    .join_from(Allergen, food_allergens, Allergen.id == food_allergens.c.allergen_id)
    .where(food_allergens.c.food_id == Food.id)
    .correlate(Food)
    .scalar_subquery()
)

_servings_json = (
    select(func.json_group_object(ServingDescription.description, food_servings.c.weight))
    .join_from(
        ServingDescription, food_servings,
        ServingDescription.id == food_servings.c.serving_description_id,
    )
    .where(food_servings.c.food_id == Food.id)
    .correlate(Food)
    .scalar_subquery()
)


def _food_select():
    return (
        select(
            Food,
            FoodImage.image_url,
            FoodSource.description,
            _tags_json,
            _allergens_json,
            _servings_json,
        )
        .outerjoin(FoodImage, FoodImage.id == Food.image_id)
        .outerjoin(FoodSource, FoodSource.id == Food.source_id)
        .order_by(Food.id)
    )


class FoodStore:
    """Async facade over the SQLite food catalog."""

    def __init__(self, database_url: str) -> None:
        self._database_url = database_url
        self._write_lock = threading.Lock()

    @property
    def database_url(self) -> str:
        return self._database_url

    @property
    def engine(self):
        return get_engine(self._database_url)

    # ── Public: Write ──────────────────────────────────────────────────────────

    async def insert_food(self, food: FoodItem) -> FoodItem:
        """Insert one food with its links in a single transaction.

        Raises AlreadyExists if the description (or its slug) is taken.
        """
        return await self._run(self._do_insert, food)

    # ── Public: Read ───────────────────────────────────────────────────────────

    async def food_exists_by_description(self, description: str) -> bool:
        return await self._run(self._do_exists, description)

    async def select_food_by_slug(self, slug: str) -> FoodItem:
        return await self._run(self._fetch_by_slug, slug)

    async def select_all_verified_slugs(self) -> list[str]:
        return await self._run(self._fetch_verified_slugs)

    async def select_all_tags(self) -> list[str]:
        return await self._run(self._fetch_tags)

    async def search_by_description_wild(self, q: str) -> list[FoodItem]:
        """Foods whose description contains `q` (SQLite LIKE, ASCII case-insensitive)."""
        return await self._run(self._fetch_by_description, q)

    async def search_by_tag_wild(self, q: str) -> list[FoodItem]:
        """Foods having at least one tag that contains `q`."""
        return await self._run(self._fetch_by_tag, q)

    async def ping(self) -> bool:
        try:
            await self._run(self._do_ping)
        except StoreFailure:
            return False
        return True

    # ── Private: executor bridge ──────────────────────────────────────────────

    async def _run(self, fn, *args):
        return await asyncio.get_event_loop().run_in_executor(None, self._guarded, fn, *args)

    @staticmethod
    def _guarded(fn, *args):
        try:
            return fn(*args)
        except SQLAlchemyError as e:
            raise StoreFailure(str(e)) from e

    # ── Private: insert ───────────────────────────────────────────────────────

    def _do_insert(self, food: FoodItem) -> FoodItem:
        with self._write_lock:
            try:
                with db_session(self._database_url) as session:
                    if self._exists(session, food.description):
                        raise AlreadyExists(f"{food.description!r} already exists, skipping insert")

                    source_id = self._resolve_id(session, FoodSource, "description", food.source)
                    image_id  = self._resolve_id(session, FoodImage, "image_url", food.image_url)
                    slug      = make_slug(food.description)
                    verified  = True if food.verified is None else food.verified

                    row = Food(
                        slug=slug,
                        description=food.description,
                        verified=verified,
                        image_id=image_id,
                        source_id=source_id,
                        **food.nutrients(),
                    )
                    session.add(row)
                    session.flush()

                    self._link_tags(session, row.id, food.tags)
                    self._link_allergens(session, row.id, food.allergens)
                    self._link_servings(session, row.id, food.servings)
                    food_id = row.id
            except IntegrityError as e:
                raise AlreadyExists(f"{food.description!r} conflicts with an existing food") from e

        return food.model_copy(update={"id": food_id, "slug": slug, "verified": verified})

    @staticmethod
    def _exists(session: Session, description: str) -> bool:
        stmt = select(Food.id).where(Food.description == description).limit(1)
        return session.execute(stmt).first() is not None

    @staticmethod
    def _resolve_id(session: Session, model, column: str, value: str) -> int:
        """INSERT OR IGNORE the lookup value, then return its id."""
        session.execute(sqlite_insert(model).values({column: value}).on_conflict_do_nothing())
        return session.execute(
            select(model.id).where(getattr(model, column) == value).limit(1)
        ).scalar_one()

    def _link_tags(self, session: Session, food_id: int, tags: list[str]) -> None:
        # Case folding is irreversible: tags are stored lowercase only
        for tag in tags:
            tag_id = self._resolve_id(session, Tag, "description", tag.lower())
            session.execute(
                sqlite_insert(food_tags).values(food_id=food_id, tag_id=tag_id).on_conflict_do_nothing()
            )

    def _link_allergens(self, session: Session, food_id: int, allergens: list[str]) -> None:
        for allergen in allergens:
            allergen_id = self._resolve_id(session, Allergen, "description", allergen.lower())
            session.execute(
                sqlite_insert(food_allergens)
                .values(food_id=food_id, allergen_id=allergen_id)
                .on_conflict_do_nothing()
            )

    def _link_servings(self, session: Session, food_id: int, servings: dict[str, float]) -> None:
        # "Portion (Medium)" is shared across foods, the weight lives on the link
        for description, weight in servings.items():
            serving_id = self._resolve_id(session, ServingDescription, "description", description)
            session.execute(
                sqlite_insert(food_servings)
                .values(food_id=food_id, serving_description_id=serving_id, weight=weight)
                .on_conflict_do_nothing()
            )

    # ── Private: read ─────────────────────────────────────────────────────────

    def _do_exists(self, description: str) -> bool:
        with db_session(self._database_url) as session:
            return self._exists(session, description)

    def _fetch_by_slug(self, slug: str) -> FoodItem:
        with db_session(self._database_url) as session:
            row = session.execute(_food_select().where(Food.slug == slug)).first()
        if row is None:
            raise NotFound(f"No food with slug {slug!r}")
        return self._row_to_item(row)

    def _fetch_verified_slugs(self) -> list[str]:
        with db_session(self._database_url) as session:
            stmt = select(Food.slug).where(Food.verified.is_(True)).order_by(Food.slug)
            return list(session.execute(stmt).scalars())

    def _fetch_tags(self) -> list[str]:
        with db_session(self._database_url) as session:
            return list(session.execute(select(Tag.description).order_by(Tag.id)).scalars())

    def _fetch_by_description(self, q: str) -> list[FoodItem]:
        like = f"%{q}%"
        with db_session(self._database_url) as session:
            rows = session.execute(_food_select().where(Food.description.ilike(like))).all()
        return [self._row_to_item(r) for r in rows]

    def _fetch_by_tag(self, q: str) -> list[FoodItem]:
        like = f"%{q}%"
        has_tag = (
            select(food_tags.c.food_id)
            .join(Tag, Tag.id == food_tags.c.tag_id)
            .where(food_tags.c.food_id == Food.id, Tag.description.ilike(like))
            .correlate(Food)
            .exists()
        )
        with db_session(self._database_url) as session:
            rows = session.execute(_food_select().where(has_tag)).all()
        return [self._row_to_item(r) for r in rows]

    def _do_ping(self) -> None:
        with db_session(self._database_url) as session:
            session.execute(text("SELECT 1")).one()

    # ── Private: Converters ────────────────────────────────────────────────────

    @staticmethod
    def _row_to_item(row) -> FoodItem:
        food, image_url, source, tags, allergens, servings = row
        servings_map: dict = json.loads(servings) if servings else {}
        return FoodItem(
            id=food.id,
            slug=food.slug,
            description=food.description,
            verified=bool(food.verified),
            image_url=image_url or "",
            source=source or "",
            tags=json.loads(tags) if tags else [],
            allergens=json.loads(allergens) if allergens else [],
            servings=dict(sorted(servings_map.items())),
            **{name: getattr(food, name) for name in NUTRIENT_FIELDS},
        )

    def __repr__(self) -> str:
        return f"<FoodStore url={self._database_url!r}>"
