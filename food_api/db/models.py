"""
db/models.py – SQLAlchemy ORM mapping for the food catalog.

The schema itself is created by the Alembic scripts in db/migrations;
keep both in sync.
"""
from sqlalchemy import (
    Boolean, Column, DateTime, Float, ForeignKey, Integer, String, Table, func,
)
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass


# ── Lookup tables (deduplicated by description / url) ─────────────────────────

class FoodSource(Base):
    __tablename__ = "food_sources"

    id          = Column(Integer, primary_key=True, autoincrement=True)
    description = Column(String, unique=True, nullable=False)


class FoodImage(Base):
    __tablename__ = "food_images"

    id        = Column(Integer, primary_key=True, autoincrement=True)
    image_url = Column(String, unique=True, nullable=False)


class Tag(Base):
    __tablename__ = "tags"

    id          = Column(Integer, primary_key=True, autoincrement=True)
    description = Column(String, unique=True, nullable=False)  # always lowercase


class Allergen(Base):
    __tablename__ = "allergens"

    id          = Column(Integer, primary_key=True, autoincrement=True)
    description = Column(String, unique=True, nullable=False)  # always lowercase


class ServingDescription(Base):
    __tablename__ = "serving_descriptions"

    id          = Column(Integer, primary_key=True, autoincrement=True)
    description = Column(String, unique=True, nullable=False)  # case preserved


# ── Food ───────────────────────────────────────────────────────────────────────

class Food(Base):
    __tablename__ = "foods"

    id          = Column(Integer, primary_key=True, autoincrement=True)
    slug        = Column(String, unique=True, nullable=False)
    description = Column(String, unique=True, nullable=False)
    verified    = Column(Boolean, nullable=False, default=True)
    image_id    = Column(Integer, ForeignKey("food_images.id"), nullable=False)
    source_id   = Column(Integer, ForeignKey("food_sources.id"), nullable=False)

    glycemic_index = Column(Float, nullable=False)
    energy         = Column(Float, nullable=False)
    carbohydrate   = Column(Float, nullable=False)
    protein        = Column(Float, nullable=False)
    fat            = Column(Float, nullable=False)
    saturated_fat  = Column(Float, nullable=False)
    trans_fat      = Column(Float, nullable=False)
    sugar          = Column(Float, nullable=False)
    fiber          = Column(Float, nullable=False)
    water          = Column(Float, nullable=False)
    cholesterol    = Column(Float, nullable=False)
    sodium         = Column(Float, nullable=False)
    potassium      = Column(Float, nullable=False)
    iron           = Column(Float, nullable=False)
    magnesium      = Column(Float, nullable=False)
    calcium        = Column(Float, nullable=False)
    zinc           = Column(Float, nullable=False)
    vitamin_a      = Column(Float, nullable=False)
    vitamin_b6     = Column(Float, nullable=False)
    vitamin_b12    = Column(Float, nullable=False)
    vitamin_c      = Column(Float, nullable=False)
    vitamin_d      = Column(Float, nullable=False)
    vitamin_e      = Column(Float, nullable=False)
    vitamin_k      = Column(Float, nullable=False)

    created_at = Column(DateTime, nullable=False, server_default=func.current_timestamp())
    updated_at = Column(DateTime, nullable=False, server_default=func.current_timestamp())

    def __repr__(self) -> str:
        return f"<Food id={self.id} slug={self.slug!r}>"


# ── Link tables ────────────────────────────────────────────────────────────────

food_tags = Table(
    "food_tags",
    Base.metadata,
    Column("food_id", Integer, ForeignKey("foods.id", ondelete="CASCADE"), primary_key=True),
    Column("tag_id", Integer, ForeignKey("tags.id", ondelete="CASCADE"), primary_key=True),
)

food_allergens = Table(
    "food_allergens",
    Base.metadata,
    Column("food_id", Integer, ForeignKey("foods.id", ondelete="CASCADE"), primary_key=True),
    Column("allergen_id", Integer, ForeignKey("allergens.id", ondelete="CASCADE"), primary_key=True),
)

food_servings = Table(
    "food_servings",
    Base.metadata,
    Column("food_id", Integer, ForeignKey("foods.id", ondelete="CASCADE"), primary_key=True),
    Column(
        "serving_description_id", Integer,
        ForeignKey("serving_descriptions.id", ondelete="CASCADE"), primary_key=True,
    ),
    Column("weight", Float, nullable=False),
)
