"""initial food catalog schema

Revision ID: 0001
Revises:
Create Date: 2025-09-13 12:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

NUTRIENT_COLUMNS = (
    "glycemic_index", "energy", "carbohydrate", "protein", "fat", "saturated_fat",
    "trans_fat", "sugar", "fiber", "water", "cholesterol", "sodium", "potassium",
    "iron", "magnesium", "calcium", "zinc", "vitamin_a", "vitamin_b6",
    "vitamin_b12", "vitamin_c", "vitamin_d", "vitamin_e", "vitamin_k",
)


def _lookup_table(name: str, column: str) -> None:
    op.create_table(
        name,
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(column, sa.String(), nullable=False, unique=True),
    )


def upgrade() -> None:
    _lookup_table("food_sources", "description")
    _lookup_table("food_images", "image_url")
    _lookup_table("tags", "description")
    _lookup_table("allergens", "description")
    _lookup_table("serving_descriptions", "description")

    op.create_table(
        "foods",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("slug", sa.String(), nullable=False, unique=True),
        sa.Column("description", sa.String(), nullable=False, unique=True),
        sa.Column("verified", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("image_id", sa.Integer(), sa.ForeignKey("food_images.id"), nullable=False),
        sa.Column("source_id", sa.Integer(), sa.ForeignKey("food_sources.id"), nullable=False),
        *[sa.Column(name, sa.Float(), nullable=False) for name in NUTRIENT_COLUMNS],
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.current_timestamp()),
        sa.Column("updated_at", sa.DateTime(), nullable=False, server_default=sa.func.current_timestamp()),
    )

    op.create_table(
        "food_tags",
        sa.Column("food_id", sa.Integer(), sa.ForeignKey("foods.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("tag_id", sa.Integer(), sa.ForeignKey("tags.id", ondelete="CASCADE"), primary_key=True),
    )
    op.create_table(
        "food_allergens",
        sa.Column("food_id", sa.Integer(), sa.ForeignKey("foods.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("allergen_id", sa.Integer(), sa.ForeignKey("allergens.id", ondelete="CASCADE"), primary_key=True),
    )
    op.create_table(
        "food_servings",
        sa.Column("food_id", sa.Integer(), sa.ForeignKey("foods.id", ondelete="CASCADE"), primary_key=True),
        sa.Column(
            "serving_description_id", sa.Integer(),
            sa.ForeignKey("serving_descriptions.id", ondelete="CASCADE"), primary_key=True,
        ),
        sa.Column("weight", sa.Float(), nullable=False),
    )

    # Out-of-band edits go straight to SQLite, so the store keeps updated_at itself
    op.execute(
        """
        CREATE TRIGGER foods_touch_updated_at
        AFTER UPDATE ON foods
        FOR EACH ROW
        BEGIN
            UPDATE foods SET updated_at = CURRENT_TIMESTAMP WHERE id = NEW.id;
        END
        """
    )


def downgrade() -> None:
    raise NotImplementedError("Migrations are forward-only")
