"""
models.py – Pydantic schemas for seed records and responses.
"""
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

# Per-100g nutrition vector, in column/wire order
NUTRIENT_FIELDS: tuple[str, ...] = (
    "glycemic_index", "energy", "carbohydrate", "protein", "fat", "saturated_fat",
    "trans_fat", "sugar", "fiber", "water", "cholesterol", "sodium", "potassium",
    "iron", "magnesium", "calcium", "zinc", "vitamin_a", "vitamin_b6",
    "vitamin_b12", "vitamin_c", "vitamin_d", "vitamin_e", "vitamin_k",
)


# ── Food ───────────────────────────────────────────────────────────────────────

class FoodItem(BaseModel):
    """One catalog entry, as read from seed files and as served to clients.

    `id` and `slug` are assigned by the store; `verified` is None until the
    store resolves it (missing in a seed file means verified).
    """
    model_config = ConfigDict(extra="ignore", from_attributes=True)

    id: Optional[int] = None
    slug: Optional[str] = None
    description: str = Field(..., min_length=1)
    verified: Optional[bool] = None
    image_url: str = ""
    source: str = ""
    tags: list[str] = Field(default_factory=list)
    allergens: list[str] = Field(default_factory=list)
    servings: dict[str, float] = Field(default_factory=dict, description="{description: grams}")

    glycemic_index: float
    energy: float
    carbohydrate: float
    protein: float
    fat: float
    saturated_fat: float
    trans_fat: float
    sugar: float
    fiber: float
    water: float
    cholesterol: float
    sodium: float
    potassium: float
    iron: float
    magnesium: float
    calcium: float
    zinc: float
    vitamin_a: float
    vitamin_b6: float
    vitamin_b12: float
    vitamin_c: float
    vitamin_d: float
    vitamin_e: float
    vitamin_k: float

    def nutrients(self) -> dict[str, float]:
        return {name: getattr(self, name) for name in NUTRIENT_FIELDS}


# ── Errors ─────────────────────────────────────────────────────────────────────

class ErrorResponse(BaseModel):
    status: int
    message: str


# ── Health ─────────────────────────────────────────────────────────────────────

class ServerHealthDetails(BaseModel):
    internet_connection: bool
    database_functionality: bool


class ServerHealth(BaseModel):
    name: str
    version: str
    status: Literal["healthy", "unhealthy"]
    details: ServerHealthDetails
    documentation: str = Field(description="API documentation URL")
    source_code: Optional[str] = Field(default=None, description="Source repository URL, if published")
    last_updated: str = Field(description="ISO-8601 timestamp, UTC+03:00")
