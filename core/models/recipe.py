# =============================================================================
# core/models/recipe.py - Recipe Schemas
# =============================================================================
# These models define the API contract for recipe operations:
# - CuisineType / RecipeCategory: closed enums accepted by the API
# - RecipeCreate: validated payload for POST /api/recipes
# - RecipeUpdate: partial payload for PUT /api/recipes/{id}
# - Recipe: what clients receive back
#
# API field names are camelCase (cuisineType, prepTime, likeCount);
# database columns are snake_case. from_row()/to_row() translate.
# =============================================================================

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from lib.utils import parse_timestamp


class CuisineType(str, Enum):
    """Cuisines a recipe can belong to."""
    ITALIAN = "Italian"
    MEXICAN = "Mexican"
    INDIAN = "Indian"
    CHINESE = "Chinese"
    OTHERS = "Others"


class RecipeCategory(str, Enum):
    """Meal categories; a recipe has one or more."""
    BREAKFAST = "Breakfast"
    LUNCH = "Lunch"
    DINNER = "Dinner"
    DESSERT = "Dessert"
    VEGAN = "Vegan"


def _clean_ingredients(value: list[str] | None) -> list[str] | None:
    if value is None:
        return None
    cleaned = [item.strip() for item in value if item and item.strip()]
    if not cleaned:
        raise ValueError("At least one ingredient is required")
    return cleaned


def _dedupe_categories(value: list[RecipeCategory] | None) -> list[RecipeCategory] | None:
    if value is None:
        return None
    # Keep first occurrence order
    return list(dict.fromkeys(value))


class RecipeCreate(BaseModel):
    """
    Schema for creating a recipe.

    The owner is never taken from this payload: the route fills it from the
    verified session. `userName` may override the display name shown on the
    recipe card.

    Example:
        {
            "title": "Margherita Pizza",
            "image": "https://i.ibb.co/pizza.jpg",
            "ingredients": ["dough", "tomato", "mozzarella"],
            "instructions": "Bake at 250C for 8 minutes.",
            "cuisineType": "Italian",
            "prepTime": 30,
            "categories": ["Dinner"]
        }
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    title: str = Field(..., min_length=1, max_length=100)
    image: str = Field(..., min_length=1, description="Image URL")
    ingredients: list[str] = Field(..., min_length=1)
    instructions: str = Field(..., min_length=1)
    cuisine_type: CuisineType
    prep_time: int = Field(
        ...,
        ge=1,
        validation_alias=AliasChoices("prepTime", "preparationTime", "prep_time"),
        description="Preparation time in minutes",
    )
    categories: list[RecipeCategory] = Field(..., min_length=1)
    user_name: str | None = Field(default=None, max_length=100)

    @field_validator("title", "instructions")
    @classmethod
    def strip_text(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value

    @field_validator("ingredients")
    @classmethod
    def clean_ingredients(cls, value: list[str]) -> list[str]:
        return _clean_ingredients(value)

    @field_validator("categories")
    @classmethod
    def dedupe_categories(cls, value: list[RecipeCategory]) -> list[RecipeCategory]:
        return _dedupe_categories(value)

    def to_row(self, owner_uid: str, owner_email: str, owner_name: str) -> dict[str, Any]:
        """Database row for insert, with the owner reference captured now."""
        return {
            "title": self.title,
            "image": self.image,
            "ingredients": self.ingredients,
            "instructions": self.instructions,
            "cuisine_type": self.cuisine_type.value,
            "prep_time": self.prep_time,
            "categories": [c.value for c in self.categories],
            "user_id": owner_uid,
            "user_email": owner_email,
            "user_name": self.user_name or owner_name,
        }


class RecipeUpdate(BaseModel):
    """
    Schema for updating a recipe. Every field is optional; only provided
    fields change.

    `userId` is an owner claim: when sent it must match the recipe's owner.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    title: str | None = Field(default=None, min_length=1, max_length=100)
    image: str | None = Field(default=None, min_length=1)
    ingredients: list[str] | None = Field(default=None, min_length=1)
    instructions: str | None = Field(default=None, min_length=1)
    cuisine_type: CuisineType | None = None
    prep_time: int | None = Field(
        default=None,
        ge=1,
        validation_alias=AliasChoices("prepTime", "preparationTime", "prep_time"),
    )
    categories: list[RecipeCategory] | None = Field(default=None, min_length=1)
    user_id: str | None = Field(default=None, description="Owner claim")

    @field_validator("ingredients")
    @classmethod
    def clean_ingredients(cls, value: list[str] | None) -> list[str] | None:
        return _clean_ingredients(value)

    @field_validator("categories")
    @classmethod
    def dedupe_categories(cls, value: list[RecipeCategory] | None) -> list[RecipeCategory] | None:
        return _dedupe_categories(value)

    def to_row_updates(self) -> dict[str, Any]:
        """Only the columns the caller actually set."""
        updates: dict[str, Any] = {}
        if self.title is not None:
            updates["title"] = self.title.strip()
        if self.image is not None:
            updates["image"] = self.image
        if self.ingredients is not None:
            updates["ingredients"] = self.ingredients
        if self.instructions is not None:
            updates["instructions"] = self.instructions
        if self.cuisine_type is not None:
            updates["cuisine_type"] = self.cuisine_type.value
        if self.prep_time is not None:
            updates["prep_time"] = self.prep_time
        if self.categories is not None:
            updates["categories"] = [c.value for c in self.categories]
        return updates


class Recipe(BaseModel):
    """
    Schema for returning a recipe to clients.

    Returned by every recipe endpoint and by the liked/owned recipe listings
    under /api/users.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    title: str
    image: str = ""
    ingredients: list[str] = Field(default_factory=list)
    instructions: str = ""
    cuisine_type: str
    categories: list[str] = Field(default_factory=list)
    prep_time: int
    like_count: int = Field(default=0, ge=0)
    user_id: str
    user_email: str = ""
    user_name: str = ""
    created_at: datetime | None = None

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "Recipe":
        """Create Recipe from a database row."""
        return cls(
            id=str(row["id"]),
            title=row.get("title", ""),
            image=row.get("image") or "",
            ingredients=row.get("ingredients") or [],
            instructions=row.get("instructions") or "",
            cuisine_type=row.get("cuisine_type", CuisineType.OTHERS.value),
            categories=row.get("categories") or [],
            prep_time=row.get("prep_time") or 1,
            like_count=max(int(row.get("like_count") or 0), 0),
            user_id=row.get("user_id", ""),
            user_email=row.get("user_email") or "",
            user_name=row.get("user_name") or "",
            created_at=parse_timestamp(row.get("created_at")),
        )

    def to_api(self) -> dict[str, Any]:
        """JSON-ready dict with camelCase keys."""
        return self.model_dump(by_alias=True, mode="json")
