from __future__ import annotations

from typing import List

from pydantic import BaseModel, confloat, conint, constr


class Ingredient(BaseModel):
    name: constr(strip_whitespace=True, min_length=1, max_length=100)
    quantity: confloat(ge=0) = 0
    unit: str = ""


class Recipe(BaseModel):
    name: constr(strip_whitespace=True, min_length=1, max_length=200)
    category: constr(strip_whitespace=True, min_length=1, max_length=50) = "Other"
    prep_time: conint(ge=0, le=1440) = 0  # minutes
    cook_time: conint(ge=0, le=1440) = 0  # minutes
    instructions: constr(strip_whitespace=True, max_length=5000) = ""
    ingredients: List[Ingredient] = []

    @property
    def total_time(self) -> int:
        return self.prep_time + self.cook_time

    @property
    def timer_seconds(self) -> int:
        """Duration of the cooking timer for this recipe."""
        return self.total_time * 60
