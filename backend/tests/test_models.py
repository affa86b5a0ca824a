import pytest
from pydantic import ValidationError

from backend.cookbook.models.recipe import Ingredient, Recipe
from backend.cookbook.models.timer import TimerSnapshot, TimerState, format_time


@pytest.mark.parametrize(
    "seconds, expected",
    [
        (0, "00:00"),
        (125, "02:05"),
        (3599, "59:59"),
        (3600, "01:00:00"),
        (3665, "01:01:05"),
        (-5, "00:00"),
    ],
)
def test_format_time(seconds, expected):
    assert format_time(seconds) == expected


def test_snapshot_exposes_display_string():
    snap = TimerSnapshot(id=3, name="Bread", total_seconds=4000, remaining_seconds=3665, state=TimerState.PAUSED)

    assert snap.display == "01:01:05"
    assert snap.model_dump()["display"] == "01:01:05"
    assert snap.model_dump(mode="json")["state"] == "paused"


def test_snapshot_rejects_negative_remaining():
    with pytest.raises(ValidationError):
        TimerSnapshot(id=1, name="x", total_seconds=10, remaining_seconds=-1, state=TimerState.RUNNING)


def test_recipe_timer_covers_prep_and_cook_time():
    recipe = Recipe(
        name="  Beef soup ",
        prep_time=15,
        cook_time=90,
        ingredients=[Ingredient(name="beef", quantity=500, unit="g"), Ingredient(name="radish")],
    )

    assert recipe.name == "Beef soup"
    assert recipe.category == "Other"
    assert recipe.total_time == 105
    assert recipe.timer_seconds == 6300
    assert recipe.ingredients[1].quantity == 0


def test_recipe_limits():
    with pytest.raises(ValidationError):
        Recipe(name="Stew", cook_time=1441)
    with pytest.raises(ValidationError):
        Recipe(name="Stew", prep_time=-1)
    with pytest.raises(ValidationError):
        Recipe(name="   ")
    with pytest.raises(ValidationError):
        Ingredient(name="salt", quantity=-2)


def test_recipe_name_and_category_limits():
    recipe = Recipe(name="n" * 200, category="  Dessert  ")
    assert recipe.category == "Dessert"

    with pytest.raises(ValidationError):
        Recipe(name="n" * 201)
    with pytest.raises(ValidationError):
        Recipe(name="Pie", category="   ")
    with pytest.raises(ValidationError):
        Recipe(name="Pie", category="c" * 51)
