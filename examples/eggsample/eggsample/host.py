"""Host side of the eggsample.

The host publishes two events and lets plugins extend the meal by
mutating the event data in place:

- ``eggsample.ingredients.add``: append to ``ingredients``
- ``eggsample.condiments.prep``: edit ``condiments``, append to ``comments``
"""

import random

import eventon
from eventon import Event, Priority

FAVORITE_INGREDIENTS = ("egg", "egg", "egg")

condiments_tray = {
    "pickled walnuts": 13,
    "steak sauce": 4,
    "mushy peas": 2,
}


@eventon.on("eggsample.main")
def cook(event: Event) -> None:
    added = eventon.publish(
        "eggsample.ingredients.add", {"ingredients": list(FAVORITE_INGREDIENTS)}
    )
    ingredients: list[str] = added.get("ingredients")
    random.shuffle(ingredients)

    prepped = eventon.publish(
        "eggsample.condiments.prep",
        {"condiments": dict(condiments_tray), "comments": []},
    )
    condiments: dict[str, int] = prepped.get("condiments")

    print(f"Your food. Enjoy some {', '.join(ingredients)}")
    print(f"Some condiments? We have {', '.join(condiments)}")
    for comment in prepped.get("comments"):
        print(comment)


# Base listeners run first so plugins see the full tray
@eventon.on("eggsample.ingredients.add", priority=Priority.HIGH)
def base_kitchen(event: Event) -> None:
    event.get("ingredients").extend(["salt", "pepper", "egg", "egg"])


@eventon.on("eggsample.condiments.prep", priority=Priority.HIGH)
def base_condiments(event: Event) -> None:
    event.get("condiments")["mint sauce"] = 1
