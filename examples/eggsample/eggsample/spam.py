import eventon
from eventon import Event


@eventon.on("eggsample.ingredients.add")
def spam_plugin(event: Event) -> None:
    if "egg" in event.get("ingredients"):
        spam = ["lovely spam", "wonderous spam"]
    else:
        spam = ["splendiferous spam", "magnificent spam"]
    event.get("ingredients").extend(spam)


@eventon.on("eggsample.condiments.prep")
def spam_sauce(event: Event) -> None:
    """The caller passes a mutable tray, so we mess with it directly."""
    condiments = event.get("condiments")
    condiments.pop("steak sauce", None)
    condiments["spam sauce"] = 42
    event.get("comments").append("Now this is what I call a condiments tray!")
