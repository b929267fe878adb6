from __future__ import annotations

import copy

from .models import Item, Scenario, Situation


_SCENARIOS: list[Scenario] = [
    Scenario(
        id="desert",
        name="Relentless Desert",
        description=(
            "You are lost in a vast desert after a plane crash. Survive the scorching "
            "heat of the day and the freezing cold of the night."
        ),
        background_image="/scenarios/desert.jpg",
        items=[
            Item("water", "Canteen", "A 2 litre canteen for storing water", "ideal"),
            Item("compass", "Compass", "A compass for navigation", "ideal"),
            Item("blanket", "Thermal Blanket", "Protection from the sun and the night cold", "ideal"),
            Item("firstaid", "First Aid Kit", "For medical emergencies", "possible"),
            Item("knife", "Survival Knife", "Multi-purpose tool", "possible"),
            Item("lighter", "Lighter", "For starting a fire", "possible"),
            Item("rope", "Rope", "15 metres of sturdy rope", "possible"),
            Item("glitter", "Jar of Glitter", "To sparkle in the dark?", "absurd"),
            Item("unicorn", "Unicorn Pyjamas", "At least they are warm...", "absurd"),
            Item("remote", "Remote Control Without Batteries", "Maybe it runs on solar power?", "absurd"),
        ],
        situations=[
            Situation("sandstorm", "A sandstorm is approaching. How do you protect yourself?", 60, ["blanket", "compass"]),
            Situation("oasis", "You found an oasis, but the water looks murky. What do you do?", 60, ["water", "firstaid"]),
            Situation("night", "Night is falling and the temperature is dropping fast. How do you prepare?", 60, ["blanket", "lighter"]),
            Situation("lost", "You lost your bearings in the vast desert. How do you find your way?", 60, ["compass", "knife"]),
            Situation("rescue", "You spot a plane on the horizon. How do you get its attention?", 60, ["lighter", "glitter"]),
        ],
    ),
    Scenario(
        id="jungle",
        name="Amazon Jungle",
        description=(
            "Your boat sank in an Amazon river. Survive the dense rainforest while "
            "you try to find help."
        ),
        background_image="/scenarios/jungle.jpg",
        items=[
            Item("machete", "Machete", "For cutting through dense vegetation", "ideal"),
            Item("mosquitonet", "Mosquito Net", "Protection against insects", "ideal"),
            Item("matches", "Waterproof Matches", "For making fire even in the damp", "ideal"),
            Item("firstaid", "First Aid Kit", "With antidotes for bites", "possible"),
            Item("rope", "Rope", "20 metres of sturdy rope", "possible"),
            Item("compass", "Compass", "For navigation", "possible"),
            Item("waterpurifier", "Water Purifier", "Removes parasites and bacteria", "possible"),
            Item("dino", "Dinosaur Costume", "To blend in with the reptiles?", "absurd"),
            Item("party", "Party Whistle", "Maybe it scares off predators...", "absurd"),
            Item("chalk", "Giant Chalk", "For marking trees with pretty drawings", "absurd"),
        ],
        situations=[
            Situation("rain", "A tropical storm is coming. How do you protect yourself?", 60, ["mosquitonet", "rope"]),
            Situation("predator", "You hear a jaguar roaring nearby. What do you do?", 60, ["machete", "matches"]),
            Situation("river", "You need to cross a wide river. How do you proceed?", 60, ["rope", "compass"]),
            Situation("thirst", "You found water, but it looks contaminated. How do you deal with it?", 60, ["waterpurifier", "firstaid"]),
            Situation("path", "The vegetation is too dense to get through. What do you do?", 60, ["machete", "compass"]),
        ],
    ),
    Scenario(
        id="arctic",
        name="Frozen Arctic",
        description=(
            "Your plane made an emergency landing in the Arctic. Survive the extreme "
            "cold and find a way to signal for help."
        ),
        background_image="/scenarios/arctic.jpg",
        items=[
            Item("sleepingbag", "Sleeping Bag", "Rated for extreme temperatures", "ideal"),
            Item("stove", "Portable Stove", "With fuel for 3 days", "ideal"),
            Item("flare", "Flare Kit", "For signalling rescuers", "ideal"),
            Item("goggles", "Snow Goggles", "Protection against snow blindness", "possible"),
            Item("axe", "Axe", "For cutting ice and wood", "possible"),
            Item("firstaid", "First Aid Kit", "With hypothermia treatments", "possible"),
            Item("radio", "Emergency Radio", "For communication", "possible"),
            Item("welcome", "Welcome Mat", "To greet the polar bears?", "absurd"),
            Item("skate", "A Single Roller Skate", "Better than nothing for sliding on ice...", "absurd"),
            Item("plant", "Potted Plant", "For a cosy touch to the igloo", "absurd"),
        ],
        situations=[
            Situation("blizzard", "A blizzard is approaching. How do you prepare?", 60, ["sleepingbag", "stove"]),
            Situation("thin_ice", "You need to cross an area of thin ice. What do you do?", 60, ["axe", "goggles"]),
            Situation("polar_bear", "You spot a polar bear approaching. How do you react?", 60, ["flare", "axe"]),
            Situation("rescue", "You hear a helicopter in the distance. How do you get its attention?", 60, ["flare", "radio"]),
            Situation("shelter", "Night is coming and you need shelter. What do you do?", 60, ["sleepingbag", "stove"]),
        ],
    ),
]


def list_scenarios() -> list[Scenario]:
    return [copy.deepcopy(s) for s in _SCENARIOS]


def get_scenario(scenario_id: str) -> Scenario | None:
    """Return a private copy of a catalog scenario, or None if unknown."""
    for scenario in _SCENARIOS:
        if scenario.id == scenario_id:
            return copy.deepcopy(scenario)
    return None
