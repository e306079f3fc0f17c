"""
Static catalog of settable item paths.

Admins may write one nested ``items.*`` field of a hero at a time.
Only paths listed in ``SETTABLE_ITEM_PATHS`` are accepted; the set is
built once at import time from the content lists below.
"""

from itertools import product

EGGS = (
    "Wolf", "TigerCub", "PandaCub", "LionCub", "Fox",
    "FlyingPig", "Dragon", "Cactus", "BearCub",
)

HATCHING_POTIONS = (
    "Base", "White", "Desert", "Red", "Shade",
    "Skeleton", "Zombie", "CottonCandyPink", "CottonCandyBlue", "Golden",
)

FOOD = (
    "Meat", "Milk", "Potatoe", "Strawberry", "Chocolate", "Fish",
    "RottenMeat", "CottonCandyPink", "CottonCandyBlue", "Honey", "Saddle",
)

SPECIAL_PETS = (
    "Wolf-Veteran", "Wolf-Cerberus", "Dragon-Hydra", "Turkey-Base",
    "BearCub-Polar", "MantisShrimp-Base", "JackOLantern-Base",
)

SPECIAL_MOUNTS = (
    "BearCub-Polar", "LionCub-Ethereal", "MantisShrimp-Base", "Turkey-Base",
)

GEAR_CLASSES = ("warrior", "rogue", "wizard", "healer")

GEAR_SLOTS = ("weapon", "armor", "head", "shield")

# Tier 0 is the starter weapon; the other slots start at 1.
GEAR_TIERS = {"weapon": range(0, 7), "armor": range(1, 6), "head": range(1, 6), "shield": range(1, 6)}

# Pet awarded to contributors of tier 6 and above.
CONTRIBUTOR_PET = "Dragon-Hydra"


def _gear_keys():
    for klass, slot in product(GEAR_CLASSES, GEAR_SLOTS):
        for tier in GEAR_TIERS[slot]:
            yield f"{slot}_{klass}_{tier}"


def _build_paths() -> frozenset:
    standard = [f"{egg}-{potion}" for egg, potion in product(EGGS, HATCHING_POTIONS)]
    paths = {"items.currentPet", "items.currentMount", "items.lastDrop.count", "items.lastDrop.date"}
    paths.update(f"items.pets.{pet}" for pet in standard + list(SPECIAL_PETS))
    paths.update(f"items.mounts.{mount}" for mount in standard + list(SPECIAL_MOUNTS))
    paths.update(f"items.eggs.{egg}" for egg in EGGS)
    paths.update(f"items.hatchingPotions.{potion}" for potion in HATCHING_POTIONS)
    paths.update(f"items.food.{food}" for food in FOOD)
    paths.update(f"items.gear.owned.{key}" for key in _gear_keys())
    for slot in GEAR_SLOTS:
        paths.add(f"items.gear.equipped.{slot}")
        paths.add(f"items.gear.costume.{slot}")
    return frozenset(paths)


SETTABLE_ITEM_PATHS = _build_paths()


def is_settable(path: str) -> bool:
    return path in SETTABLE_ITEM_PATHS


def set_item_path(items: dict, path: str, value) -> None:
    """Write ``value`` at ``path`` (``items.a.b``) inside ``items``.

    Intermediate dictionaries are created as needed.
    """
    keys = path.split(".")[1:]
    target = items
    for key in keys[:-1]:
        nested = target.get(key)
        if not isinstance(nested, dict):
            nested = {}
            target[key] = nested
        target = nested
    target[keys[-1]] = value
