from __future__ import annotations

import logging
import random
from dataclasses import replace

from ..config import Config
from .errors import EmptyItemCategory
from .models import ITEM_CATEGORIES, Item

logger = logging.getLogger(__name__)


def category_targets(needed: int) -> dict[str, int]:
    """Split ``needed`` into 30% ideal, 40% possible, the rest absurd.

    Rounds half up; the absurd bucket absorbs the rounding error so the three
    counts always add up to ``needed``.
    """
    ideal = (needed * 3 + 5) // 10
    possible = (needed * 4 + 5) // 10
    return {"ideal": ideal, "possible": possible, "absurd": needed - ideal - possible}


def _sample(pool: list[Item], count: int, taken_ids: set[str], rng: random.Random) -> list[Item]:
    shuffled = list(pool)
    rng.shuffle(shuffled)
    if count <= len(shuffled):
        return shuffled[:count]

    result = list(shuffled)
    counter = 1
    while len(result) < count:
        base = shuffled[len(result) % len(shuffled)]
        new_id = f"{base.id}-{counter}"
        counter += 1
        if new_id in taken_ids:
            continue
        taken_ids.add(new_id)
        result.append(replace(base, id=new_id))
    return result


def allocate(pool: list[Item], player_count: int, rng: random.Random | None = None) -> list[Item]:
    rng = rng or random.Random()
    needed = player_count * Config.ITEMS_PER_PLAYER
    targets = category_targets(needed)

    taken_ids = {item.id for item in pool}
    selected: list[Item] = []
    for category in ITEM_CATEGORIES:
        category_pool = [item for item in pool if item.category == category]
        count = targets[category]
        if count and not category_pool:
            raise EmptyItemCategory(category)
        selected.extend(_sample(category_pool, count, taken_ids, rng))

    rng.shuffle(selected)
    logger.debug("Allocated %d items for %d players: %s", len(selected), player_count, targets)
    return selected
