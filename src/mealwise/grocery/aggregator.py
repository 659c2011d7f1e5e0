"""Merge parsed ingredient lines from many recipes into shopping list entries."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List

from mealwise.models.shopping import AggregatedItem, Category, ParsedIngredientLine

QUANTITY_SEPARATOR = " + "


def normalize_key(name: str) -> str:
    """Aggregation key: lower-cased name with one trailing "s" removed.

    This is a deliberately naive singularization; "peas" and "pea" collapse together and
    irregular plurals are not handled.
    """
    key = " ".join(name.lower().split())
    return key[:-1] if key.endswith("s") else key


@dataclass
class _Group:
    key: str
    name: str
    quantity: str
    category: Category
    recipe_ids: List[str] = field(default_factory=list)
    recipe_names: List[str] = field(default_factory=list)
    original_texts: List[str] = field(default_factory=list)

    def add_source(self, line: ParsedIngredientLine) -> None:
        if line.recipe_id not in self.recipe_ids:
            self.recipe_ids.append(line.recipe_id)
            self.recipe_names.append(line.recipe_name)
        self.original_texts.append(line.original_text)

    def merge_quantity(self, quantity: str) -> None:
        if not quantity:
            return
        self.quantity = f"{self.quantity}{QUANTITY_SEPARATOR}{quantity}" if self.quantity else quantity

    def freeze(self) -> AggregatedItem:
        return AggregatedItem(
            key=self.key,
            name=self.name,
            quantity=self.quantity,
            category=self.category,
            recipe_ids=list(self.recipe_ids),
            recipe_names=list(self.recipe_names),
            original_texts=list(self.original_texts),
        )


def aggregate_ingredients(lines: Iterable[ParsedIngredientLine]) -> List[AggregatedItem]:
    """Group lines by normalized name, in first-occurrence order.

    The first line for a key seeds its display name, quantity and category. Later lines append
    their quantity with " + " (no unit arithmetic), add their recipe when it is not already
    listed, and always append their original text.
    """
    groups: Dict[str, _Group] = {}
    for line in lines:
        key = normalize_key(line.name)
        group = groups.get(key)
        if group is None:
            group = _Group(key=key, name=line.name, quantity=line.quantity, category=line.category)
            groups[key] = group
        else:
            group.merge_quantity(line.quantity)
        group.add_source(line)
    return [group.freeze() for group in groups.values()]


__all__ = ["QUANTITY_SEPARATOR", "aggregate_ingredients", "normalize_key"]
