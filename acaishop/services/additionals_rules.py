# acaishop/services/additionals_rules.py
from decimal import Decimal

from acaishop.utils.formatting import to_money

MAX_ADDITIONALS_PER_SIZE = 5
FREE_ADDITIONALS_LIMIT = 5
SIZES_WITH_FREE_ADDITIONALS = ("1 Litro", "2 Litros", "2 Litro")


def _plural(count: int, word: str) -> str:
    return word if count == 1 else f"{word}s"


class AdditionalSelection:
    """
    Premium additionals picked for a product, kept separately per size.

    Works on plain dicts {id, name, price, category_id, category_name,
    selection_limit} so it can be fed from ORM rows or request payloads.
    """

    def __init__(self, size: str = ""):
        self.by_size: dict[str, dict[int, dict]] = {}
        self.size = size

    def select_size(self, size: str):
        self.size = size

    @property
    def selected(self) -> dict[int, dict]:
        return self.by_size.get(self.size, {})

    @property
    def count(self) -> int:
        return len(self.selected)

    @property
    def has_free_additionals(self) -> bool:
        return self.size in SIZES_WITH_FREE_ADDITIONALS

    @property
    def reached_free_limit(self) -> bool:
        return self.has_free_additionals and self.count >= FREE_ADDITIONALS_LIMIT

    @property
    def reached_max_limit(self) -> bool:
        return self.count >= MAX_ADDITIONALS_PER_SIZE

    def is_selected(self, additional_id: int) -> bool:
        return additional_id in self.selected

    def _category_count(self, category_id) -> int:
        return sum(1 for entry in self.selected.values() if entry["additional"].get("category_id") == category_id)

    def toggle(self, additional: dict) -> bool:
        """Returns True when the additional ended up selected."""
        additional_id = additional["id"]
        if self.is_selected(additional_id):
            self.remove(additional_id)
            return False

        if self.reached_max_limit:
            raise ValueError(f"Limite de {MAX_ADDITIONALS_PER_SIZE} adicionais atingido para este tamanho")

        limit = additional.get("selection_limit")
        if limit and self._category_count(additional.get("category_id")) >= limit:
            raise ValueError(f"Limite de {limit} adicionais desta categoria atingido")

        self.by_size.setdefault(self.size, {})[additional_id] = {"additional": additional, "quantity": 1}
        return True

    def remove(self, additional_id: int):
        current = self.by_size.get(self.size)
        if not current:
            return
        current.pop(additional_id, None)
        # sizes without picks are dropped
        if not current:
            del self.by_size[self.size]

    def reset(self):
        self.by_size = {}

    def total(self) -> Decimal:
        if self.has_free_additionals and self.count <= FREE_ADDITIONALS_LIMIT:
            return Decimal("0.00")
        return to_money(
            sum(
                (to_money(entry["additional"]["price"]) * entry["quantity"] for entry in self.selected.values()),
                Decimal("0.00"),
            )
        )

    def count_text(self) -> str:
        count = self.count
        if count == 0:
            return "Sem complementos premium"

        head = f"{count} {_plural(count, 'complemento')} premium {_plural(count, 'selecionado')}"
        if self.has_free_additionals and not self.reached_free_limit:
            free_left = max(0, FREE_ADDITIONALS_LIMIT - count)
            return f"{head} ({free_left} grátis {_plural(free_left, 'restante')})"

        left = MAX_ADDITIONALS_PER_SIZE - count
        return f"{head} ({left} {_plural(left, 'restante')})"

    def grouped(self) -> list[dict]:
        groups: dict = {}
        for entry in self.selected.values():
            additional = entry["additional"]
            key = additional.get("category_id")
            group = groups.setdefault(
                key,
                {"category_id": key, "category_name": additional.get("category_name"), "additionals": []},
            )
            group["additionals"].append(
                {
                    "id": additional["id"],
                    "name": additional["name"],
                    "price": to_money(additional["price"]),
                    "quantity": entry["quantity"],
                }
            )
        return list(groups.values())

    def as_line_additionals(self) -> list[dict]:
        """Selected additionals as stored on cart/order lines, zero-priced inside the free tier."""
        free = self.has_free_additionals and self.count <= FREE_ADDITIONALS_LIMIT
        return [
            {
                "id": entry["additional"]["id"],
                "name": entry["additional"]["name"],
                "price": "0.00" if free else str(to_money(entry["additional"]["price"])),
                "quantity": entry["quantity"],
            }
            for entry in self.selected.values()
        ]
