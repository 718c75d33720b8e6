"""Tariff catalog: which course a payment amount (or tariff id) buys."""
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
import json
from typing import Iterable, Mapping

from aura_api.core.errors import TariffNotFoundError


@dataclass(frozen=True)
class Tariff:
    tariff_id: str
    course_id: str
    amount: str
    offer_id: str = ""


# further tariffs are configured through TARIFF_CATALOG
DEFAULT_TARIFFS = (
    Tariff(tariff_id="basic", course_id="1", amount="10", offer_id="cbd17b2c-881f-4668-84b2-25612bfbf554"),
)


def normalize_amount(value: object) -> str:
    """
    Canonical string key for an amount: ``10``, ``10.0`` and ``"10.00"`` all
    become ``"10"``; ``"12.50"`` becomes ``"12.5"``.
    """
    if value is None:
        return ""
    text = str(value).strip()
    try:
        number = Decimal(text)
    except InvalidOperation:
        return text
    if not number.is_finite():
        return text
    if number == number.to_integral_value():
        return format(number.to_integral_value(), "f")
    return format(number.normalize(), "f")


class TariffCatalog:
    """Closed set of tariffs, indexed by normalized amount and by tariff id."""

    def __init__(self, tariffs: Iterable[Tariff]):
        self._by_amount: dict[str, Tariff] = {}
        self._by_id: dict[str, Tariff] = {}
        for tariff in tariffs:
            amount = normalize_amount(tariff.amount)
            if amount in self._by_amount:
                raise ValueError(f"Duplicate tariff amount: {amount}")
            if tariff.tariff_id in self._by_id:
                raise ValueError(f"Duplicate tariff id: {tariff.tariff_id}")
            self._by_amount[amount] = tariff
            self._by_id[tariff.tariff_id] = tariff

    @classmethod
    def default(cls) -> "TariffCatalog":
        return cls(DEFAULT_TARIFFS)

    @classmethod
    def from_json(cls, raw: str) -> "TariffCatalog":
        """
        Build a catalog from a JSON list such as
        ``[{"tariff_id": "basic", "course_id": "1", "amount": "10", "offer_id": "..."}]``.
        """
        items = json.loads(raw)
        if not isinstance(items, list):
            raise ValueError("TARIFF_CATALOG must be a JSON list")
        return cls(_tariff_from_mapping(item) for item in items)

    @classmethod
    def from_config(cls, raw: str | None) -> "TariffCatalog":
        if raw and raw.strip():
            return cls.from_json(raw)
        return cls.default()

    def __iter__(self):
        return iter(self._by_id.values())

    def __len__(self) -> int:
        return len(self._by_id)

    def by_amount(self, amount: object) -> Tariff:
        key = normalize_amount(amount)
        tariff = self._by_amount.get(key)
        if tariff is None:
            raise TariffNotFoundError(key)
        return tariff

    def by_id(self, tariff_id: object) -> Tariff:
        key = str(tariff_id if tariff_id is not None else "").strip()
        tariff = self._by_id.get(key)
        if tariff is None:
            raise TariffNotFoundError(key)
        return tariff


def _tariff_from_mapping(item: Mapping) -> Tariff:
    try:
        return Tariff(
            tariff_id=str(item["tariff_id"]),
            course_id=str(item["course_id"]),
            amount=normalize_amount(item["amount"]),
            offer_id=str(item.get("offer_id") or ""),
        )
    except KeyError as exc:
        raise ValueError(f"Tariff entry is missing {exc.args[0]!r}") from exc
