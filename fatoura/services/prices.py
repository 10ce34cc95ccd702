"""
Price table — resolves named price keys into Decimal lookups.

The price list is flat reference data ({key: value}). Option codes
(collar, jabzour, pockets, cuffs) are themselves price keys: the surcharge
of a selected option is the price stored under its code.

A code with no price entry is worth 0. That is intentional: the catalogue
may offer options nobody has priced yet, and pricing must never fail.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any, Iterable, Mapping

from fatoura.conf import fatoura_settings
from fatoura.money import ZERO, to_amount, to_decimal

logger = logging.getLogger('fatoura')


# ══════════════════════════════════════════════════════════════
# KEYS AND OPTION CODES
# ══════════════════════════════════════════════════════════════


class PriceKey(str, Enum):
    """Base rates and service fees."""

    STITCHING_STANDARD = "STITCHING_STANDARD"
    STY_DESIGN = "STY_DESIGN"
    STY_LINE = "STY_LINE"
    STY_KUWAITI = "STY_KUWAITI"
    HOME_DELIVERY = "HOME_DELIVERY"
    EXPRESS_SURCHARGE = "EXPRESS_SURCHARGE"


class CollarType(str, Enum):
    DOWN_COLLAR = "COL_DOWN_COLLAR"
    JAPANESE = "COL_JAPANESE"
    QALLABI = "COL_QALLABI"


class CollarButton(str, Enum):
    ARAVI_ZARRAR = "COL_ARAVI_ZARRAR"
    ZARRAR_TABBAGI = "COL_ZARRAR__TABBAGI"
    TABBAGI = "COL_TABBAGI"
    SMALL_TABBAGI = "COL_SMALL_TABBAGI"


class JabzourCode(str, Enum):
    SHAAB = "JAB_SHAAB"  # zipper
    MAGFI_MUSALLAS = "JAB_MAGFI_MUSALLAS"
    BAIN_MUSALLAS = "JAB_BAIN_MUSALLAS"
    MAGFI_MURABBA = "JAB_MAGFI_MURABBA"
    BAIN_MURABBA = "JAB_BAIN_MURABBA"


class SidePocket(str, Enum):
    MUSALLAS = "SID_MUSALLAS_SIDE_POCKET"
    MUDAWWAR = "SID_MUDAWWAR_SIDE_POCKET"


class FrontPocket(str, Enum):
    MUSALLAS = "FRO_MUSALLAS_FRONT_POCKET"
    MURABBA = "FRO_MURABBA_FRONT_POCKET"
    MUDAWWAR = "FRO_MUDAWWAR_FRONT_POCKET"
    MUDAWWAR_MAGFI = "FRO_MUDAWWAR_MAGFI_FRONT_POCKET"


class CuffType(str, Enum):
    DOUBLE_GUMSHA = "CUF_DOUBLE_GUMSHA"
    MURABBA_KABAK = "CUF_MURABBA_KABAK"
    MUSALLAS_KABBAK = "CUF_MUSALLAS_KABBAK"
    MUDAWAR_KABBAK = "CUF_MUDAWAR_KABBAK"


OPTION_CODES: tuple[type[Enum], ...] = (
    CollarType,
    CollarButton,
    JabzourCode,
    SidePocket,
    FrontPocket,
    CuffType,
)


@dataclass(frozen=True)
class PriceEntry:
    """One row of the price list."""

    key: str
    value: Decimal
    description: str = ""


# ══════════════════════════════════════════════════════════════
# SEED DATA
# ══════════════════════════════════════════════════════════════


def _entry(key, value, description=""):
    key = key.value if isinstance(key, Enum) else key
    return PriceEntry(key=key, value=Decimal(value), description=description)


SEED_PRICES: tuple[PriceEntry, ...] = (
    _entry(CollarType.DOWN_COLLAR, "0", "Down collar"),
    _entry(CollarType.JAPANESE, "0", "Japanese collar"),
    _entry(CollarType.QALLABI, "5", "Qallabi collar"),
    _entry(CollarButton.ARAVI_ZARRAR, "0", "Aravi zarrar"),
    _entry(CollarButton.ZARRAR_TABBAGI, "0", "Zarrar + tabbagi"),
    _entry(CollarButton.TABBAGI, "0", "Tabbagi"),
    _entry(CollarButton.SMALL_TABBAGI, "0", "Small tabbagi"),
    _entry(JabzourCode.SHAAB, "1", "Shaab (zipper)"),
    _entry(JabzourCode.MAGFI_MUSALLAS, "0", "Magfi musallas"),
    _entry(JabzourCode.BAIN_MUSALLAS, "0", "Bain musallas"),
    _entry(JabzourCode.MAGFI_MURABBA, "0", "Magfi murabba"),
    _entry(JabzourCode.BAIN_MURABBA, "0", "Bain murabba"),
    _entry(SidePocket.MUSALLAS, "0", "Musallas side pocket"),
    _entry(SidePocket.MUDAWWAR, "0", "Mudawwar side pocket"),
    _entry(FrontPocket.MUSALLAS, "0", "Musallas front pocket"),
    _entry(FrontPocket.MURABBA, "0", "Murabba front pocket"),
    _entry(FrontPocket.MUDAWWAR, "0", "Mudawwar front pocket"),
    _entry(FrontPocket.MUDAWWAR_MAGFI, "0", "Mudawwar magfi front pocket"),
    _entry(CuffType.DOUBLE_GUMSHA, "3", "Double gumsha cuffs"),
    _entry(CuffType.MURABBA_KABAK, "3", "Murabba kabak cuffs"),
    _entry(CuffType.MUSALLAS_KABBAK, "3", "Musallas kabbak cuffs"),
    _entry(CuffType.MUDAWAR_KABBAK, "3", "Mudawar kabbak cuffs"),
    _entry(PriceKey.STY_DESIGN, "6", "Design style (flat)"),
    _entry(PriceKey.STY_KUWAITI, "0", "Kuwaiti style"),
    _entry(PriceKey.STY_LINE, "0", "Per line"),
    _entry(PriceKey.STITCHING_STANDARD, "9", "Standard stitching per garment"),
    _entry(PriceKey.HOME_DELIVERY, "2", "Home delivery"),
    _entry(PriceKey.EXPRESS_SURCHARGE, "5", "Express surcharge"),
)


# ══════════════════════════════════════════════════════════════
# RESOLVER
# ══════════════════════════════════════════════════════════════


def _key(code) -> str:
    if isinstance(code, Enum):
        return code.value
    return str(code).strip() if code is not None else ""


class PriceTable:
    """
    Read-only price lookups.

    Usage:
        table = PriceTable.from_rows(backend.select('prices').data)
        table.get(PriceKey.HOME_DELIVERY)     # Decimal('2')
        table.surcharge('COL_QALLABI')        # Decimal('5')
        table.surcharge('NOT_PRICED')         # Decimal('0')
    """

    def __init__(self, prices: Mapping[str, Any] | None = None):
        self._prices: dict[str, Decimal] = {}
        for key, value in (prices or {}).items():
            key = _key(key)
            if key:
                self._prices[key] = to_decimal(value)

    @classmethod
    def from_entries(cls, entries: Iterable[PriceEntry]) -> "PriceTable":
        return cls({e.key: e.value for e in entries})

    @classmethod
    def from_rows(cls, rows: Iterable[Mapping[str, Any]]) -> "PriceTable":
        """Build from backend rows ({'key': ..., 'value': ...})."""
        return cls({row["key"]: row.get("value") for row in rows or () if row.get("key")})

    @classmethod
    def seeded(cls) -> "PriceTable":
        return cls.from_entries(SEED_PRICES)

    def __contains__(self, code) -> bool:
        return _key(code) in self._prices

    def __len__(self) -> int:
        return len(self._prices)

    def __repr__(self) -> str:
        return f"PriceTable({len(self._prices)} entries)"

    def as_dict(self) -> dict[str, Decimal]:
        return dict(self._prices)

    def get(self, key, default: Decimal | None = None) -> Decimal:
        """Price under key, or default (0 when not given)."""
        value = self._prices.get(_key(key))
        if value is None:
            return ZERO if default is None else to_decimal(default)
        return value

    def surcharge(self, code) -> Decimal:
        """
        Surcharge of a selected option code.

        Empty selection and unpriced codes are worth 0. Negative entries
        are treated as 0.
        """
        key = _key(code)
        if not key:
            return ZERO
        if key not in self._prices:
            logger.debug("prices.unknown_code", extra={"code": key})
            return ZERO
        return to_amount(self._prices[key])

    # ── Resolved base rates ──

    def stitching_standard(self) -> Decimal:
        return to_amount(self.get(PriceKey.STITCHING_STANDARD, fatoura_settings.DEFAULT_STITCHING_PRICE))

    def design_style(self) -> Decimal:
        return to_amount(self.get(PriceKey.STY_DESIGN, fatoura_settings.DESIGN_STYLE_PRICE))

    def line_price(self) -> Decimal:
        return to_amount(self.get(PriceKey.STY_LINE))

    def home_delivery(self) -> Decimal:
        return to_amount(self.get(PriceKey.HOME_DELIVERY))

    def express_surcharge(self) -> Decimal:
        return to_amount(self.get(PriceKey.EXPRESS_SURCHARGE))
