"""
Order lines — tailored garments and shelf items held by the wizard.

Both are plain mutable dataclasses: the wizard edits them in place until
the order is saved. to_record()/from_record() map to and from backend rows.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from fatoura.models.enums import FabricSource, GarmentStyle, JabzourType, PieceStage
from fatoura.money import ZERO, to_amount, to_decimal, to_quantity
from fatoura.services.prices import JabzourCode


def _text(value) -> str | None:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


@dataclass
class GarmentLine:
    """
    One tailored piece.

    ``jabzour`` holds the selected jabzour option code. Rows store it split
    in two columns: JAB_SHAAB becomes jabzour_1=ZIPPER, any other code
    becomes jabzour_1=BUTTON with the code in jabzour_2.
    """

    id: str | None = None
    garment_id: str = ""
    fabric_id: int | None = None
    fabric_source: str = FabricSource.INTERNAL
    fabric_length: Decimal = ZERO
    fabric_amount: Decimal | None = None
    style: str = GarmentStyle.KUWAITI
    style_id: str = ""
    lines: int = 1
    collar_type: str | None = None
    collar_button: str | None = None
    jabzour: str | None = None
    jabzour_thickness: str | None = None
    front_pocket_type: str | None = None
    front_pocket_thickness: str | None = None
    cuffs_type: str | None = None
    cuffs_thickness: str | None = None
    wallet_pocket: bool = False
    pen_holder: bool = False
    home_delivery: bool = False
    express: bool = False
    quantity: int = 1
    piece_stage: str = PieceStage.ORDER_AT_SHOP
    fabric_price_snapshot: Decimal | None = None
    stitching_price_snapshot: Decimal | None = None
    style_price_snapshot: Decimal | None = None
    notes: str = ""

    @property
    def is_design(self) -> bool:
        return self.style == GarmentStyle.DESIGN

    @property
    def uses_shop_fabric(self) -> bool:
        return self.fabric_source == FabricSource.INTERNAL

    @property
    def has_snapshot(self) -> bool:
        return None not in (
            self.fabric_price_snapshot,
            self.stitching_price_snapshot,
            self.style_price_snapshot,
        )

    def style_signature(self) -> tuple:
        """Selections that make two garments 'the same style'."""
        return (
            self.style,
            self.lines,
            self.collar_type,
            self.collar_button,
            self.jabzour,
            self.jabzour_thickness,
            self.front_pocket_type,
            self.front_pocket_thickness,
            self.cuffs_type,
            self.cuffs_thickness,
            self.wallet_pocket,
            self.pen_holder,
        )

    # ── Record mapping ──

    def jabzour_columns(self) -> tuple[str, str]:
        code = _text(self.jabzour)
        if code is None:
            return "", ""
        if code == JabzourCode.SHAAB.value:
            return JabzourType.ZIPPER, ""
        return JabzourType.BUTTON, code

    def to_record(self, order_id=None) -> dict[str, Any]:
        jabzour_1, jabzour_2 = self.jabzour_columns()
        record = {
            "garment_id": self.garment_id,
            "fabric_id": self.fabric_id,
            "fabric_source": self.fabric_source,
            "fabric_length": to_amount(self.fabric_length),
            "style": self.style,
            "style_id": self.style_id,
            "lines": self.lines,
            "collar_type": self.collar_type or "",
            "collar_button": self.collar_button or "",
            "jabzour_1": jabzour_1,
            "jabzour_2": jabzour_2,
            "jabzour_thickness": self.jabzour_thickness or "",
            "front_pocket_type": self.front_pocket_type or "",
            "front_pocket_thickness": self.front_pocket_thickness or "",
            "cuffs_type": self.cuffs_type or "",
            "cuffs_thickness": self.cuffs_thickness or "",
            "wallet_pocket": self.wallet_pocket,
            "pen_holder": self.pen_holder,
            "home_delivery": self.home_delivery,
            "express": self.express,
            "quantity": to_quantity(self.quantity) or 1,
            "piece_stage": self.piece_stage,
            "fabric_price_snapshot": to_amount(self.fabric_price_snapshot),
            "stitching_price_snapshot": to_amount(self.stitching_price_snapshot),
            "style_price_snapshot": to_amount(self.style_price_snapshot),
            "notes": self.notes,
        }
        if self.id is not None:
            record["id"] = self.id
        if order_id is not None:
            record["order_id"] = order_id
        return record

    @classmethod
    def from_record(cls, row: dict[str, Any]) -> GarmentLine:
        if row.get("jabzour_1") == JabzourType.ZIPPER:
            jabzour = JabzourCode.SHAAB.value
        else:
            jabzour = _text(row.get("jabzour_2"))

        def snapshot(name):
            value = row.get(name)
            return None if value is None else to_amount(value)

        return cls(
            id=str(row["id"]) if row.get("id") is not None else None,
            garment_id=row.get("garment_id") or "",
            fabric_id=row.get("fabric_id"),
            fabric_source=row.get("fabric_source") or FabricSource.INTERNAL,
            fabric_length=to_amount(row.get("fabric_length")),
            fabric_amount=snapshot("fabric_price_snapshot"),
            style=row.get("style") or GarmentStyle.KUWAITI,
            style_id=row.get("style_id") or "",
            lines=row.get("lines") or 1,
            collar_type=_text(row.get("collar_type")),
            collar_button=_text(row.get("collar_button")),
            jabzour=jabzour,
            jabzour_thickness=_text(row.get("jabzour_thickness")),
            front_pocket_type=_text(row.get("front_pocket_type")),
            front_pocket_thickness=_text(row.get("front_pocket_thickness")),
            cuffs_type=_text(row.get("cuffs_type")),
            cuffs_thickness=_text(row.get("cuffs_thickness")),
            wallet_pocket=bool(row.get("wallet_pocket")),
            pen_holder=bool(row.get("pen_holder")),
            home_delivery=bool(row.get("home_delivery")),
            express=bool(row.get("express")),
            quantity=row.get("quantity") or 1,
            piece_stage=row.get("piece_stage") or PieceStage.ORDER_AT_SHOP,
            fabric_price_snapshot=snapshot("fabric_price_snapshot"),
            stitching_price_snapshot=snapshot("stitching_price_snapshot"),
            style_price_snapshot=snapshot("style_price_snapshot"),
            notes=row.get("notes") or "",
        )


@dataclass
class ShelfLine:
    """
    One shelf product on an order.

    ``stock`` is the available stock seen when the line was selected.
    """

    shelf_id: int | None = None
    product_type: str = ""
    brand: str = ""
    quantity: int = 1
    unit_price: Decimal = ZERO
    stock: int = 0

    @property
    def key(self) -> tuple[str, str]:
        return (self.product_type, self.brand)

    @property
    def is_complete(self) -> bool:
        return bool(self.product_type and self.brand)

    @property
    def line_total(self) -> Decimal:
        return to_quantity(self.quantity) * to_amount(self.unit_price)

    def to_item(self) -> dict[str, Any]:
        """Payload entry for the completion procedures."""
        return {
            "id": self.shelf_id,
            "quantity": to_quantity(self.quantity),
            "unit_price": to_amount(self.unit_price),
        }

    @classmethod
    def from_product(cls, row: dict[str, Any], quantity: int = 1) -> ShelfLine:
        """Line for a shelf catalogue row."""
        return cls(
            shelf_id=row.get("id"),
            product_type=row.get("type") or "",
            brand=row.get("brand") or "",
            quantity=quantity,
            unit_price=to_amount(row.get("price")),
            stock=to_quantity(row.get("stock")),
        )

    @classmethod
    def from_record(cls, item: dict[str, Any], product: dict[str, Any] | None = None) -> ShelfLine:
        """Line for an order_shelf_items row (with its catalogue row if known)."""
        product = product or {}
        return cls(
            shelf_id=item.get("shelf_id"),
            product_type=product.get("type") or "",
            brand=product.get("brand") or "",
            quantity=to_quantity(item.get("quantity")),
            unit_price=to_decimal(item.get("unit_price", product.get("price"))),
            stock=to_quantity(product.get("stock")),
        )
