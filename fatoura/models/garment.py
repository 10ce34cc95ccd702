"""
Garment model — one tailored piece of a work order.
"""

import uuid
from decimal import Decimal

from django.db import models
from django.utils.translation import gettext_lazy as _

from fatoura.models.enums import FabricSource, JabzourType, PieceStage


class Garment(models.Model):
    """
    Tailored piece with its style selections and price snapshots.

    The *_snapshot fields hold the prices quoted when the garment was saved.
    After the order is confirmed they are the settled price of the piece.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    order = models.ForeignKey(
        'fatoura.Order',
        on_delete=models.CASCADE,
        related_name='garments',
    )
    garment_id = models.CharField(max_length=50, blank=True, default='', verbose_name=_('Garment number'))

    # Fabric
    fabric = models.ForeignKey(
        'fatoura.Fabric',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='garments',
    )
    fabric_source = models.CharField(max_length=3, choices=FabricSource.choices, default=FabricSource.INTERNAL)
    fabric_length = models.DecimalField(max_digits=8, decimal_places=2, default=Decimal('0'))

    # Style
    style = models.CharField(max_length=20, default='kuwaiti')
    style_id = models.CharField(max_length=20, blank=True, default='', help_text=_('Style group (S-1, S-2, ...)'))
    lines = models.PositiveSmallIntegerField(default=1)
    collar_type = models.CharField(max_length=50, blank=True, default='')
    collar_button = models.CharField(max_length=50, blank=True, default='')
    jabzour_1 = models.CharField(max_length=10, choices=JabzourType.choices, blank=True, default='')
    jabzour_2 = models.CharField(max_length=50, blank=True, default='')
    jabzour_thickness = models.CharField(max_length=20, blank=True, default='')
    front_pocket_type = models.CharField(max_length=50, blank=True, default='')
    front_pocket_thickness = models.CharField(max_length=20, blank=True, default='')
    cuffs_type = models.CharField(max_length=50, blank=True, default='')
    cuffs_thickness = models.CharField(max_length=20, blank=True, default='')
    wallet_pocket = models.BooleanField(default=False)
    pen_holder = models.BooleanField(default=False)

    home_delivery = models.BooleanField(default=False)
    express = models.BooleanField(default=False)
    quantity = models.PositiveSmallIntegerField(default=1)
    piece_stage = models.CharField(
        max_length=40,
        choices=PieceStage.choices,
        default=PieceStage.ORDER_AT_SHOP,
    )

    fabric_price_snapshot = models.DecimalField(max_digits=10, decimal_places=3, default=Decimal('0'))
    stitching_price_snapshot = models.DecimalField(max_digits=10, decimal_places=3, default=Decimal('0'))
    style_price_snapshot = models.DecimalField(max_digits=10, decimal_places=3, default=Decimal('0'))

    notes = models.TextField(blank=True, default='')

    class Meta:
        verbose_name = _('Garment')
        verbose_name_plural = _('Garments')
        ordering = ['order', 'garment_id']

    def __str__(self) -> str:
        return self.garment_id or str(self.pk)
