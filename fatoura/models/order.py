"""
Order models — the checkout aggregate root and its shelf lines.
"""

from decimal import Decimal

from django.db import models
from django.utils.translation import gettext_lazy as _

from fatoura.models.enums import (
    CheckoutStatus,
    DiscountType,
    OrderType,
    PaymentType,
    ProductionStage,
)


class Order(models.Model):
    """
    Work or sales order.

    Created as DRAFT with minimal fields, updated field by field during the
    wizard, then finalized exactly once by a completion procedure that
    decrements stock and assigns invoice_number.

    Charge fields are the breakdown at the time of the last save; once
    confirmed they are history and never recomputed.
    """

    customer = models.ForeignKey(
        'fatoura.Customer',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='orders',
        verbose_name=_('Customer'),
    )
    order_type = models.CharField(
        max_length=10,
        choices=OrderType.choices,
        default=OrderType.WORK,
        verbose_name=_('Order type'),
    )
    checkout_status = models.CharField(
        max_length=20,
        choices=CheckoutStatus.choices,
        default=CheckoutStatus.DRAFT,
        db_index=True,
        verbose_name=_('Checkout status'),
    )
    production_stage = models.CharField(
        max_length=40,
        choices=ProductionStage.choices,
        null=True,
        blank=True,
        verbose_name=_('Production stage'),
        help_text=_('Work orders only'),
    )
    brand = models.CharField(max_length=50, db_index=True, verbose_name=_('Brand'))

    order_date = models.DateTimeField(null=True, blank=True)
    delivery_date = models.DateTimeField(null=True, blank=True)
    home_delivery = models.BooleanField(default=False)
    express = models.BooleanField(default=False)
    notes = models.TextField(blank=True, default='')

    # Charge breakdown
    fabric_charge = models.DecimalField(max_digits=10, decimal_places=3, default=Decimal('0'))
    stitching_charge = models.DecimalField(max_digits=10, decimal_places=3, default=Decimal('0'))
    style_charge = models.DecimalField(max_digits=10, decimal_places=3, default=Decimal('0'))
    delivery_charge = models.DecimalField(max_digits=10, decimal_places=3, default=Decimal('0'))
    express_charge = models.DecimalField(max_digits=10, decimal_places=3, default=Decimal('0'))
    shelf_charge = models.DecimalField(max_digits=10, decimal_places=3, default=Decimal('0'))
    stitching_price = models.DecimalField(
        max_digits=10,
        decimal_places=3,
        null=True,
        blank=True,
        help_text=_('Negotiated per-garment stitching rate'),
    )

    # Discount
    discount_type = models.CharField(max_length=20, choices=DiscountType.choices, null=True, blank=True)
    discount_value = models.DecimalField(max_digits=10, decimal_places=3, default=Decimal('0'))
    discount_percentage = models.DecimalField(max_digits=6, decimal_places=2, null=True, blank=True)
    referral_code = models.CharField(max_length=50, blank=True, default='')

    # Payment
    payment_type = models.CharField(max_length=20, choices=PaymentType.choices, null=True, blank=True)
    payment_ref_no = models.CharField(max_length=100, blank=True, default='')
    payment_note = models.TextField(blank=True, default='')
    paid = models.DecimalField(max_digits=10, decimal_places=3, default=Decimal('0'))
    order_total = models.DecimalField(max_digits=10, decimal_places=3, default=Decimal('0'))

    invoice_number = models.PositiveIntegerField(
        null=True,
        blank=True,
        unique=True,
        verbose_name=_('Invoice number'),
    )
    order_taker = models.ForeignKey(
        'fatoura.Employee',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='orders',
    )
    campaign = models.ForeignKey(
        'fatoura.Campaign',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='orders',
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _('Order')
        verbose_name_plural = _('Orders')
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['brand', 'checkout_status', 'order_type'], name='fatoura_ord_brand_status_idx'),
        ]

    @property
    def is_draft(self) -> bool:
        return self.checkout_status == CheckoutStatus.DRAFT

    def __str__(self) -> str:
        if self.invoice_number:
            return f"#{self.pk} ({self.order_type}, invoice {self.invoice_number})"
        return f"#{self.pk} ({self.order_type}, {self.checkout_status})"


class OrderShelfItem(models.Model):
    """Shelf product sold on an order, written by the completion procedure."""

    order = models.ForeignKey(
        Order,
        on_delete=models.CASCADE,
        related_name='shelf_items',
    )
    shelf = models.ForeignKey(
        'fatoura.ShelfProduct',
        on_delete=models.PROTECT,
        related_name='order_items',
    )
    quantity = models.PositiveIntegerField()
    unit_price = models.DecimalField(max_digits=10, decimal_places=3)

    class Meta:
        verbose_name = _('Order shelf item')
        verbose_name_plural = _('Order shelf items')

    def __str__(self) -> str:
        return f"{self.quantity} x {self.shelf_id} @ {self.unit_price}"
