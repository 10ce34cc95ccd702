"""
Enums for Fatoura models.
"""

from django.db import models
from django.utils.translation import gettext_lazy as _


class CheckoutStatus(models.TextChoices):
    """
    Order checkout lifecycle.

    DRAFT → CONFIRMED or DRAFT → CANCELLED, exactly once.
    CONFIRMED and CANCELLED are terminal.
    """
    DRAFT = 'draft', _('Draft')              # Customer is building the order
    CONFIRMED = 'confirmed', _('Confirmed')  # Completed, invoice assigned
    CANCELLED = 'cancelled', _('Cancelled')


class OrderType(models.TextChoices):
    WORK = 'WORK', _('Work order')      # Tailored garments
    SALES = 'SALES', _('Sales order')   # Shelf items only


class ProductionStage(models.TextChoices):
    """Workshop lifecycle of a confirmed work order (the fatoura stage)."""
    ORDER_AT_SHOP = 'order_at_shop', _('Order At Shop')
    SENT_TO_WORKSHOP = 'sent_to_workshop', _('Sent To Workshop')
    ORDER_AT_WORKSHOP = 'order_at_workshop', _('Order At Workshop')
    BROVA_AND_FINAL_DISPATCHED_TO_SHOP = 'brova_and_final_dispatched_to_shop', _('Brova & Final Dispatched to Shop')
    FINAL_DISPATCHED_TO_SHOP = 'final_dispatched_to_shop', _('Final Dispatched to Shop')
    BROVA_AT_SHOP = 'brova_at_shop', _('Brova At Shop')
    BROVA_ACCEPTED = 'brova_accepted', _('Brova Accepted')
    BROVA_ALTERATION = 'brova_alteration', _('Brova Alteration')
    BROVA_REPAIR_AND_PRODUCTION = 'brova_repair_and_production', _('Brova Repair & Production')
    BROVA_ALTERATION_AND_PRODUCTION = 'brova_alteration_and_production', _('Brova Alteration & Production')
    FINAL_AT_SHOP = 'final_at_shop', _('Final At Shop')
    BROVA_AND_FINAL_AT_SHOP = 'brova_and_final_at_shop', _('Brova & Final At Shop')
    ORDER_COLLECTED = 'order_collected', _('Order Collected')
    ORDER_DELIVERED = 'order_delivered', _('Order Delivered')
    WAITING_CUT = 'waiting_cut', _('Waiting Cut')
    SOAKING = 'soaking', _('Soaking')
    REDO = 'redo', _('Redo')


class PieceStage(models.TextChoices):
    """Per-garment production substage."""
    ORDER_AT_SHOP = 'order_at_shop', _('Garment At Shop')
    ORDER_AT_WORKSHOP = 'order_at_workshop', _('Garment At Workshop')
    SOAKING = 'soaking', _('Soaking')
    WAITING_CUT = 'waiting_cut', _('Waiting Cut')
    BROVA_DISPATCHED_TO_SHOP = 'brova_dispatched_to_shop', _('Brova Dispatched to Shop')
    BROVA_AT_SHOP = 'brova_at_shop', _('Brova At Shop')
    BROVA_COLLECTED = 'brova_collected', _('Brova Collected')
    BROVA_ACCEPTED = 'brova_accepted', _('Confirmed Brova At Shop')
    REDO = 'redo', _('Redo')
    FINAL_AT_SHOP = 'final_at_shop', _('Fabric Delivered')
    ORDER_COLLECTED = 'order_collected', _('Fabric Collected')
    BROVA_REPAIR_AND_PRODUCTION = 'brova_repair_and_production', _('Brova Repair')


class PaymentType(models.TextChoices):
    KNET = 'knet', _('KNET')
    CASH = 'cash', _('Cash')
    LINK_PAYMENT = 'link_payment', _('Link payment')
    INSTALLMENTS = 'installments', _('Installments')
    OTHERS = 'others', _('Others')


class DiscountType(models.TextChoices):
    """
    Mutually exclusive discount modes.

    FLAT/REFERRAL/LOYALTY are a percentage of the subtotal.
    BY_VALUE is a cash amount entered directly.
    """
    FLAT = 'flat', _('Flat')
    REFERRAL = 'referral', _('Referral')
    LOYALTY = 'loyalty', _('Loyalty')
    BY_VALUE = 'by_value', _('Cash value')


class FabricSource(models.TextChoices):
    INTERNAL = 'IN', _('Shop stock')          # Decrements fabric stock
    EXTERNAL = 'OUT', _('Customer supplied')  # No fabric charge


class JabzourType(models.TextChoices):
    BUTTON = 'BUTTON', _('Button')
    ZIPPER = 'ZIPPER', _('Zipper')


class GarmentStyle(models.TextChoices):
    KUWAITI = 'kuwaiti', _('Kuwaiti')
    DESIGN = 'design', _('Design')


class AccountType(models.TextChoices):
    PRIMARY = 'Primary', _('Primary')
    SECONDARY = 'Secondary', _('Secondary')


class EmployeeRole(models.TextChoices):
    ADMIN = 'admin', _('Admin')
    STAFF = 'staff', _('Staff')
    MANAGER = 'manager', _('Manager')
