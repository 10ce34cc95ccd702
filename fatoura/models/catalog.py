"""
Catalog models — fabrics, shelf products and lookups.
"""

from decimal import Decimal

from django.db import models
from django.utils.translation import gettext_lazy as _

from fatoura.models.enums import EmployeeRole


class Fabric(models.Model):
    """Fabric bolt sold by the meter. real_stock is in meters."""

    name = models.CharField(max_length=200, unique=True, verbose_name=_('Name'))
    color = models.CharField(max_length=100, blank=True, default='')
    real_stock = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=Decimal('0'),
        verbose_name=_('Stock (m)'),
    )
    price_per_meter = models.DecimalField(
        max_digits=10,
        decimal_places=3,
        default=Decimal('0'),
        verbose_name=_('Price per meter'),
    )

    class Meta:
        verbose_name = _('Fabric')
        verbose_name_plural = _('Fabrics')
        ordering = ['name']

    def __str__(self) -> str:
        return self.name


class ShelfProduct(models.Model):
    """Ready-made inventory item sold straight from the shelf."""

    type = models.CharField(max_length=100, verbose_name=_('Product type'))
    brand = models.CharField(max_length=100, blank=True, default='', verbose_name=_('Brand'))
    stock = models.PositiveIntegerField(default=0, verbose_name=_('Stock'))
    price = models.DecimalField(
        max_digits=10,
        decimal_places=3,
        default=Decimal('0'),
        verbose_name=_('Price'),
    )

    class Meta:
        verbose_name = _('Shelf product')
        verbose_name_plural = _('Shelf products')
        ordering = ['type', 'brand']
        constraints = [
            models.UniqueConstraint(
                fields=['type', 'brand'],
                name='unique_shelf_type_brand',
            )
        ]

    def __str__(self) -> str:
        return f"{self.type} / {self.brand}" if self.brand else self.type


class Style(models.Model):
    name = models.CharField(max_length=100)
    type = models.CharField(max_length=50, blank=True, default='')
    rate_per_item = models.DecimalField(max_digits=10, decimal_places=3, null=True, blank=True)

    class Meta:
        verbose_name = _('Style')
        verbose_name_plural = _('Styles')

    def __str__(self) -> str:
        return self.name


class Campaign(models.Model):
    name = models.CharField(max_length=200)
    active = models.BooleanField(default=True)

    class Meta:
        verbose_name = _('Campaign')
        verbose_name_plural = _('Campaigns')

    def __str__(self) -> str:
        return self.name


class Employee(models.Model):
    """Order taker / measurer."""

    name = models.CharField(max_length=200)
    email = models.EmailField(blank=True, default='')
    role = models.CharField(max_length=20, choices=EmployeeRole.choices, default=EmployeeRole.STAFF)

    class Meta:
        verbose_name = _('Employee')
        verbose_name_plural = _('Employees')

    def __str__(self) -> str:
        return self.name
