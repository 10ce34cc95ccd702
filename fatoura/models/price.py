"""
Price model — flat key/value price list.
"""

from django.db import models
from django.utils.translation import gettext_lazy as _


class Price(models.Model):
    """
    One named price (style option surcharge, service fee, base rate).

    Reference data: the checkout engine reads it, never writes it.

    Examples:
        Price.objects.create(key='STITCHING_STANDARD', value=Decimal('9'))
        Price.objects.create(key='COL_QALLABI', value=Decimal('5'))
    """

    key = models.CharField(
        primary_key=True,
        max_length=64,
        verbose_name=_('Key'),
    )
    value = models.DecimalField(
        max_digits=10,
        decimal_places=3,
        verbose_name=_('Value'),
    )
    description = models.TextField(
        blank=True,
        default='',
        verbose_name=_('Description'),
    )
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _('Price')
        verbose_name_plural = _('Prices')
        ordering = ['key']

    def __str__(self) -> str:
        return f"{self.key} = {self.value}"
