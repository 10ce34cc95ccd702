"""
Customer model.
"""

from django.db import models
from django.utils.translation import gettext_lazy as _

from fatoura.models.enums import AccountType


class Customer(models.Model):
    """Customer identity, contact and delivery address."""

    name = models.CharField(max_length=200, verbose_name=_('Name'))
    phone = models.CharField(max_length=32, blank=True, default='', db_index=True, verbose_name=_('Phone'))
    nick_name = models.CharField(max_length=100, blank=True, default='', verbose_name=_('Nickname'))
    arabic_name = models.CharField(max_length=200, blank=True, default='', verbose_name=_('Arabic name'))
    email = models.EmailField(blank=True, default='', verbose_name=_('Email'))

    # Address
    city = models.CharField(max_length=100, blank=True, default='')
    area = models.CharField(max_length=100, blank=True, default='')
    block = models.CharField(max_length=50, blank=True, default='')
    street = models.CharField(max_length=100, blank=True, default='')
    house_no = models.CharField(max_length=50, blank=True, default='')
    address_note = models.TextField(blank=True, default='')

    account_type = models.CharField(
        max_length=20,
        choices=AccountType.choices,
        blank=True,
        default='',
        verbose_name=_('Account type'),
    )
    notes = models.TextField(blank=True, default='')
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = _('Customer')
        verbose_name_plural = _('Customers')
        ordering = ['-created_at']

    @property
    def has_address(self) -> bool:
        """At least one address part filled in."""
        parts = [self.city, self.area, self.block, self.street, self.house_no]
        return any(p and p.strip() for p in parts)

    def __str__(self) -> str:
        return f"{self.name} ({self.phone})" if self.phone else self.name
