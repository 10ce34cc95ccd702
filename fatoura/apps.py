"""Django app configuration for Fatoura."""

from django.apps import AppConfig
from django.utils.translation import gettext_lazy as _


class FatouraConfig(AppConfig):
    """Configuration for Fatoura app."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "fatoura"
    verbose_name = _("Tailoring Checkout")
