"""
Fatoura Admin.

Back-office views:
- Price: list + edit (the price table the checkout reads)
- Customer, Fabric, ShelfProduct: list + edit
- Order: read-only with garments and shelf lines inline
- Garment, OrderShelfItem: read-only

Orders only change through the checkout service. The admin never confirms,
cancels or edits an order's money.
"""

from django.contrib import admin
from django.utils.translation import gettext_lazy as _

from fatoura.models import Customer, Fabric, Garment, Order, OrderShelfItem, Price, ShelfProduct


class ReadOnlyMixin:
    """No add, change or delete."""

    def has_add_permission(self, request, obj=None):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


# =========================================================================
# PRICE ADMIN
# =========================================================================

@admin.register(Price)
class PriceAdmin(admin.ModelAdmin):
    """The price table read by the checkout; values edited inline."""

    list_display = ['key', 'value', 'description', 'updated_at']
    list_editable = ['value']
    search_fields = ['key', 'description']
    readonly_fields = ['updated_at']


# =========================================================================
# CUSTOMER / CATALOG ADMIN
# =========================================================================

@admin.register(Customer)
class CustomerAdmin(admin.ModelAdmin):
    list_display = ['name', 'phone', 'nick_name', 'city', 'account_type', 'created_at']
    list_filter = ['account_type', 'city']
    search_fields = ['name', 'phone', 'nick_name', 'arabic_name']
    readonly_fields = ['created_at']


@admin.register(Fabric)
class FabricAdmin(admin.ModelAdmin):
    list_display = ['name', 'color', 'real_stock', 'price_per_meter']
    search_fields = ['name', 'color']


@admin.register(ShelfProduct)
class ShelfProductAdmin(admin.ModelAdmin):
    list_display = ['type', 'brand', 'stock', 'price']
    list_filter = ['type']
    search_fields = ['type', 'brand']


# =========================================================================
# ORDER ADMIN (read-only)
# =========================================================================

class GarmentInline(ReadOnlyMixin, admin.TabularInline):
    model = Garment
    extra = 0
    fields = ['garment_id', 'style', 'style_id', 'fabric', 'fabric_length', 'piece_stage',
              'fabric_price_snapshot', 'stitching_price_snapshot', 'style_price_snapshot']
    readonly_fields = fields
    show_change_link = True


class OrderShelfItemInline(ReadOnlyMixin, admin.TabularInline):
    model = OrderShelfItem
    extra = 0
    fields = ['shelf', 'quantity', 'unit_price']
    readonly_fields = fields


@admin.register(Order)
class OrderAdmin(ReadOnlyMixin, admin.ModelAdmin):
    """Orders are inspected here and changed only through Checkout."""

    list_display = ['id', 'invoice_number', 'order_type', 'checkout_status', 'production_stage',
                    'customer', 'brand', 'order_total', 'paid', 'balance_display', 'created_at']
    list_filter = ['brand', 'order_type', 'checkout_status', 'production_stage']
    search_fields = ['=id', '=invoice_number', 'customer__name', 'customer__phone']
    date_hierarchy = 'created_at'
    inlines = [GarmentInline, OrderShelfItemInline]

    @admin.display(description=_('Balance'))
    def balance_display(self, obj):
        return obj.order_total - obj.paid


@admin.register(Garment)
class GarmentAdmin(ReadOnlyMixin, admin.ModelAdmin):
    list_display = ['garment_id', 'order', 'style', 'style_id', 'fabric_source', 'piece_stage']
    list_filter = ['piece_stage', 'style', 'fabric_source']
    search_fields = ['garment_id']


@admin.register(OrderShelfItem)
class OrderShelfItemAdmin(ReadOnlyMixin, admin.ModelAdmin):
    list_display = ['order', 'shelf', 'quantity', 'unit_price']
    search_fields = ['=order__id']
