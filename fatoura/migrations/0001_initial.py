"""
Initial migration for Fatoura models.
"""

import uuid
from decimal import Decimal

import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):
    """Create Fatoura models: prices, catalog, customers, orders, garments."""

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Price',
            fields=[
                ('key', models.CharField(max_length=64, primary_key=True, serialize=False, verbose_name='Key')),
                ('value', models.DecimalField(decimal_places=3, max_digits=10, verbose_name='Value')),
                ('description', models.TextField(blank=True, default='', verbose_name='Description')),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name': 'Price',
                'verbose_name_plural': 'Prices',
                'ordering': ['key'],
            },
        ),
        migrations.CreateModel(
            name='Customer',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=200, verbose_name='Name')),
                ('phone', models.CharField(blank=True, db_index=True, default='', max_length=32, verbose_name='Phone')),
                ('nick_name', models.CharField(blank=True, default='', max_length=100, verbose_name='Nickname')),
                ('arabic_name', models.CharField(blank=True, default='', max_length=200, verbose_name='Arabic name')),
                ('email', models.EmailField(blank=True, default='', max_length=254, verbose_name='Email')),
                ('city', models.CharField(blank=True, default='', max_length=100)),
                ('area', models.CharField(blank=True, default='', max_length=100)),
                ('block', models.CharField(blank=True, default='', max_length=50)),
                ('street', models.CharField(blank=True, default='', max_length=100)),
                ('house_no', models.CharField(blank=True, default='', max_length=50)),
                ('address_note', models.TextField(blank=True, default='')),
                ('account_type', models.CharField(blank=True, choices=[('Primary', 'Primary'), ('Secondary', 'Secondary')], default='', max_length=20, verbose_name='Account type')),
                ('notes', models.TextField(blank=True, default='')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
            ],
            options={
                'verbose_name': 'Customer',
                'verbose_name_plural': 'Customers',
                'ordering': ['-created_at'],
            },
        ),
        migrations.CreateModel(
            name='Fabric',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=200, unique=True, verbose_name='Name')),
                ('color', models.CharField(blank=True, default='', max_length=100)),
                ('real_stock', models.DecimalField(decimal_places=2, default=Decimal('0'), max_digits=10, verbose_name='Stock (m)')),
                ('price_per_meter', models.DecimalField(decimal_places=3, default=Decimal('0'), max_digits=10, verbose_name='Price per meter')),
            ],
            options={
                'verbose_name': 'Fabric',
                'verbose_name_plural': 'Fabrics',
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='ShelfProduct',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('type', models.CharField(max_length=100, verbose_name='Product type')),
                ('brand', models.CharField(blank=True, default='', max_length=100, verbose_name='Brand')),
                ('stock', models.PositiveIntegerField(default=0, verbose_name='Stock')),
                ('price', models.DecimalField(decimal_places=3, default=Decimal('0'), max_digits=10, verbose_name='Price')),
            ],
            options={
                'verbose_name': 'Shelf product',
                'verbose_name_plural': 'Shelf products',
                'ordering': ['type', 'brand'],
                'constraints': [models.UniqueConstraint(fields=('type', 'brand'), name='unique_shelf_type_brand')],
            },
        ),
        migrations.CreateModel(
            name='Style',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=100)),
                ('type', models.CharField(blank=True, default='', max_length=50)),
                ('rate_per_item', models.DecimalField(blank=True, decimal_places=3, max_digits=10, null=True)),
            ],
            options={
                'verbose_name': 'Style',
                'verbose_name_plural': 'Styles',
            },
        ),
        migrations.CreateModel(
            name='Campaign',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=200)),
                ('active', models.BooleanField(default=True)),
            ],
            options={
                'verbose_name': 'Campaign',
                'verbose_name_plural': 'Campaigns',
            },
        ),
        migrations.CreateModel(
            name='Employee',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=200)),
                ('email', models.EmailField(blank=True, default='', max_length=254)),
                ('role', models.CharField(choices=[('admin', 'Admin'), ('staff', 'Staff'), ('manager', 'Manager')], default='staff', max_length=20)),
            ],
            options={
                'verbose_name': 'Employee',
                'verbose_name_plural': 'Employees',
            },
        ),
        migrations.CreateModel(
            name='Order',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('order_type', models.CharField(choices=[('WORK', 'Work order'), ('SALES', 'Sales order')], default='WORK', max_length=10, verbose_name='Order type')),
                ('checkout_status', models.CharField(choices=[('draft', 'Draft'), ('confirmed', 'Confirmed'), ('cancelled', 'Cancelled')], db_index=True, default='draft', max_length=20, verbose_name='Checkout status')),
                ('production_stage', models.CharField(blank=True, choices=[('order_at_shop', 'Order At Shop'), ('sent_to_workshop', 'Sent To Workshop'), ('order_at_workshop', 'Order At Workshop'), ('brova_and_final_dispatched_to_shop', 'Brova & Final Dispatched to Shop'), ('final_dispatched_to_shop', 'Final Dispatched to Shop'), ('brova_at_shop', 'Brova At Shop'), ('brova_accepted', 'Brova Accepted'), ('brova_alteration', 'Brova Alteration'), ('brova_repair_and_production', 'Brova Repair & Production'), ('brova_alteration_and_production', 'Brova Alteration & Production'), ('final_at_shop', 'Final At Shop'), ('brova_and_final_at_shop', 'Brova & Final At Shop'), ('order_collected', 'Order Collected'), ('order_delivered', 'Order Delivered'), ('waiting_cut', 'Waiting Cut'), ('soaking', 'Soaking'), ('redo', 'Redo')], help_text='Work orders only', max_length=40, null=True, verbose_name='Production stage')),
                ('brand', models.CharField(db_index=True, max_length=50, verbose_name='Brand')),
                ('order_date', models.DateTimeField(blank=True, null=True)),
                ('delivery_date', models.DateTimeField(blank=True, null=True)),
                ('home_delivery', models.BooleanField(default=False)),
                ('express', models.BooleanField(default=False)),
                ('notes', models.TextField(blank=True, default='')),
                ('fabric_charge', models.DecimalField(decimal_places=3, default=Decimal('0'), max_digits=10)),
                ('stitching_charge', models.DecimalField(decimal_places=3, default=Decimal('0'), max_digits=10)),
                ('style_charge', models.DecimalField(decimal_places=3, default=Decimal('0'), max_digits=10)),
                ('delivery_charge', models.DecimalField(decimal_places=3, default=Decimal('0'), max_digits=10)),
                ('express_charge', models.DecimalField(decimal_places=3, default=Decimal('0'), max_digits=10)),
                ('shelf_charge', models.DecimalField(decimal_places=3, default=Decimal('0'), max_digits=10)),
                ('stitching_price', models.DecimalField(blank=True, decimal_places=3, help_text='Negotiated per-garment stitching rate', max_digits=10, null=True)),
                ('discount_type', models.CharField(blank=True, choices=[('flat', 'Flat'), ('referral', 'Referral'), ('loyalty', 'Loyalty'), ('by_value', 'Cash value')], max_length=20, null=True)),
                ('discount_value', models.DecimalField(decimal_places=3, default=Decimal('0'), max_digits=10)),
                ('discount_percentage', models.DecimalField(blank=True, decimal_places=2, max_digits=6, null=True)),
                ('referral_code', models.CharField(blank=True, default='', max_length=50)),
                ('payment_type', models.CharField(blank=True, choices=[('knet', 'KNET'), ('cash', 'Cash'), ('link_payment', 'Link payment'), ('installments', 'Installments'), ('others', 'Others')], max_length=20, null=True)),
                ('payment_ref_no', models.CharField(blank=True, default='', max_length=100)),
                ('payment_note', models.TextField(blank=True, default='')),
                ('paid', models.DecimalField(decimal_places=3, default=Decimal('0'), max_digits=10)),
                ('order_total', models.DecimalField(decimal_places=3, default=Decimal('0'), max_digits=10)),
                ('invoice_number', models.PositiveIntegerField(blank=True, null=True, unique=True, verbose_name='Invoice number')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('campaign', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='orders', to='fatoura.campaign')),
                ('customer', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='orders', to='fatoura.customer', verbose_name='Customer')),
                ('order_taker', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='orders', to='fatoura.employee')),
            ],
            options={
                'verbose_name': 'Order',
                'verbose_name_plural': 'Orders',
                'ordering': ['-created_at'],
                'indexes': [models.Index(fields=['brand', 'checkout_status', 'order_type'], name='fatoura_ord_brand_status_idx')],
            },
        ),
        migrations.CreateModel(
            name='OrderShelfItem',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('quantity', models.PositiveIntegerField()),
                ('unit_price', models.DecimalField(decimal_places=3, max_digits=10)),
                ('order', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='shelf_items', to='fatoura.order')),
                ('shelf', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='order_items', to='fatoura.shelfproduct')),
            ],
            options={
                'verbose_name': 'Order shelf item',
                'verbose_name_plural': 'Order shelf items',
            },
        ),
        migrations.CreateModel(
            name='Garment',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('garment_id', models.CharField(blank=True, default='', max_length=50, verbose_name='Garment number')),
                ('fabric_source', models.CharField(choices=[('IN', 'Shop stock'), ('OUT', 'Customer supplied')], default='IN', max_length=3)),
                ('fabric_length', models.DecimalField(decimal_places=2, default=Decimal('0'), max_digits=8)),
                ('style', models.CharField(default='kuwaiti', max_length=20)),
                ('style_id', models.CharField(blank=True, default='', help_text='Style group (S-1, S-2, ...)', max_length=20)),
                ('lines', models.PositiveSmallIntegerField(default=1)),
                ('collar_type', models.CharField(blank=True, default='', max_length=50)),
                ('collar_button', models.CharField(blank=True, default='', max_length=50)),
                ('jabzour_1', models.CharField(blank=True, choices=[('BUTTON', 'Button'), ('ZIPPER', 'Zipper')], default='', max_length=10)),
                ('jabzour_2', models.CharField(blank=True, default='', max_length=50)),
                ('jabzour_thickness', models.CharField(blank=True, default='', max_length=20)),
                ('front_pocket_type', models.CharField(blank=True, default='', max_length=50)),
                ('front_pocket_thickness', models.CharField(blank=True, default='', max_length=20)),
                ('cuffs_type', models.CharField(blank=True, default='', max_length=50)),
                ('cuffs_thickness', models.CharField(blank=True, default='', max_length=20)),
                ('wallet_pocket', models.BooleanField(default=False)),
                ('pen_holder', models.BooleanField(default=False)),
                ('home_delivery', models.BooleanField(default=False)),
                ('express', models.BooleanField(default=False)),
                ('quantity', models.PositiveSmallIntegerField(default=1)),
                ('piece_stage', models.CharField(choices=[('order_at_shop', 'Garment At Shop'), ('order_at_workshop', 'Garment At Workshop'), ('soaking', 'Soaking'), ('waiting_cut', 'Waiting Cut'), ('brova_dispatched_to_shop', 'Brova Dispatched to Shop'), ('brova_at_shop', 'Brova At Shop'), ('brova_collected', 'Brova Collected'), ('brova_accepted', 'Confirmed Brova At Shop'), ('redo', 'Redo'), ('final_at_shop', 'Fabric Delivered'), ('order_collected', 'Fabric Collected'), ('brova_repair_and_production', 'Brova Repair')], default='order_at_shop', max_length=40)),
                ('fabric_price_snapshot', models.DecimalField(decimal_places=3, default=Decimal('0'), max_digits=10)),
                ('stitching_price_snapshot', models.DecimalField(decimal_places=3, default=Decimal('0'), max_digits=10)),
                ('style_price_snapshot', models.DecimalField(decimal_places=3, default=Decimal('0'), max_digits=10)),
                ('notes', models.TextField(blank=True, default='')),
                ('fabric', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='garments', to='fatoura.fabric')),
                ('order', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='garments', to='fatoura.order')),
            ],
            options={
                'verbose_name': 'Garment',
                'verbose_name_plural': 'Garments',
                'ordering': ['order', 'garment_id'],
            },
        ),
    ]
