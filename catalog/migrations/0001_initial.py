from decimal import Decimal

import django.core.validators
import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='WarehouseCountry',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('slug', models.SlugField(unique=True)),
                ('country_code', models.CharField(db_index=True, help_text='ISO 3166-1 alpha-2 code, e.g. PL', max_length=2)),
                ('phone_code', models.CharField(blank=True, default='', max_length=8)),
                ('name', models.CharField(max_length=100)),
                ('is_active', models.BooleanField(default=True)),
            ],
            options={
                'verbose_name': 'Warehouse Country',
                'verbose_name_plural': 'Warehouse Countries',
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='Warehouse',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(db_index=True, max_length=200)),
                ('displayed_name', models.CharField(help_text='Name shown to customers', max_length=200)),
                ('is_visible', models.BooleanField(db_index=True, default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('country', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='warehouses', to='catalog.warehousecountry')),
            ],
            options={
                'verbose_name': 'Warehouse',
                'verbose_name_plural': 'Warehouses',
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='Brand',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=200)),
                ('alias', models.SlugField(max_length=200, unique=True)),
                ('image_link', models.CharField(blank=True, default='', max_length=500)),
                ('is_visible', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='Category',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=200)),
                ('slug', models.SlugField(max_length=200, unique=True)),
                ('is_visible', models.BooleanField(default=True)),
                ('image_link', models.CharField(blank=True, default='', max_length=500)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name': 'Category',
                'verbose_name_plural': 'Categories',
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='CategoryTranslation',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('locale', models.CharField(max_length=5)),
                ('name', models.CharField(max_length=200)),
                ('category', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='translations', to='catalog.category')),
            ],
        ),
        migrations.AddConstraint(
            model_name='categorytranslation',
            constraint=models.UniqueConstraint(fields=('category', 'locale'), name='unique_category_translation_locale'),
        ),
        migrations.CreateModel(
            name='Subcategory',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=200)),
                ('slug', models.SlugField(max_length=200, unique=True)),
                ('is_visible', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('category', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='subcategories', to='catalog.category')),
            ],
            options={
                'verbose_name': 'Subcategory',
                'verbose_name_plural': 'Subcategories',
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='SubcategoryTranslation',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('locale', models.CharField(max_length=5)),
                ('name', models.CharField(max_length=200)),
                ('subcategory', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='translations', to='catalog.subcategory')),
            ],
        ),
        migrations.AddConstraint(
            model_name='subcategorytranslation',
            constraint=models.UniqueConstraint(fields=('subcategory', 'locale'), name='unique_subcategory_translation_locale'),
        ),
        migrations.CreateModel(
            name='Item',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('article_id', models.CharField(help_text='Public article identifier', max_length=100, unique=True)),
                ('is_displayed', models.BooleanField(db_index=True, default=False)),
                ('image_links', models.JSONField(blank=True, default=list)),
                ('warranty_length', models.PositiveIntegerField(default=12, help_text='Warranty length in months')),
                ('warranty_type', models.CharField(default='manufacturer', max_length=50)),
                ('sell_counter', models.PositiveIntegerField(default=0)),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('brand', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='items', to='catalog.brand')),
                ('category', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='items', to='catalog.category')),
                ('subcategory', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='items', to='catalog.subcategory')),
            ],
            options={
                'verbose_name': 'Item',
                'verbose_name_plural': 'Items',
                'ordering': ['-created_at'],
            },
        ),
        migrations.AddIndex(
            model_name='item',
            index=models.Index(fields=['is_displayed', 'created_at'], name='item_displayed_created_idx'),
        ),
        migrations.CreateModel(
            name='ItemDetail',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('locale', models.CharField(db_index=True, default='pl', max_length=5)),
                ('item_name', models.CharField(max_length=300)),
                ('description', models.TextField(blank=True, default='')),
                ('specifications', models.TextField(blank=True, default='')),
                ('seller', models.CharField(blank=True, default='', max_length=200)),
                ('discount', models.DecimalField(blank=True, decimal_places=2, max_digits=5, null=True)),
                ('popularity', models.IntegerField(blank=True, null=True)),
                ('meta_description', models.TextField(blank=True, default='')),
                ('meta_keywords', models.TextField(blank=True, default='')),
                ('item', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='details', to='catalog.item')),
            ],
            options={
                'verbose_name': 'Item Detail',
                'verbose_name_plural': 'Item Details',
                'ordering': ['item', 'locale'],
            },
        ),
        migrations.AddConstraint(
            model_name='itemdetail',
            constraint=models.UniqueConstraint(fields=('item', 'locale'), name='unique_item_detail_locale'),
        ),
        migrations.CreateModel(
            name='ItemPrice',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('price', models.DecimalField(decimal_places=2, help_text='Base price in the base currency', max_digits=12, validators=[django.core.validators.MinValueValidator(Decimal('0.00'))])),
                ('quantity', models.PositiveIntegerField(default=0, help_text='Units in stock')),
                ('promotion_price', models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True, validators=[django.core.validators.MinValueValidator(Decimal('0.00'))])),
                ('promo_code', models.CharField(blank=True, default='', max_length=50)),
                ('promo_start_date', models.DateTimeField(blank=True, null=True)),
                ('promo_end_date', models.DateTimeField(blank=True, null=True)),
                ('badge', models.CharField(choices=[('NEW_ARRIVALS', 'New arrivals'), ('BESTSELLER', 'Bestseller'), ('HOT_DEALS', 'Hot deals'), ('LIMITED_EDITION', 'Limited edition'), ('ABSENT', 'No badge'), ('USED', 'Used')], default='ABSENT', max_length=20)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('item', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='prices', to='catalog.item')),
                ('warehouse', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='item_prices', to='catalog.warehouse')),
            ],
            options={
                'verbose_name': 'Item Price',
                'verbose_name_plural': 'Item Prices',
                'ordering': ['id'],
            },
        ),
        migrations.AddConstraint(
            model_name='itemprice',
            constraint=models.UniqueConstraint(fields=('item', 'warehouse'), name='unique_item_warehouse_price'),
        ),
        migrations.AddIndex(
            model_name='itemprice',
            index=models.Index(fields=['warehouse', 'quantity'], name='itemprice_warehouse_qty_idx'),
        ),
        migrations.CreateModel(
            name='CurrencyExchange',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('from_currency', models.CharField(choices=[('EUR', 'Euro'), ('PLN', 'Polish złoty'), ('UAH', 'Ukrainian hryvnia')], max_length=3)),
                ('to_currency', models.CharField(choices=[('EUR', 'Euro'), ('PLN', 'Polish złoty'), ('UAH', 'Ukrainian hryvnia')], max_length=3)),
                ('rate', models.DecimalField(decimal_places=6, max_digits=14, validators=[django.core.validators.MinValueValidator(Decimal('0.000001'))])),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name': 'Currency Exchange',
                'verbose_name_plural': 'Currency Exchange Rates',
                'ordering': ['-updated_at'],
            },
        ),
        migrations.AddConstraint(
            model_name='currencyexchange',
            constraint=models.UniqueConstraint(fields=('from_currency', 'to_currency'), name='unique_currency_pair'),
        ),
    ]
