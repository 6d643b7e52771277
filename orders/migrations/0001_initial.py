from decimal import Decimal

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Order',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('status', models.CharField(choices=[('NEW', 'New'), ('WAITING_FOR_PAYMENT', 'Waiting for payment'), ('PROCESSING', 'Processing'), ('DELIVERY', 'Delivery'), ('COMPLETED', 'Completed'), ('CANCELLED', 'Cancelled'), ('REFUND', 'Refund'), ('ASK_FOR_PRICE', 'Price request')], db_index=True, default='NEW', help_text='Current order status', max_length=20)),
                ('original_total_price', models.DecimalField(decimal_places=2, default=Decimal('0.00'), help_text='Computed total in the base currency', max_digits=12)),
                ('total_price', models.CharField(help_text='Total as shown to the customer, possibly in another currency', max_length=64)),
                ('line_items', models.JSONField(blank=True, default=list)),
                ('customer_info', models.JSONField(blank=True, default=dict)),
                ('delivery_id', models.CharField(blank=True, max_length=100, null=True)),
                ('comment', models.TextField(blank=True, default='')),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='orders', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'Order',
                'verbose_name_plural': 'Orders',
                'ordering': ['-created_at'],
            },
        ),
        migrations.AddIndex(
            model_name='order',
            index=models.Index(fields=['user', 'status'], name='order_user_status_idx'),
        ),
        migrations.AddIndex(
            model_name='order',
            index=models.Index(fields=['status', 'created_at'], name='order_status_created_idx'),
        ),
    ]
