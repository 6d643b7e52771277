import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ('catalog', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='ItemPriceHistory',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('price', models.DecimalField(decimal_places=2, max_digits=12)),
                ('quantity', models.PositiveIntegerField()),
                ('promotion_price', models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True)),
                ('promo_code', models.CharField(blank=True, default='', max_length=50)),
                ('promo_start_date', models.DateTimeField(blank=True, null=True)),
                ('promo_end_date', models.DateTimeField(blank=True, null=True)),
                ('badge', models.CharField(choices=[('NEW_ARRIVALS', 'New arrivals'), ('BESTSELLER', 'Bestseller'), ('HOT_DEALS', 'Hot deals'), ('LIMITED_EDITION', 'Limited edition'), ('ABSENT', 'No badge'), ('USED', 'Used')], default='ABSENT', max_length=20)),
                ('recorded_at', models.DateTimeField(auto_now_add=True, db_index=True)),
                ('item_price', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='history', to='catalog.itemprice')),
            ],
            options={
                'verbose_name': 'Item Price History',
                'verbose_name_plural': 'Item Price History',
                'ordering': ['-recorded_at', '-id'],
            },
        ),
    ]
