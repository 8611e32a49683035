import django.db.models.deletion
from decimal import Decimal
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('clients', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Product',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('title', models.CharField(max_length=255)),
                ('type', models.CharField(choices=[('product', 'Product'), ('package', 'Package'), ('addon', 'Add-on')], default='product', max_length=10)),
                ('description', models.TextField(blank=True, null=True)),
                ('image', models.URLField(blank=True, max_length=500, null=True)),
                ('category', models.CharField(blank=True, max_length=100)),
                ('price', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=10)),
                ('tax_rate', models.CharField(default='GST 10%', max_length=50)),
                ('variations', models.JSONField(blank=True, default=list)),
                ('is_digital', models.BooleanField(default=False)),
                ('requires_onsite', models.BooleanField(default=True)),
                ('is_active', models.BooleanField(default=True)),
                ('show_on_booking_form', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('exclusive_clients', models.ManyToManyField(blank=True, related_name='exclusive_products', to='clients.client')),
                ('licensee', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='products', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'products',
                'ordering': ['title'],
                'indexes': [
                    models.Index(fields=['licensee', 'type'], name='products_lic_type_idx'),
                    models.Index(fields=['licensee', 'is_active'], name='products_lic_active_idx'),
                ],
            },
        ),
    ]
