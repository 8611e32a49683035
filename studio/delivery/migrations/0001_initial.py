import django.db.models.deletion
import studio.delivery.models
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('production', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='DeliverySettings',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('delivery_url', models.SlugField(max_length=255, unique=True)),
                ('header_image', models.CharField(blank=True, help_text='Storage key', max_length=500, null=True)),
                ('enable_comments', models.BooleanField(default=True)),
                ('enable_downloads', models.BooleanField(default=True)),
                ('section_order', models.JSONField(default=studio.delivery.models.default_section_order)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('job_card', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='delivery_settings', to='production.jobcard')),
            ],
            options={
                'db_table': 'delivery_settings',
                'verbose_name_plural': 'Delivery settings',
            },
        ),
        migrations.CreateModel(
            name='DeliveryComment',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('client_name', models.CharField(max_length=255)),
                ('client_email', models.EmailField(max_length=254)),
                ('comment', models.TextField()),
                ('request_revision', models.BooleanField(default=False)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('job_card', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='delivery_comments', to='production.jobcard')),
            ],
            options={
                'db_table': 'delivery_comments',
                'ordering': ['-created_at'],
            },
        ),
        migrations.CreateModel(
            name='DeliveryTracking',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('action_type', models.CharField(choices=[('page_view', 'Page View'), ('file_download', 'File Download'), ('bulk_download', 'Bulk Download')], max_length=20)),
                ('file_name', models.CharField(blank=True, max_length=255, null=True)),
                ('client_info', models.JSONField(blank=True, default=dict)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('job_card', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='delivery_tracking', to='production.jobcard')),
            ],
            options={
                'db_table': 'delivery_tracking',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['job_card', 'action_type'], name='tracking_job_action_idx'),
                ],
            },
        ),
    ]
