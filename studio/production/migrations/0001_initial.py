import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models

SERVICE_CATEGORIES = [('photography', 'Photography'), ('floor_plan', 'Floor Plan'), ('drone', 'Drone'), ('video', 'Video'), ('virtual_tour', 'Virtual Tour'), ('other', 'Other')]
MEDIA_TYPES = [('raw', 'Raw'), ('edited', 'Edited'), ('final', 'Final')]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('bookings', '0001_initial'),
        ('clients', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='JobIdCounter',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(default='job_id', max_length=50, unique=True)),
                ('current_value', models.PositiveIntegerField(default=0)),
                ('last_updated', models.DateTimeField(auto_now=True)),
            ],
            options={
                'db_table': 'job_id_counter',
            },
        ),
        migrations.CreateModel(
            name='JobCard',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('job_id', models.CharField(blank=True, max_length=10, null=True, unique=True)),
                ('status', models.CharField(choices=[('unassigned', 'Unassigned'), ('in_progress', 'In Progress'), ('editing', 'Editing'), ('ready_for_qa', 'Ready for QC'), ('in_revision', 'In Revision'), ('delivered', 'Delivered')], default='unassigned', max_length=20)),
                ('requested_services', models.JSONField(blank=True, default=list)),
                ('editing_notes', models.TextField(blank=True, null=True)),
                ('revision_notes', models.TextField(blank=True, null=True)),
                ('editor_instructions', models.TextField(blank=True, null=True)),
                ('service_blocks', models.JSONField(blank=True, default=list)),
                ('history', models.JSONField(blank=True, default=list)),
                ('assigned_at', models.DateTimeField(blank=True, null=True)),
                ('completed_at', models.DateTimeField(blank=True, null=True)),
                ('delivered_at', models.DateTimeField(blank=True, null=True)),
                ('uploaded_at', models.DateTimeField(blank=True, null=True)),
                ('accepted_at', models.DateTimeField(blank=True, null=True)),
                ('ready_for_qc_at', models.DateTimeField(blank=True, null=True)),
                ('revision_requested_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('booking', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='job_card', to='bookings.booking')),
                ('client', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='job_cards', to='clients.client')),
                ('editor', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='edited_job_cards', to=settings.AUTH_USER_MODEL)),
                ('licensee', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='job_cards', to=settings.AUTH_USER_MODEL)),
                ('photographer', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='photographed_job_cards', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'job_cards',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['licensee', 'status'], name='jobcards_lic_status_idx'),
                    models.Index(fields=['editor', 'status'], name='jobcards_editor_status_idx'),
                    models.Index(fields=['job_id'], name='jobcards_job_id_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='ProductionFile',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('file_name', models.CharField(max_length=255)),
                ('original_name', models.CharField(max_length=255)),
                ('file_path', models.CharField(max_length=500)),
                ('thumbnail_path', models.CharField(blank=True, max_length=500, null=True)),
                ('file_size', models.BigIntegerField(default=0)),
                ('mime_type', models.CharField(max_length=100)),
                ('media_type', models.CharField(choices=MEDIA_TYPES, default='raw', max_length=10)),
                ('service_category', models.CharField(choices=SERVICE_CATEGORIES, default='photography', max_length=20)),
                ('instructions', models.TextField(blank=True, null=True)),
                ('export_type', models.CharField(blank=True, max_length=100, null=True)),
                ('custom_description', models.TextField(blank=True, null=True)),
                ('uploaded_at', models.DateTimeField(auto_now_add=True)),
                ('is_active', models.BooleanField(default=True)),
                ('job_card', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='files', to='production.jobcard')),
                ('uploaded_by', models.ForeignKey(null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='production_uploads', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'production_files',
                'ordering': ['-uploaded_at'],
                'indexes': [
                    models.Index(fields=['job_card', 'media_type'], name='prodfiles_job_media_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='ContentItem',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('content_id', models.CharField(max_length=100, unique=True)),
                ('name', models.CharField(max_length=255)),
                ('description', models.TextField(blank=True, null=True)),
                ('category', models.CharField(choices=SERVICE_CATEGORIES, default='photography', max_length=20)),
                ('media_type', models.CharField(choices=MEDIA_TYPES, default='final', max_length=10)),
                ('status', models.CharField(choices=[('draft', 'Draft'), ('ready_for_qc', 'Ready for QC'), ('approved', 'Approved'), ('delivered', 'Delivered'), ('in_revision', 'In Revision')], default='draft', max_length=20)),
                ('file_key', models.CharField(blank=True, max_length=500, null=True)),
                ('thumb_key', models.CharField(blank=True, max_length=500, null=True)),
                ('file_size', models.BigIntegerField(default=0)),
                ('file_count', models.PositiveIntegerField(default=1)),
                ('uploader_role', models.CharField(blank=True, max_length=20, null=True)),
                ('sort_order', models.PositiveIntegerField(default=0)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('file', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='content_items', to='production.productionfile')),
                ('job_card', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='content_items', to='production.jobcard')),
            ],
            options={
                'db_table': 'content_items',
                'ordering': ['sort_order', 'created_at'],
            },
        ),
        migrations.CreateModel(
            name='JobActivityLog',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('action', models.CharField(max_length=50)),
                ('description', models.TextField()),
                ('metadata', models.JSONField(blank=True, default=dict)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('job_card', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='activity_logs', to='production.jobcard')),
                ('user', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'job_activity_log',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['job_card', '-created_at'], name='activity_job_created_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='OrderStatusAudit',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('previous_status', models.CharField(blank=True, max_length=20, null=True)),
                ('new_status', models.CharField(max_length=20)),
                ('reason', models.TextField(blank=True, null=True)),
                ('changed_at', models.DateTimeField(auto_now_add=True)),
                ('changed_by', models.ForeignKey(null=True, on_delete=django.db.models.deletion.SET_NULL, to=settings.AUTH_USER_MODEL)),
                ('job_card', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='status_audits', to='production.jobcard')),
            ],
            options={
                'db_table': 'order_status_audit',
                'ordering': ['-changed_at'],
            },
        ),
        migrations.CreateModel(
            name='ProductionNotification',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('type', models.CharField(max_length=50)),
                ('message', models.TextField()),
                ('is_read', models.BooleanField(default=False)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('job_card', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='notifications', to='production.jobcard')),
                ('recipient', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='production_notifications', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'production_notifications',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['recipient', 'is_read'], name='notif_recipient_read_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='EmailDeliveryLog',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('recipient_email', models.EmailField(max_length=254)),
                ('subject', models.CharField(max_length=255)),
                ('message', models.TextField()),
                ('status', models.CharField(choices=[('sent', 'Sent'), ('failed', 'Failed')], default='sent', max_length=10)),
                ('error_message', models.TextField(blank=True, null=True)),
                ('sent_at', models.DateTimeField(auto_now_add=True)),
                ('job_card', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='delivery_emails', to='production.jobcard')),
                ('sent_by', models.ForeignKey(null=True, on_delete=django.db.models.deletion.SET_NULL, to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'email_delivery_log',
                'ordering': ['-sent_at'],
            },
        ),
    ]
