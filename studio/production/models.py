from django.conf import settings
from django.db import models


JOB_CARD_STATUS_CHOICES = [
    ('unassigned', 'Unassigned'),
    ('in_progress', 'In Progress'),
    ('editing', 'Editing'),
    ('ready_for_qa', 'Ready for QC'),
    ('in_revision', 'In Revision'),
    ('delivered', 'Delivered'),
]
JOB_CARD_STATUSES = [choice[0] for choice in JOB_CARD_STATUS_CHOICES]

SERVICE_CATEGORY_CHOICES = [
    ('photography', 'Photography'),
    ('floor_plan', 'Floor Plan'),
    ('drone', 'Drone'),
    ('video', 'Video'),
    ('virtual_tour', 'Virtual Tour'),
    ('other', 'Other'),
]


class JobCard(models.Model):
    """Production unit of work for a booking: shoot, edit, QC and delivery"""
    licensee = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='job_cards')
    job_id = models.CharField(max_length=10, unique=True, null=True, blank=True)
    booking = models.OneToOneField('bookings.Booking', on_delete=models.CASCADE, related_name='job_card')
    client = models.ForeignKey('clients.Client', on_delete=models.CASCADE, related_name='job_cards')
    photographer = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='photographed_job_cards'
    )
    editor = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='edited_job_cards'
    )
    status = models.CharField(max_length=20, choices=JOB_CARD_STATUS_CHOICES, default='unassigned')
    requested_services = models.JSONField(default=list, blank=True)
    editing_notes = models.TextField(blank=True, null=True)
    revision_notes = models.TextField(blank=True, null=True)
    editor_instructions = models.TextField(blank=True, null=True)
    service_blocks = models.JSONField(default=list, blank=True)
    history = models.JSONField(default=list, blank=True)
    assigned_at = models.DateTimeField(null=True, blank=True)
    completed_at = models.DateTimeField(null=True, blank=True)
    delivered_at = models.DateTimeField(null=True, blank=True)
    uploaded_at = models.DateTimeField(null=True, blank=True)
    accepted_at = models.DateTimeField(null=True, blank=True)
    ready_for_qc_at = models.DateTimeField(null=True, blank=True)
    revision_requested_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'job_cards'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['licensee', 'status'], name='jobcards_lic_status_idx'),
            models.Index(fields=['editor', 'status'], name='jobcards_editor_status_idx'),
            models.Index(fields=['job_id'], name='jobcards_job_id_idx'),
        ]

    def __str__(self):
        return f'Job {self.job_id or self.pk}'

    @property
    def property_address(self):
        return self.booking.property_address if self.booking_id else ''


class JobIdCounter(models.Model):
    """Single-row counter backing sequential job IDs"""
    name = models.CharField(max_length=50, unique=True, default='job_id')
    current_value = models.PositiveIntegerField(default=0)
    last_updated = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'job_id_counter'

    def __str__(self):
        return f'{self.name}={self.current_value}'


class ProductionFile(models.Model):
    """Raw, edited or final media uploaded against a job card"""
    MEDIA_TYPE_CHOICES = [
        ('raw', 'Raw'),
        ('edited', 'Edited'),
        ('final', 'Final'),
    ]

    job_card = models.ForeignKey(JobCard, on_delete=models.CASCADE, related_name='files')
    file_name = models.CharField(max_length=255)
    original_name = models.CharField(max_length=255)
    file_path = models.CharField(max_length=500)
    thumbnail_path = models.CharField(max_length=500, blank=True, null=True)
    file_size = models.BigIntegerField(default=0)
    mime_type = models.CharField(max_length=100)
    media_type = models.CharField(max_length=10, choices=MEDIA_TYPE_CHOICES, default='raw')
    service_category = models.CharField(max_length=20, choices=SERVICE_CATEGORY_CHOICES, default='photography')
    instructions = models.TextField(blank=True, null=True)
    export_type = models.CharField(max_length=100, blank=True, null=True)
    custom_description = models.TextField(blank=True, null=True)
    uploaded_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, related_name='production_uploads'
    )
    uploaded_at = models.DateTimeField(auto_now_add=True)
    is_active = models.BooleanField(default=True)

    class Meta:
        db_table = 'production_files'
        ordering = ['-uploaded_at']
        indexes = [
            models.Index(fields=['job_card', 'media_type'], name='prodfiles_job_media_idx'),
        ]

    def __str__(self):
        return self.original_name


class ContentItem(models.Model):
    """Deliverable asset grouping for a job card"""
    STATUS_CHOICES = [
        ('draft', 'Draft'),
        ('ready_for_qc', 'Ready for QC'),
        ('approved', 'Approved'),
        ('delivered', 'Delivered'),
        ('in_revision', 'In Revision'),
    ]

    job_card = models.ForeignKey(JobCard, on_delete=models.CASCADE, related_name='content_items')
    content_id = models.CharField(max_length=100, unique=True)
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True, null=True)
    category = models.CharField(max_length=20, choices=SERVICE_CATEGORY_CHOICES, default='photography')
    media_type = models.CharField(max_length=10, choices=ProductionFile.MEDIA_TYPE_CHOICES, default='final')
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='draft')
    file = models.ForeignKey(ProductionFile, on_delete=models.SET_NULL, null=True, blank=True, related_name='content_items')
    file_key = models.CharField(max_length=500, blank=True, null=True)
    thumb_key = models.CharField(max_length=500, blank=True, null=True)
    file_size = models.BigIntegerField(default=0)
    file_count = models.PositiveIntegerField(default=1)
    uploader_role = models.CharField(max_length=20, blank=True, null=True)
    sort_order = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'content_items'
        ordering = ['sort_order', 'created_at']

    def __str__(self):
        return self.name


class JobActivityLog(models.Model):
    """Timeline of what happened on a job card"""
    job_card = models.ForeignKey(JobCard, on_delete=models.CASCADE, related_name='activity_logs')
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True)
    action = models.CharField(max_length=50)
    description = models.TextField()
    metadata = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'job_activity_log'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['job_card', '-created_at'], name='activity_job_created_idx'),
        ]

    def __str__(self):
        return f'{self.action}: {self.description[:50]}'


class OrderStatusAudit(models.Model):
    """Explicit status changes made by admins, with the reason given"""
    job_card = models.ForeignKey(JobCard, on_delete=models.CASCADE, related_name='status_audits')
    previous_status = models.CharField(max_length=20, blank=True, null=True)
    new_status = models.CharField(max_length=20)
    reason = models.TextField(blank=True, null=True)
    changed_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True)
    changed_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'order_status_audit'
        ordering = ['-changed_at']

    def __str__(self):
        return f'{self.previous_status} -> {self.new_status}'


class ProductionNotification(models.Model):
    job_card = models.ForeignKey(JobCard, on_delete=models.CASCADE, related_name='notifications')
    recipient = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='production_notifications')
    type = models.CharField(max_length=50)
    message = models.TextField()
    is_read = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'production_notifications'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['recipient', 'is_read'], name='notif_recipient_read_idx'),
        ]

    def __str__(self):
        return f'{self.type} for {self.recipient_id}'


class EmailDeliveryLog(models.Model):
    """Delivery emails sent to clients"""
    STATUS_CHOICES = [
        ('sent', 'Sent'),
        ('failed', 'Failed'),
    ]

    job_card = models.ForeignKey(JobCard, on_delete=models.CASCADE, related_name='delivery_emails')
    recipient_email = models.EmailField()
    subject = models.CharField(max_length=255)
    message = models.TextField()
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default='sent')
    error_message = models.TextField(blank=True, null=True)
    sent_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True)
    sent_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'email_delivery_log'
        ordering = ['-sent_at']

    def __str__(self):
        return f'{self.subject} -> {self.recipient_email}'
