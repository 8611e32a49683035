from django.db import models


DEFAULT_SECTION_ORDER = ['photos', 'floor_plans', 'video', 'virtual_tour', 'other_files']

# Production service category -> delivery page section
SECTION_FOR_CATEGORY = {
    'photography': 'photos',
    'drone': 'photos',
    'floor_plan': 'floor_plans',
    'video': 'video',
    'virtual_tour': 'virtual_tour',
    'other': 'other_files',
}


def default_section_order():
    return list(DEFAULT_SECTION_ORDER)


class DeliverySettings(models.Model):
    """How a job's client delivery page looks and what visitors may do there"""
    job_card = models.OneToOneField('production.JobCard', on_delete=models.CASCADE, related_name='delivery_settings')
    delivery_url = models.SlugField(max_length=255, unique=True)
    header_image = models.CharField(max_length=500, blank=True, null=True, help_text="Storage key")
    enable_comments = models.BooleanField(default=True)
    enable_downloads = models.BooleanField(default=True)
    section_order = models.JSONField(default=default_section_order)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'delivery_settings'
        verbose_name_plural = 'Delivery settings'

    def __str__(self):
        return self.delivery_url


class DeliveryComment(models.Model):
    """Feedback left by the client on the delivery page"""
    job_card = models.ForeignKey('production.JobCard', on_delete=models.CASCADE, related_name='delivery_comments')
    client_name = models.CharField(max_length=255)
    client_email = models.EmailField()
    comment = models.TextField()
    request_revision = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'delivery_comments'
        ordering = ['-created_at']

    def __str__(self):
        return f'{self.client_name} on job card {self.job_card_id}'


class DeliveryTracking(models.Model):
    """Page views and downloads on the delivery page"""
    ACTION_CHOICES = [
        ('page_view', 'Page View'),
        ('file_download', 'File Download'),
        ('bulk_download', 'Bulk Download'),
    ]

    job_card = models.ForeignKey('production.JobCard', on_delete=models.CASCADE, related_name='delivery_tracking')
    action_type = models.CharField(max_length=20, choices=ACTION_CHOICES)
    file_name = models.CharField(max_length=255, blank=True, null=True)
    client_info = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'delivery_tracking'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['job_card', 'action_type'], name='tracking_job_action_idx'),
        ]

    def __str__(self):
        return f'{self.action_type} on job card {self.job_card_id}'
