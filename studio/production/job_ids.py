"""Sequential, zero-padded job IDs (00001, 00002, ...)"""
import logging

from django.db import transaction

from .models import JobCard, JobIdCounter

logger = logging.getLogger(__name__)

JOB_ID_WIDTH = 5


def generate_job_id():
    """Atomically advance the counter and return the next job ID"""
    with transaction.atomic():
        counter, _ = JobIdCounter.objects.select_for_update().get_or_create(name='job_id')
        counter.current_value += 1
        counter.save(update_fields=['current_value', 'last_updated'])
        return str(counter.current_value).zfill(JOB_ID_WIDTH)


def assign_job_id(job_card):
    """Give a job card a job ID unless it already has one; returns the ID"""
    with transaction.atomic():
        locked = JobCard.objects.select_for_update().get(pk=job_card.pk)
        if locked.job_id:
            job_card.job_id = locked.job_id
            return locked.job_id
        locked.job_id = generate_job_id()
        locked.save(update_fields=['job_id', 'updated_at'])
    job_card.job_id = locked.job_id
    logger.info(f"Assigned job ID {locked.job_id} to job card {job_card.pk}")
    return locked.job_id
