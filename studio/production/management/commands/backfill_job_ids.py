from django.core.management.base import BaseCommand
from django.db.models import IntegerField, Max
from django.db.models.functions import Cast
from studio.core.cache_signals import suspend_cache_signals, invalidate_cache_pattern, invalidate_job_card_lists
from studio.core.model_cache import JOB_CARD_KEY_PREFIX
from studio.production.job_ids import assign_job_id
from studio.production.models import JobCard, JobIdCounter


class Command(BaseCommand):
    help = 'Assign sequential job IDs (e.g. 00042) to job cards that do not have one yet'

    def add_arguments(self, parser):
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Run without making changes to see what would be updated',
        )
        parser.add_argument(
            '--sync-counter',
            action='store_true',
            help='Move the counter past the highest job ID already in use before assigning',
        )

    def sync_counter(self):
        """Make sure the counter never hands out an ID that already exists"""
        highest = JobCard.objects.exclude(job_id__isnull=True).exclude(job_id='').filter(
            job_id__regex=r'^\d+$'
        ).annotate(job_number=Cast('job_id', IntegerField())).aggregate(top=Max('job_number'))['top'] or 0
        counter, _ = JobIdCounter.objects.get_or_create(name='job_id')
        if counter.current_value < highest:
            self.stdout.write(f'Counter moved from {counter.current_value} to {highest}')
            counter.current_value = highest
            counter.save(update_fields=['current_value', 'last_updated'])

    def handle(self, *args, **options):
        dry_run = options['dry_run']

        job_cards = JobCard.objects.filter(job_id__isnull=True).order_by('created_at', 'id')
        total_count = job_cards.count()
        self.stdout.write(f'Found {total_count} job cards without a job ID')

        if dry_run:
            self.stdout.write(self.style.WARNING('DRY RUN MODE - No changes will be made'))
            for job_card in job_cards[:20]:
                self.stdout.write(f'  - Would assign job card {job_card.id} ({job_card.property_address})')
            return

        if options['sync_counter']:
            self.sync_counter()

        updated_count = 0
        error_count = 0
        licensee_ids = set()
        with suspend_cache_signals():
            for job_card in job_cards.iterator():
                try:
                    job_id = assign_job_id(job_card)
                    updated_count += 1
                    licensee_ids.add(job_card.licensee_id)
                    if updated_count <= 10 or updated_count % 100 == 0:
                        self.stdout.write(f'  ✓ Job card {job_card.id} -> {job_id}')
                except Exception as e:
                    error_count += 1
                    self.stdout.write(self.style.ERROR(f'  ✗ Job card {job_card.id}: {e}'))

        # Signals were suspended for the batch
        invalidate_cache_pattern(JOB_CARD_KEY_PREFIX)
        for licensee_id in licensee_ids:
            invalidate_job_card_lists(licensee_id)

        self.stdout.write(self.style.SUCCESS(f'Assigned {updated_count} job IDs ({error_count} errors)'))
