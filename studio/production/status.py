"""Status labels, history entries and per-role actions for job cards"""
from django.utils import timezone

ACTION_UPLOAD = 'upload'
ACTION_ACCEPT = 'accept'
ACTION_READY_FOR_QC = 'readyForQC'
ACTION_REVISION = 'revision'
ACTION_DELIVERED = 'delivered'
HISTORY_ACTIONS = [ACTION_UPLOAD, ACTION_ACCEPT, ACTION_READY_FOR_QC, ACTION_REVISION, ACTION_DELIVERED]

STATUS_LABELS = {
    'pending': 'Pending',
    'unassigned': 'Pending',
    'in_progress': 'In Progress',
    'editing': 'In Progress',
    'ready_for_qc': 'Ready for QC',
    'ready_for_qa': 'Ready for QC',
    'in_revision': 'In Revision',
    'delivered': 'Delivered',
}


def get_order_status(job_card):
    """Explicit status if set, otherwise derived from the action timestamps"""
    if job_card.status:
        return job_card.status
    if job_card.delivered_at:
        return 'delivered'
    if job_card.assigned_at and job_card.editor_id:
        return 'in_progress'
    return 'pending'


def get_status_label(status):
    if status in STATUS_LABELS:
        return STATUS_LABELS[status]
    return status.replace('_', ' ').title()


def create_history_entry(action, user_id, notes=None):
    entry = {
        'action': action,
        'by': str(user_id),
        'at': timezone.now().isoformat(),
    }
    if notes:
        entry['notes'] = notes
    return entry


def get_available_actions(job_card, role, user_id=None):
    """Buttons to offer a user for a job card.

    Only editors get lifecycle actions here; delivery and revision are
    driven from the job card screens by admins.
    """
    status = job_card.status or 'pending'
    actions = []
    if role == 'editor':
        if status in ('pending', 'unassigned'):
            actions.append({'action': ACTION_ACCEPT, 'label': 'Accept Job', 'variant': 'default'})
        if status in ('in_progress', 'editing'):
            actions.append({'action': ACTION_READY_FOR_QC, 'label': 'Mark Ready for QC', 'variant': 'default'})
    return actions


def status_timestamps(job_card, new_status, now=None):
    """Timestamps that a move to ``new_status`` stamps when still empty"""
    now = now or timezone.now()
    updates = {}
    if new_status == 'in_progress' and not job_card.assigned_at:
        updates['assigned_at'] = now
    if new_status == 'delivered' and not job_card.delivered_at:
        updates['delivered_at'] = now
    if new_status in ('ready_for_qa', 'editing') and not job_card.completed_at:
        updates['completed_at'] = now
    return updates
