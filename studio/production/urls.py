from django.urls import path
from . import views

urlpatterns = [
    # Job cards
    path('job-cards/', views.job_card_list, name='job-card-list'),
    path('editor/job-cards/', views.editor_job_card_list, name='editor-job-card-list'),
    path('job-cards/<int:pk>/', views.job_card_detail, name='job-card-detail'),
    path('job-cards/<int:pk>/status/', views.job_card_status, name='job-card-status'),
    path('job-cards/<int:pk>/actions/<str:action>/', views.job_card_action, name='job-card-action'),
    path('job-cards/<int:pk>/accept/', views.job_card_accept, name='job-card-accept'),
    path('job-cards/<int:pk>/mark-ready-qc/', views.job_card_mark_ready_qc, name='job-card-mark-ready-qc'),
    path('job-cards/<int:pk>/request-revision/', views.job_card_request_revision, name='job-card-request-revision'),
    path('job-cards/<int:pk>/deliver/', views.job_card_deliver, name='job-card-deliver'),
    path('job-cards/<int:pk>/submit-to-editor/', views.submit_to_editor, name='job-card-submit-to-editor'),
    path('job-cards/<int:pk>/complete-with-content/', views.complete_with_content, name='job-card-complete'),
    path('job-cards/<int:pk>/revision-reply/', views.revision_reply, name='job-card-revision-reply'),
    path('job-cards/<int:pk>/assign-job-id/', views.assign_job_id_view, name='job-card-assign-job-id'),
    path('job-cards/<int:pk>/activity/', views.job_card_activity, name='job-card-activity'),
    path('job-cards/<int:pk>/audit-log/', views.job_card_audit_log, name='job-card-audit-log'),
    path('job-cards/<int:pk>/send-delivery-email/', views.send_delivery_email, name='job-card-send-delivery-email'),

    # Files
    path('job-cards/<int:pk>/files/', views.job_card_files, name='job-card-files'),
    path('job-cards/<int:pk>/files/upload-url/', views.job_card_upload_url, name='job-card-upload-url'),
    path('job-cards/<int:pk>/files/metadata/', views.job_card_file_metadata, name='job-card-file-metadata'),
    path('job-cards/<int:pk>/download-raw-files/', views.download_raw_files, name='job-card-download-raw'),
    path('production-files/<int:pk>/', views.production_file_delete, name='production-file-delete'),
    path('uploads/<str:token>/', views.signed_upload, name='signed-upload'),
    path('files/<str:token>/', views.signed_file_download, name='signed-file-download'),

    # Content items
    path('job-cards/<int:pk>/content-items/', views.job_card_content_items, name='job-card-content-items'),
    path('content-items/<int:pk>/', views.content_item_detail, name='content-item-detail'),

    # Jobs status panel
    path('jobs/', views.job_list, name='job-list'),
    path('jobs/<int:pk>/', views.job_detail, name='job-detail'),
    path('jobs/<int:pk>/files/', views.job_files, name='job-files'),
    path('jobs/<int:pk>/activity/', views.job_activity, name='job-activity'),

    # Notifications
    path('notifications/', views.notification_list, name='notification-list'),
    path('notifications/<int:pk>/read/', views.notification_read, name='notification-read'),
]
