from django.urls import path
from . import views

urlpatterns = [
    path('dashboard/stats/', views.dashboard_stats, name='dashboard-stats'),
    path('reports/production-summary/', views.production_summary, name='production-summary'),
    path('reports/revenue/', views.revenue_report, name='revenue-report'),
    path('reports/upcoming-jobs/', views.upcoming_jobs, name='upcoming-jobs'),
]
