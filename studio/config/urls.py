"""
URL configuration for the studio project.

Every app contributes its routes under the shared ``api/`` prefix.
"""
from django.contrib import admin
from django.urls import path, include, re_path
from django.conf import settings
from django.views.static import serve

admin.site.site_header = "Studio Production Admin"
admin.site.site_title = "Studio Production Admin Portal"
admin.site.index_title = "Media production management"

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/', include('studio.core.urls')),
    path('api/', include('studio.clients.urls')),
    path('api/', include('studio.bookings.urls')),
    path('api/', include('studio.production.urls')),
    path('api/', include('studio.delivery.urls')),
    path('api/', include('studio.scheduling.urls')),
    path('api/', include('studio.products.urls')),
    path('api/', include('studio.editor_services.urls')),
    path('api/', include('studio.reports.urls')),
    re_path(r'^static/(?P<path>.*)$', serve, {'document_root': settings.STATIC_ROOT}),
]
