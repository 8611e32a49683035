from django.urls import path
from .views import (
    CustomTokenObtainPairView, CustomTokenRefreshView, register, user_me,
    user_list_create, user_detail, photographer_list, editor_list,
    audit_log_list, audit_log_detail,
    global_search, health
)

urlpatterns = [
    # Auth endpoints
    path('auth/register/', register, name='register'),
    path('auth/login/', CustomTokenObtainPairView.as_view(), name='token_obtain_pair'),
    path('auth/refresh/', CustomTokenRefreshView.as_view(), name='token_refresh'),
    path('auth/user/', user_me, name='user-me'),

    # Staff endpoints
    path('users/', user_list_create, name='user-list-create'),
    path('users/<int:pk>/', user_detail, name='user-detail'),
    path('users/photographers/', photographer_list, name='user-photographers'),
    path('photographers/', photographer_list, name='photographer-list'),
    path('editors/', editor_list, name='editor-list'),

    # AuditLog endpoints
    path('audit-logs/', audit_log_list, name='audit-log-list'),
    path('audit-logs/<int:pk>/', audit_log_detail, name='audit-log-detail'),

    path('search/', global_search, name='global-search'),
    path('health/', health, name='health'),
]
