from django.urls import path
from . import views

urlpatterns = [
    # Fixed paths first so they are not read as editor ids
    path('editor-services/categories/order/', views.category_order, name='editor-service-category-order'),
    path('editor-services/options/order/', views.option_order, name='editor-service-option-order'),
    path('editor-services/categories/<int:pk>/', views.category_detail, name='editor-service-category-detail'),
    path('editor-services/categories/<int:category_id>/options/', views.option_create,
         name='editor-service-option-create'),
    path('editor-services/options/<int:pk>/', views.option_detail, name='editor-service-option-detail'),
    path('editor-services/<int:editor_id>/', views.editor_services, name='editor-services'),
    path('editor-services/<int:editor_id>/categories/', views.category_create, name='editor-service-category-create'),
    path('editor-services/<int:editor_id>/change-history/', views.change_history, name='editor-service-history'),
    path('service-templates/', views.template_list_create, name='service-template-list-create'),
    path('service-templates/<int:pk>/', views.template_detail, name='service-template-detail'),
    path('service-templates/<int:pk>/apply/<int:editor_id>/', views.template_apply, name='service-template-apply'),
]
