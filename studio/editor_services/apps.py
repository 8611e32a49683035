from django.apps import AppConfig


class EditorServicesConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'studio.editor_services'
