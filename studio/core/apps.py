from django.apps import AppConfig


class CoreConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'studio.core'

    def ready(self):
        """Import signals when app is ready"""
        import studio.core.model_cache  # noqa: F401
        import studio.core.cache_signals  # noqa: F401
