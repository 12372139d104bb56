from django.apps import AppConfig


class LimoMainAppConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'limo_main_app'

    def ready(self):
        import limo_main_app.signals  # noqa: F401
