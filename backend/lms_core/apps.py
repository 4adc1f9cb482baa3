from django.apps import AppConfig


class LmsCoreConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'lms_core'
    verbose_name = 'LMS core'
