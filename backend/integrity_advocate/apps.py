from django.apps import AppConfig


class IntegrityAdvocateConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'integrity_advocate'
    verbose_name = 'Integrity Advocate'
