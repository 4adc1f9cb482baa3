from django.contrib import admin
from .models import IntegrityAdvocateBlock


@admin.register(IntegrityAdvocateBlock)
class IntegrityAdvocateBlockAdmin(admin.ModelAdmin):
    list_display = ['id', 'context_level', 'course', 'module', 'app_id', 'visible', 'created_at']
    list_filter = ['context_level', 'visible']
    search_fields = ['app_id', 'course__shortname', 'module__name']
    readonly_fields = ['created_at']
    ordering = ['id']
