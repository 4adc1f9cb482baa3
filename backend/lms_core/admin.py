from django.contrib import admin
from .models import Site, Course, CourseModule, Enrollment, UserLastAccess, ModuleCompletion, ScheduledTask


@admin.register(Site)
class SiteAdmin(admin.ModelAdmin):
    list_display = ['fullname', 'enable_completion', 'created_at']


@admin.register(Course)
class CourseAdmin(admin.ModelAdmin):
    list_display = ['shortname', 'fullname', 'enable_completion', 'created_at']
    list_filter = ['enable_completion']
    search_fields = ['shortname', 'fullname']


@admin.register(CourseModule)
class CourseModuleAdmin(admin.ModelAdmin):
    list_display = ['name', 'module_type', 'course', 'completion', 'visible']
    list_filter = ['module_type', 'completion', 'visible']
    search_fields = ['name', 'course__shortname']


@admin.register(Enrollment)
class EnrollmentAdmin(admin.ModelAdmin):
    list_display = ['user', 'course', 'active', 'created_at']
    list_filter = ['active']
    search_fields = ['user__username', 'course__shortname']


@admin.register(UserLastAccess)
class UserLastAccessAdmin(admin.ModelAdmin):
    list_display = ['user', 'course', 'time_access']
    ordering = ['-time_access']


@admin.register(ModuleCompletion)
class ModuleCompletionAdmin(admin.ModelAdmin):
    list_display = ['user', 'module', 'completion_state', 'remote_modified', 'time_modified']
    list_filter = ['completion_state']
    search_fields = ['user__username', 'module__name']
    readonly_fields = ['time_modified']


@admin.register(ScheduledTask)
class ScheduledTaskAdmin(admin.ModelAdmin):
    list_display = ['name', 'last_run_time', 'next_run_time', 'fail_delay']
