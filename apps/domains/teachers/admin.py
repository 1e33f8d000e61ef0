from django.contrib import admin

from .models import Teacher


@admin.register(Teacher)
class TeacherAdmin(admin.ModelAdmin):
    list_display = ("id", "user", "can_create_exam", "can_grade_exam", "created_at")
    filter_horizontal = ("subjects", "students")
    search_fields = ("user__username", "user__email")
