from django.contrib import admin

from .models import Student


@admin.register(Student)
class StudentAdmin(admin.ModelAdmin):
    list_display = ("id", "user", "end_date", "created_at")
    filter_horizontal = ("subjects",)
    search_fields = ("user__username", "user__email", "contact")
