from django.contrib import admin

from .models import AttemptAnswer, AttemptLog, ExamAttempt


class AttemptAnswerInline(admin.TabularInline):
    model = AttemptAnswer
    extra = 0


class AttemptLogInline(admin.TabularInline):
    model = AttemptLog
    extra = 0
    readonly_fields = ("action", "message", "severity", "actor", "created_at")


@admin.register(ExamAttempt)
class ExamAttemptAdmin(admin.ModelAdmin):
    list_display = ("id", "exam", "student", "status", "score", "result_is_ready", "created_at")
    list_filter = ("status", "result_is_ready")
    inlines = [AttemptAnswerInline, AttemptLogInline]
