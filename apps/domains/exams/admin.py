from django.contrib import admin

from .models import Answer, Exam, ExamAccessCode, ExamSettings, Option, Question


class ExamSettingsInline(admin.StackedInline):
    model = ExamSettings
    extra = 0


class ExamAccessCodeInline(admin.StackedInline):
    model = ExamAccessCode
    extra = 0
    readonly_fields = ("usage_count",)


@admin.register(Exam)
class ExamAdmin(admin.ModelAdmin):
    list_display = ("id", "title", "teacher", "subject", "is_active", "created_at")
    list_filter = ("is_active", "subject")
    search_fields = ("title",)
    inlines = [ExamSettingsInline, ExamAccessCodeInline]


class OptionInline(admin.TabularInline):
    model = Option
    extra = 0


@admin.register(Question)
class QuestionAdmin(admin.ModelAdmin):
    list_display = ("id", "exam", "type", "score")
    list_filter = ("type",)
    inlines = [OptionInline]


admin.site.register(Answer)
