import django_filters

from .models import ExamAttempt


class ExamAttemptFilter(django_filters.FilterSet):
    status = django_filters.ChoiceFilter(choices=ExamAttempt.Status.choices)
    result_is_ready = django_filters.BooleanFilter()
    student = django_filters.NumberFilter(field_name="student_id")
    username = django_filters.CharFilter(field_name="student__user__username", lookup_expr="icontains")

    class Meta:
        model = ExamAttempt
        fields = [
            "status",
            "result_is_ready",
            "student",
            "username",
        ]
