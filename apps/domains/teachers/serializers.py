from rest_framework import serializers

from apps.domains.teachers.models import Teacher


class TeacherSerializer(serializers.ModelSerializer):
    username = serializers.CharField(source="user.username", read_only=True)
    email = serializers.CharField(source="user.email", read_only=True)
    first_name = serializers.CharField(source="user.first_name", read_only=True)
    last_name = serializers.CharField(source="user.last_name", read_only=True)
    subject_ids = serializers.PrimaryKeyRelatedField(
        source="subjects", many=True, read_only=True
    )
    student_ids = serializers.PrimaryKeyRelatedField(
        source="students", many=True, read_only=True
    )

    class Meta:
        model = Teacher
        fields = [
            "id",
            "username",
            "email",
            "first_name",
            "last_name",
            "subject_ids",
            "student_ids",
            "can_create_exam",
            "can_grade_exam",
            "created_at",
        ]
        read_only_fields = fields


class TeacherCreateSerializer(serializers.Serializer):
    username = serializers.CharField(max_length=150)
    password = serializers.CharField(write_only=True, min_length=8)
    email = serializers.EmailField(required=False, allow_blank=True, default="")
    first_name = serializers.CharField(required=False, allow_blank=True, default="")
    last_name = serializers.CharField(required=False, allow_blank=True, default="")
    subject_ids = serializers.ListField(
        child=serializers.IntegerField(min_value=1), required=False, default=list
    )
    can_create_exam = serializers.BooleanField(required=False, default=True)
    can_grade_exam = serializers.BooleanField(required=False, default=True)


class SubjectIdsSerializer(serializers.Serializer):
    subject_ids = serializers.ListField(
        child=serializers.IntegerField(min_value=1), allow_empty=False
    )


class StudentIdsSerializer(serializers.Serializer):
    student_ids = serializers.ListField(
        child=serializers.IntegerField(min_value=1), allow_empty=False
    )
