from rest_framework import serializers

from apps.domains.exams.models import Exam, ExamAccessCode, ExamSettings


class ExamSettingsSerializer(serializers.ModelSerializer):
    time_limit = serializers.IntegerField(min_value=1, required=False)

    class Meta:
        model = ExamSettings
        exclude = ["id", "exam", "created_at", "updated_at"]


class ExamAccessCodeSerializer(serializers.ModelSerializer):
    """
    Teacher view of the access code. used_by is exposed as ids.
    """
    used_by = serializers.PrimaryKeyRelatedField(many=True, read_only=True)

    class Meta:
        model = ExamAccessCode
        fields = [
            "code",
            "usage_count",
            "max_usage_count",
            "allow_reuse",
            "valid_until",
            "used_by",
        ]
        read_only_fields = ["usage_count", "used_by"]


class AccessCodeInputSerializer(serializers.Serializer):
    code = serializers.CharField(max_length=64, required=False, allow_blank=True)
    max_usage_count = serializers.IntegerField(min_value=1, required=False)
    allow_reuse = serializers.BooleanField(required=False)
    valid_until = serializers.DateTimeField(required=False, allow_null=True)


class ExamSerializer(serializers.ModelSerializer):
    """
    Teacher view. secret_key is never part of any representation.
    """
    subject_name = serializers.CharField(source="subject.name", read_only=True)
    allowed_student_ids = serializers.PrimaryKeyRelatedField(
        source="allowed_students", many=True, read_only=True
    )
    settings = ExamSettingsSerializer(read_only=True)
    access_code = serializers.SerializerMethodField()

    class Meta:
        model = Exam
        fields = [
            "id",
            "teacher",
            "subject",
            "subject_name",
            "title",
            "description",
            "instructions",
            "allowed_student_ids",
            "is_active",
            "settings",
            "access_code",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_access_code(self, obj):
        access_code = ExamAccessCode.objects.filter(exam=obj).first()
        if access_code is None:
            return None
        return ExamAccessCodeSerializer(access_code).data


class StudentExamSerializer(serializers.ModelSerializer):
    """
    Student view: no allow-list, no access code, no secret.
    """
    subject_name = serializers.CharField(source="subject.name", read_only=True)
    teacher_name = serializers.SerializerMethodField()
    settings = ExamSettingsSerializer(read_only=True)
    requires_access_code = serializers.SerializerMethodField()

    class Meta:
        model = Exam
        fields = [
            "id",
            "subject",
            "subject_name",
            "teacher_name",
            "title",
            "description",
            "instructions",
            "settings",
            "requires_access_code",
        ]
        read_only_fields = fields

    def get_teacher_name(self, obj):
        user = obj.teacher.user
        return user.get_full_name() or user.username

    def get_requires_access_code(self, obj):
        return ExamAccessCode.objects.filter(exam=obj).exists()


class ExamCreateSerializer(serializers.Serializer):
    subject_id = serializers.IntegerField(min_value=1)
    title = serializers.CharField(max_length=255)
    description = serializers.CharField(required=False, allow_blank=True, default="")
    instructions = serializers.CharField(required=False, allow_blank=True, default="")
    allowed_student_ids = serializers.ListField(
        child=serializers.IntegerField(min_value=1), required=False, default=list
    )
    settings = ExamSettingsSerializer(required=False)
    access_code = AccessCodeInputSerializer(required=False)


class ExamUpdateSerializer(serializers.Serializer):
    subject_id = serializers.IntegerField(min_value=1, required=False)
    title = serializers.CharField(max_length=255, required=False)
    description = serializers.CharField(required=False, allow_blank=True)
    instructions = serializers.CharField(required=False, allow_blank=True)
    allowed_student_ids = serializers.ListField(
        child=serializers.IntegerField(min_value=1), required=False
    )
    settings = ExamSettingsSerializer(required=False)
    access_code = AccessCodeInputSerializer(required=False)


class ExamActiveSerializer(serializers.Serializer):
    is_active = serializers.BooleanField(required=False)
