from rest_framework import serializers

from apps.domains.results.models import AttemptAnswer, AttemptLog, ExamAttempt


class AttemptAnswerSerializer(serializers.ModelSerializer):
    class Meta:
        model = AttemptAnswer
        fields = ["id", "question", "answer", "is_correct", "marked_by_teacher", "updated_at"]
        read_only_fields = fields


class AttemptLogSerializer(serializers.ModelSerializer):
    class Meta:
        model = AttemptLog
        fields = ["action", "message", "severity", "actor", "created_at"]
        read_only_fields = fields


class ExamAttemptSerializer(serializers.ModelSerializer):
    """
    Teacher / admin view.
    """
    student_username = serializers.CharField(source="student.user.username", read_only=True)
    answers = AttemptAnswerSerializer(many=True, read_only=True)

    class Meta:
        model = ExamAttempt
        fields = [
            "id",
            "exam",
            "exam_title",
            "student",
            "student_username",
            "status",
            "start_time",
            "end_time",
            "score",
            "teacher_feedback",
            "result_is_ready",
            "graded_at",
            "answers",
        ]
        read_only_fields = fields


class StudentExamAttemptSerializer(serializers.ModelSerializer):
    """
    Student view: grading output stays hidden until results are released.
    """
    answers = AttemptAnswerSerializer(many=True, read_only=True)

    GRADED_FIELDS = ("score", "teacher_feedback", "graded_at")

    class Meta:
        model = ExamAttempt
        fields = [
            "id",
            "exam",
            "exam_title",
            "status",
            "start_time",
            "end_time",
            "score",
            "teacher_feedback",
            "result_is_ready",
            "graded_at",
            "answers",
        ]
        read_only_fields = fields

    def to_representation(self, instance):
        data = super().to_representation(instance)
        if not instance.result_is_ready:
            for key in self.GRADED_FIELDS:
                data[key] = None
            for row in data.get("answers") or []:
                row["is_correct"] = None
                row["marked_by_teacher"] = None
        return data


class StartExamSerializer(serializers.Serializer):
    access_code = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class AttemptQuestionSerializer(serializers.Serializer):
    question_id = serializers.IntegerField(min_value=1)
    # string, bool, option id or list of option ids
    answer = serializers.JSONField()


class MarkResultsReadySerializer(serializers.Serializer):
    student_ids = serializers.ListField(
        child=serializers.IntegerField(min_value=1), required=False, allow_null=True
    )
    all = serializers.BooleanField(required=False, default=False)
    notify_via_email = serializers.BooleanField(required=False, default=False)

    def validate(self, attrs):
        if not attrs.get("all") and not attrs.get("student_ids"):
            raise serializers.ValidationError("Pass student_ids or all=true.")
        return attrs


class ManualGradeSerializer(serializers.Serializer):
    score = serializers.FloatField(min_value=0, required=False)
    teacher_feedback = serializers.CharField(required=False, allow_blank=True)


class SecretKeyGradeSerializer(serializers.Serializer):
    secret_key = serializers.CharField()
    student_id = serializers.IntegerField(min_value=1)
