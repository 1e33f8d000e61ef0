from rest_framework import serializers

from apps.domains.subjects.models import Subject


class SubjectSerializer(serializers.ModelSerializer):
    teacher_ids = serializers.PrimaryKeyRelatedField(
        source="teachers", many=True, read_only=True
    )

    class Meta:
        model = Subject
        fields = ["id", "name", "description", "teacher_ids", "created_at"]
        read_only_fields = ["id", "created_at"]


class SubjectCreateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    description = serializers.CharField(required=False, allow_blank=True, default="")
    teacher_ids = serializers.ListField(
        child=serializers.IntegerField(min_value=1), required=False, default=list
    )
