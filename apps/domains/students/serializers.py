from rest_framework import serializers

from apps.domains.students.models import Student


class StudentSerializer(serializers.ModelSerializer):
    username = serializers.CharField(source="user.username", read_only=True)
    email = serializers.CharField(source="user.email", read_only=True)
    first_name = serializers.CharField(source="user.first_name", read_only=True)
    last_name = serializers.CharField(source="user.last_name", read_only=True)
    subject_ids = serializers.PrimaryKeyRelatedField(
        source="subjects", many=True, read_only=True
    )

    class Meta:
        model = Student
        fields = [
            "id",
            "username",
            "email",
            "first_name",
            "last_name",
            "subject_ids",
            "end_date",
            "contact",
            "dob",
            "created_at",
        ]
        read_only_fields = fields


class StudentCreateSerializer(serializers.Serializer):
    username = serializers.CharField(max_length=150)
    password = serializers.CharField(write_only=True, min_length=8)
    email = serializers.EmailField(required=False, allow_blank=True, default="")
    first_name = serializers.CharField(required=False, allow_blank=True, default="")
    last_name = serializers.CharField(required=False, allow_blank=True, default="")
    subject_ids = serializers.ListField(
        child=serializers.IntegerField(min_value=1), allow_empty=False
    )
    end_date = serializers.DateTimeField(required=False, allow_null=True, default=None)
    contact = serializers.CharField(required=False, allow_blank=True, default="")
    dob = serializers.DateField(required=False, allow_null=True, default=None)


class StudentProfileUpdateSerializer(serializers.Serializer):
    email = serializers.EmailField(required=False, allow_blank=True)
    first_name = serializers.CharField(required=False, allow_blank=True)
    last_name = serializers.CharField(required=False, allow_blank=True)
    contact = serializers.CharField(required=False, allow_blank=True)
    dob = serializers.DateField(required=False, allow_null=True)
