from rest_framework import serializers

from apps.domains.exams.models import Answer, Option, Question


class OptionInputSerializer(serializers.Serializer):
    text = serializers.CharField()
    is_correct = serializers.BooleanField(required=False, default=False)
    media_url = serializers.URLField(required=False, allow_blank=True, default="")
    media_type = serializers.CharField(required=False, allow_blank=True, default="")


class OptionUpdateSerializer(serializers.Serializer):
    text = serializers.CharField(required=False)
    is_correct = serializers.BooleanField(required=False)
    media_url = serializers.URLField(required=False, allow_blank=True)
    media_type = serializers.CharField(required=False, allow_blank=True)


class OptionsInputSerializer(serializers.Serializer):
    options = OptionInputSerializer(many=True, allow_empty=False)


class OptionIdsSerializer(serializers.Serializer):
    option_ids = serializers.ListField(
        child=serializers.IntegerField(min_value=1), allow_empty=False
    )


class QuestionCreateSerializer(serializers.Serializer):
    type = serializers.ChoiceField(choices=Question.Type.choices)
    text = serializers.CharField()
    score = serializers.IntegerField(min_value=0, required=False, default=1)
    hint = serializers.CharField(required=False, allow_blank=True, default="")
    explanation = serializers.CharField(required=False, allow_blank=True, default="")
    media_url = serializers.URLField(required=False, allow_blank=True, default="")
    media_type = serializers.CharField(required=False, allow_blank=True, default="")
    boolean_answer = serializers.BooleanField(required=False, allow_null=True, default=None)
    options = OptionInputSerializer(many=True, required=False)
    answer = serializers.CharField(required=False, allow_blank=True)


class QuestionUpdateSerializer(serializers.Serializer):
    type = serializers.ChoiceField(choices=Question.Type.choices, required=False)
    text = serializers.CharField(required=False)
    score = serializers.IntegerField(min_value=0, required=False)
    hint = serializers.CharField(required=False, allow_blank=True)
    explanation = serializers.CharField(required=False, allow_blank=True)
    media_url = serializers.URLField(required=False, allow_blank=True)
    media_type = serializers.CharField(required=False, allow_blank=True)
    boolean_answer = serializers.BooleanField(required=False, allow_null=True)


class AnswerSerializer(serializers.ModelSerializer):
    class Meta:
        model = Answer
        fields = ["question", "text", "updated_at"]
        read_only_fields = ["question", "updated_at"]


class OptionSerializer(serializers.ModelSerializer):
    class Meta:
        model = Option
        fields = ["id", "question", "text", "is_correct", "media_url", "media_type"]
        read_only_fields = fields
