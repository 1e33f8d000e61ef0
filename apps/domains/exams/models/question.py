from django.db import models

from apps.api.common.models import BaseModel


class Question(BaseModel):
    class Type(models.TextChoices):
        BOOLEAN = "boolean", "True / False"
        SHORT_ANSWER = "short-answer", "Short answer"
        LONG_ANSWER = "long-answer", "Long answer"
        MCQ = "mcq", "Multiple correct"
        OBJ = "obj", "Single correct"

    OPTION_TYPES = (Type.MCQ, Type.OBJ)
    FREE_TEXT_TYPES = (Type.SHORT_ANSWER, Type.LONG_ANSWER)

    exam = models.ForeignKey(
        "exams.Exam",
        on_delete=models.CASCADE,
        related_name="questions",
    )

    type = models.CharField(max_length=20, choices=Type.choices)
    text = models.TextField()
    score = models.PositiveIntegerField(default=1)

    hint = models.TextField(blank=True)
    explanation = models.TextField(blank=True)

    media_url = models.URLField(blank=True)
    media_type = models.CharField(max_length=50, blank=True)

    # boolean questions only
    boolean_answer = models.BooleanField(null=True, blank=True)

    class Meta:
        db_table = "exams_question"
        ordering = ["id"]

    def __str__(self):
        return f"Q{self.id} ({self.type})"

    @property
    def uses_options(self) -> bool:
        return self.type in self.OPTION_TYPES

    @property
    def is_free_text(self) -> bool:
        return self.type in self.FREE_TEXT_TYPES


class Option(BaseModel):
    """
    Choice of an obj / mcq question.
    """

    question = models.ForeignKey(
        Question,
        on_delete=models.CASCADE,
        related_name="options",
    )
    text = models.TextField()
    is_correct = models.BooleanField(default=False)

    media_url = models.URLField(blank=True)
    media_type = models.CharField(max_length=50, blank=True)

    class Meta:
        db_table = "exams_option"
        ordering = ["id"]

    def __str__(self):
        return f"Option {self.id} of Q{self.question_id}"


class Answer(BaseModel):
    """
    Reference answer of a short / long answer question.
    """

    question = models.OneToOneField(
        Question,
        on_delete=models.CASCADE,
        related_name="answer",
    )
    text = models.TextField()

    class Meta:
        db_table = "exams_answer"

    def __str__(self):
        return f"Answer of Q{self.question_id}"
