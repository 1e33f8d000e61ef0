# apps/domains/exams/views/question_view.py
from __future__ import annotations

from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.core.permissions import IsTeacher
from apps.core.roles import Role
from apps.domains.exams.projections import project_option, project_question, project_questions
from apps.domains.exams.serializers.question import (
    AnswerSerializer,
    OptionIdsSerializer,
    OptionsInputSerializer,
    OptionUpdateSerializer,
    QuestionCreateSerializer,
    QuestionUpdateSerializer,
)
from apps.domains.exams.services.exam_service import get_exam_for_teacher
from apps.domains.exams.services.question_service import (
    create_options,
    create_question,
    delete_option,
    delete_question,
    get_answer,
    get_question_for_teacher,
    list_questions,
    remove_options,
    set_answer,
    update_option,
    update_question,
)


def _teacher(request):
    return request.user.teacher_profile


class QuestionListCreateView(APIView):
    permission_classes = [IsAuthenticated, IsTeacher]

    def get(self, request, exam_id: int):
        exam = get_exam_for_teacher(_teacher(request), int(exam_id))
        return Response(project_questions(list_questions(exam), Role.TEACHER))

    def post(self, request, exam_id: int):
        ser = QuestionCreateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        data = dict(ser.validated_data)
        if "options" in data:
            data["options"] = [dict(o) for o in data["options"]]

        question = create_question(teacher=_teacher(request), exam_id=int(exam_id), **data)
        return Response(project_question(question, Role.TEACHER), status=status.HTTP_201_CREATED)


class QuestionDetailView(APIView):
    permission_classes = [IsAuthenticated, IsTeacher]

    def get(self, request, exam_id: int, question_id: int):
        _, question = get_question_for_teacher(_teacher(request), int(exam_id), int(question_id))
        return Response(project_question(question, Role.TEACHER))

    def patch(self, request, exam_id: int, question_id: int):
        ser = QuestionUpdateSerializer(data=request.data, partial=True)
        ser.is_valid(raise_exception=True)
        question = update_question(
            teacher=_teacher(request),
            exam_id=int(exam_id),
            question_id=int(question_id),
            **ser.validated_data,
        )
        return Response(project_question(question, Role.TEACHER))

    def delete(self, request, exam_id: int, question_id: int):
        delete_question(teacher=_teacher(request), exam_id=int(exam_id), question_id=int(question_id))
        return Response(status=status.HTTP_204_NO_CONTENT)


class OptionListView(APIView):
    """
    POST   : add options
    DELETE : remove options by id
    """
    permission_classes = [IsAuthenticated, IsTeacher]

    def post(self, request, exam_id: int, question_id: int):
        ser = OptionsInputSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        options = create_options(
            teacher=_teacher(request),
            exam_id=int(exam_id),
            question_id=int(question_id),
            options=[dict(o) for o in ser.validated_data["options"]],
        )
        return Response(
            [project_option(o, Role.TEACHER) for o in options],
            status=status.HTTP_201_CREATED,
        )

    def delete(self, request, exam_id: int, question_id: int):
        ser = OptionIdsSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        deleted = remove_options(
            teacher=_teacher(request),
            exam_id=int(exam_id),
            question_id=int(question_id),
            option_ids=ser.validated_data["option_ids"],
        )
        return Response({"deleted": deleted})


class OptionDetailView(APIView):
    permission_classes = [IsAuthenticated, IsTeacher]

    def patch(self, request, exam_id: int, question_id: int, option_id: int):
        ser = OptionUpdateSerializer(data=request.data, partial=True)
        ser.is_valid(raise_exception=True)
        option = update_option(
            teacher=_teacher(request),
            exam_id=int(exam_id),
            question_id=int(question_id),
            option_id=int(option_id),
            **ser.validated_data,
        )
        return Response(project_option(option, Role.TEACHER))

    def delete(self, request, exam_id: int, question_id: int, option_id: int):
        delete_option(
            teacher=_teacher(request),
            exam_id=int(exam_id),
            question_id=int(question_id),
            option_id=int(option_id),
        )
        return Response(status=status.HTTP_204_NO_CONTENT)


class AnswerView(APIView):
    permission_classes = [IsAuthenticated, IsTeacher]

    def get(self, request, exam_id: int, question_id: int):
        answer = get_answer(teacher=_teacher(request), exam_id=int(exam_id), question_id=int(question_id))
        return Response(AnswerSerializer(answer).data)

    def put(self, request, exam_id: int, question_id: int):
        ser = AnswerSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        answer = set_answer(
            teacher=_teacher(request),
            exam_id=int(exam_id),
            question_id=int(question_id),
            text=ser.validated_data["text"],
        )
        return Response(AnswerSerializer(answer).data)
