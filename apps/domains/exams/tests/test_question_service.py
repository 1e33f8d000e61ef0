from django.test import TestCase

from apps.core.errors import InvariantViolation, NotFoundError, StateConflictError, ValidationFailed
from apps.core.roles import resolve_actor
from apps.core.tests.builders import (
    add_question,
    make_exam,
    make_student,
    make_subject,
    make_teacher,
    option_ids,
)
from apps.domains.exams.models import Option, Question
from apps.domains.exams.services.activation import set_exam_active
from apps.domains.exams.services.question_service import (
    create_options,
    create_question,
    delete_question,
    get_answer,
    remove_options,
    set_answer,
    update_option,
    update_question,
)
from apps.domains.results.models import AttemptAnswer, ExamAttempt
from apps.domains.results.services.analysis_service import get_student_analysis
from apps.domains.results.services.attempt_service import (
    attempt_question,
    start_exam,
    submit_attempt,
)


class QuestionServiceTest(TestCase):
    def setUp(self):
        self.subject = make_subject()
        self.teacher = make_teacher(self.subject)
        self.exam = make_exam(self.teacher, self.subject, show_result_at_end=True)

    def create(self, **kwargs):
        return create_question(teacher=self.teacher, exam_id=self.exam.id, **kwargs)

    def test_create_with_options(self):
        question = self.create(
            type="mcq",
            text="Pick primes",
            options=[
                {"text": "2", "is_correct": True},
                {"text": "3", "is_correct": True},
                {"text": "4"},
            ],
        )
        self.assertEqual(question.options.count(), 3)
        self.assertEqual(question.options.filter(is_correct=True).count(), 2)

    def test_obj_allows_one_correct_option(self):
        with self.assertRaises(InvariantViolation):
            self.create(
                type="obj",
                text="Capital?",
                options=[{"text": "A", "is_correct": True}, {"text": "B", "is_correct": True}],
            )
        self.assertFalse(Question.objects.exists())

        question = self.create(type="obj", text="Capital?", options=[{"text": "A", "is_correct": True}])
        option = Option.objects.create(question=question, text="B")
        with self.assertRaises(InvariantViolation):
            update_option(
                teacher=self.teacher,
                exam_id=self.exam.id,
                question_id=question.id,
                option_id=option.id,
                is_correct=True,
            )

    def test_options_only_on_choice_questions(self):
        question = self.create(type="boolean", text="Sky is blue", boolean_answer=True)
        with self.assertRaises(ValidationFailed):
            create_options(
                teacher=self.teacher,
                exam_id=self.exam.id,
                question_id=question.id,
                options=[{"text": "x"}],
            )

    def test_boolean_answer_required(self):
        with self.assertRaises(ValidationFailed):
            self.create(type="boolean", text="Sky is blue")

    def test_answer_only_on_free_text(self):
        question = self.create(type="short-answer", text="Name it")
        answer = set_answer(
            teacher=self.teacher,
            exam_id=self.exam.id,
            question_id=question.id,
            text=" Paris ",
        )
        self.assertEqual(answer.text, "Paris")
        self.assertEqual(
            get_answer(teacher=self.teacher, exam_id=self.exam.id, question_id=question.id),
            answer,
        )

        obj = self.create(type="obj", text="Pick", options=[{"text": "a", "is_correct": True}])
        with self.assertRaises(ValidationFailed):
            set_answer(teacher=self.teacher, exam_id=self.exam.id, question_id=obj.id, text="abc")

    def test_type_is_immutable(self):
        question = self.create(type="short-answer", text="Name it")
        with self.assertRaises(ValidationFailed):
            update_question(
                teacher=self.teacher,
                exam_id=self.exam.id,
                question_id=question.id,
                type="mcq",
            )

    def test_live_exam_stays_gradable(self):
        question = add_question(self.exam, Question.Type.MCQ, correct=["a", "b"], wrong=["c"])
        set_exam_active(exam=self.exam, active=True)

        correct_ids = list(question.options.filter(is_correct=True).values_list("id", flat=True))
        with self.assertRaises(StateConflictError):
            remove_options(
                teacher=self.teacher,
                exam_id=self.exam.id,
                question_id=question.id,
                option_ids=correct_ids[:1],
            )
        self.assertEqual(question.options.count(), 3)

    def test_delete_rejected_on_active_exam(self):
        question = add_question(self.exam, Question.Type.BOOLEAN, boolean_answer=False)
        set_exam_active(exam=self.exam, active=True)

        with self.assertRaises(StateConflictError) as ctx:
            delete_question(teacher=self.teacher, exam_id=self.exam.id, question_id=question.id)
        self.assertEqual(ctx.exception.code, "EXAM_ACTIVE")

    def test_delete_removes_attempt_entries(self):
        question = add_question(self.exam, Question.Type.BOOLEAN, boolean_answer=False)
        attempt = ExamAttempt.objects.create(
            student=make_student(self.subject),
            exam=self.exam,
            status=ExamAttempt.Status.COMPLETED,
        )
        AttemptAnswer.objects.create(attempt=attempt, question=question, answer="false")

        delete_question(teacher=self.teacher, exam_id=self.exam.id, question_id=question.id)

        self.assertFalse(Question.objects.filter(id=question.id).exists())
        self.assertFalse(AttemptAnswer.objects.filter(attempt=attempt).exists())

    def test_delete_rescores_completed_attempts(self):
        exam = make_exam(self.teacher, self.subject, is_active=True, allow_internal_grading=True)
        obj = add_question(exam, Question.Type.OBJ, correct=["a"], wrong=["b"], score=5)
        boolean = add_question(exam, Question.Type.BOOLEAN, boolean_answer=True, score=1)
        student = make_student(self.subject)

        attempt = start_exam(student=student, exam_id=exam.id).attempt
        attempt_question(
            student=student, attempt_id=attempt.id, question_id=obj.id, answer=option_ids(obj)[0]
        )
        attempt_question(
            student=student, attempt_id=attempt.id, question_id=boolean.id, answer=True
        )
        submit_attempt(student=student, attempt_id=attempt.id)
        attempt.refresh_from_db()
        self.assertEqual(attempt.score, 6)

        set_exam_active(exam=exam, active=False)
        delete_question(teacher=self.teacher, exam_id=exam.id, question_id=obj.id)

        attempt.refresh_from_db()
        self.assertEqual(attempt.score, 1)

        overall = get_student_analysis(
            actor=resolve_actor(self.teacher.user),
            exam_id=exam.id,
            student_id=student.id,
        )["overall_performance"]
        self.assertEqual(overall["score"], 1)
        self.assertEqual(overall["total_possible_score"], 1)
        self.assertEqual(overall["score_percentage"], 100)

    def test_other_teacher_sees_not_found(self):
        question = add_question(self.exam, Question.Type.BOOLEAN, boolean_answer=True)
        stranger = make_teacher(self.subject)
        with self.assertRaises(NotFoundError):
            delete_question(teacher=stranger, exam_id=self.exam.id, question_id=question.id)
