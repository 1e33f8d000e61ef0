from django.test import TestCase

from apps.core.errors import ForbiddenError, InvariantViolation, NotFoundError, StateConflictError
from apps.core.tests.builders import add_question, make_exam, make_student, make_subject, make_teacher
from apps.domains.exams.models import Exam, ExamAccessCode, ExamSettings, Option, Question
from apps.domains.exams.serializers.exam import ExamSerializer, StudentExamSerializer
from apps.domains.exams.services.activation import set_exam_active
from apps.domains.exams.services.exam_service import (
    available_exams_for_student,
    configure_access_code,
    create_exam,
    delete_exam,
    get_exam_for_teacher,
    update_exam,
)
from apps.domains.results.models import AttemptAnswer, ExamAttempt
from apps.domains.results.services.attempt_service import start_exam, submit_attempt


class CreateExamTest(TestCase):
    def setUp(self):
        self.subject = make_subject()
        self.teacher = make_teacher(self.subject)

    def test_defaults(self):
        exam = create_exam(
            teacher=self.teacher,
            subject_id=self.subject.id,
            title="Midterm",
            settings={"time_limit": 30, "show_result_at_end": True},
            access_code={"code": "ABC", "max_usage_count": 2},
        )
        self.assertFalse(exam.is_active)
        self.assertTrue(exam.secret_key)
        self.assertEqual(exam.settings.time_limit, 30)
        self.assertTrue(exam.settings.show_result_at_end)
        self.assertEqual(exam.access_code.max_usage_count, 2)

    def test_secret_key_is_never_serialized(self):
        exam = create_exam(teacher=self.teacher, subject_id=self.subject.id, title="Quiz")
        self.assertNotIn("secret_key", ExamSerializer(exam).data)
        self.assertNotIn("secret_key", StudentExamSerializer(exam).data)

    def test_subject_must_be_taught(self):
        with self.assertRaises(InvariantViolation) as ctx:
            create_exam(teacher=self.teacher, subject_id=make_subject().id, title="Quiz")
        self.assertEqual(ctx.exception.code, "SUBJECT_NOT_TAUGHT")

    def test_allowed_students_must_be_enrolled(self):
        outsider = make_student(make_subject())
        with self.assertRaises(InvariantViolation) as ctx:
            create_exam(
                teacher=self.teacher,
                subject_id=self.subject.id,
                title="Quiz",
                allowed_student_ids=[outsider.id],
            )
        self.assertEqual(ctx.exception.code, "STUDENT_NOT_ENROLLED")
        self.assertFalse(Exam.objects.exists())

    def test_create_permission(self):
        self.teacher.can_create_exam = False
        self.teacher.save()
        with self.assertRaises(ForbiddenError):
            create_exam(teacher=self.teacher, subject_id=self.subject.id, title="Quiz")


class UpdateExamTest(TestCase):
    def setUp(self):
        self.subject = make_subject()
        self.teacher = make_teacher(self.subject)
        self.exam = make_exam(self.teacher, self.subject)

    def test_other_teacher_sees_not_found(self):
        stranger = make_teacher(self.subject)
        with self.assertRaises(NotFoundError):
            get_exam_for_teacher(stranger, self.exam.id)
        with self.assertRaises(NotFoundError):
            update_exam(teacher=stranger, exam_id=self.exam.id, fields={"title": "x"})

    def test_settings_merge(self):
        update_exam(
            teacher=self.teacher,
            exam_id=self.exam.id,
            fields={"title": "Renamed"},
            settings={"shuffle_questions": True},
        )
        self.exam.refresh_from_db()
        self.assertEqual(self.exam.title, "Renamed")
        self.assertTrue(self.exam.settings.shuffle_questions)
        self.assertEqual(self.exam.settings.time_limit, 60)

    def test_live_exam_cannot_switch_to_instant_results_while_ungradable(self):
        add_question(self.exam, Question.Type.OBJ, wrong=["a", "b"])
        set_exam_active(exam=self.exam, active=True)

        with self.assertRaises(StateConflictError):
            update_exam(
                teacher=self.teacher,
                exam_id=self.exam.id,
                settings={"show_result_at_end": True},
            )
        self.assertFalse(ExamSettings.objects.get(exam=self.exam).show_result_at_end)

    def test_access_code_merge_keeps_usage(self):
        access_code = configure_access_code(exam=self.exam, code="ONE")
        ExamAccessCode.objects.filter(id=access_code.id).update(usage_count=3)

        access_code = configure_access_code(exam=self.exam, allow_reuse=True)
        self.assertEqual(access_code.code, "ONE")
        self.assertEqual(access_code.usage_count, 3)
        self.assertTrue(access_code.allow_reuse)


class DeleteExamTest(TestCase):
    def test_cascade_keeps_attempts(self):
        subject = make_subject()
        teacher = make_teacher(subject)
        student = make_student(subject)
        exam = make_exam(teacher, subject)
        question = add_question(exam, Question.Type.OBJ, correct=["a"], wrong=["b"])
        configure_access_code(exam=exam, code="X")
        attempt = ExamAttempt.objects.create(
            student=student,
            exam=exam,
            exam_title=exam.title,
            status=ExamAttempt.Status.COMPLETED,
        )
        AttemptAnswer.objects.create(attempt=attempt, question=question, answer="1")

        delete_exam(teacher=teacher, exam_id=exam.id)

        self.assertFalse(Exam.objects.filter(id=exam.id).exists())
        self.assertFalse(Question.objects.filter(id=question.id).exists())
        self.assertFalse(Option.objects.filter(question_id=question.id).exists())
        self.assertFalse(ExamAccessCode.objects.exists())
        self.assertFalse(ExamSettings.objects.exists())

        attempt.refresh_from_db()
        self.assertIsNone(attempt.exam_id)
        self.assertEqual(attempt.exam_title, exam.title)


class AvailableExamsTest(TestCase):
    def test_filters(self):
        subject = make_subject()
        teacher = make_teacher(subject)
        student = make_student(subject)
        other = make_student(subject)

        open_exam = make_exam(teacher, subject, is_active=True)
        make_exam(teacher, subject, is_active=False)
        listed = make_exam(teacher, subject, is_active=True)
        listed.allowed_students.add(student)
        restricted = make_exam(teacher, subject, is_active=True)
        restricted.allowed_students.add(other)
        make_exam(make_teacher(make_subject()), make_subject(), is_active=True)

        found = set(available_exams_for_student(student))
        self.assertEqual(found, {open_exam, listed})

    def test_completed_exam_is_not_listed(self):
        subject = make_subject()
        teacher = make_teacher(subject)
        student = make_student(subject)
        done = make_exam(teacher, subject, is_active=True)
        add_question(done, Question.Type.BOOLEAN, boolean_answer=True)
        pending = make_exam(teacher, subject, is_active=True)

        attempt = start_exam(student=student, exam_id=done.id).attempt
        self.assertIn(done, set(available_exams_for_student(student)))

        submit_attempt(student=student, attempt_id=attempt.id)

        self.assertEqual(set(available_exams_for_student(student)), {pending})
        self.assertEqual(
            set(available_exams_for_student(make_student(subject))),
            {done, pending},
        )
