from datetime import timedelta

from django.core import mail
from django.db import IntegrityError, transaction
from django.test import TestCase
from django.utils import timezone

from apps.core.errors import ForbiddenError, NotFoundError, StateConflictError, ValidationFailed
from apps.core.tests.builders import (
    add_question,
    make_exam,
    make_student,
    make_subject,
    make_teacher,
    option_ids,
)
from apps.domains.exams.models import ExamAccessCode, Question
from apps.domains.exams.services.exam_service import configure_access_code
from apps.domains.results.models import AttemptAnswer, AttemptLog, ExamAttempt
from apps.domains.results.services.attempt_service import (
    attempt_question,
    close_expired_attempts,
    mark_question_correct,
    mark_results_ready,
    start_exam,
    submit_attempt,
)


class AttemptFixture(TestCase):
    def setUp(self):
        self.subject = make_subject()
        self.teacher = make_teacher(self.subject)
        self.student = make_student(self.subject, email="student@example.com")
        self.exam = make_exam(self.teacher, self.subject, is_active=True, allow_internal_grading=True)
        self.boolean = add_question(self.exam, Question.Type.BOOLEAN, boolean_answer=True, score=2)
        self.obj = add_question(self.exam, Question.Type.OBJ, correct=["a"], wrong=["b"], score=3)

    def start(self, student=None, exam=None, code=None):
        return start_exam(
            student=student or self.student,
            exam_id=(exam or self.exam).id,
            access_code=code,
        )


class StartExamTest(AttemptFixture):
    def test_start_twice_returns_the_same_attempt(self):
        first = self.start()
        second = self.start()

        self.assertTrue(first.created)
        self.assertFalse(second.created)
        self.assertEqual(first.attempt.id, second.attempt.id)
        self.assertEqual(ExamAttempt.objects.filter(student=self.student).count(), 1)
        self.assertEqual(first.attempt.status, ExamAttempt.Status.IN_PROGRESS)
        self.assertEqual(first.attempt.exam_title, self.exam.title)
        self.assertTrue(
            AttemptLog.objects.filter(
                attempt=first.attempt, action=AttemptLog.Action.TEST_STARTED
            ).exists()
        )

    def test_database_allows_one_open_attempt(self):
        ExamAttempt.objects.create(student=self.student, exam=self.exam)
        with self.assertRaises(IntegrityError):
            with transaction.atomic():
                ExamAttempt.objects.create(
                    student=self.student,
                    exam=self.exam,
                    status=ExamAttempt.Status.IN_PROGRESS,
                )

    def test_not_started_attempt_is_resumed(self):
        attempt = ExamAttempt.objects.create(student=self.student, exam=self.exam)
        out = self.start()
        self.assertFalse(out.created)
        self.assertEqual(out.attempt.id, attempt.id)
        self.assertEqual(out.attempt.status, ExamAttempt.Status.IN_PROGRESS)
        self.assertIsNotNone(out.attempt.start_time)

    def test_completed_exam_cannot_restart(self):
        out = self.start()
        submit_attempt(student=self.student, attempt_id=out.attempt.id)

        with self.assertRaises(StateConflictError) as ctx:
            self.start()
        self.assertEqual(ctx.exception.code, "ALREADY_COMPLETED")

    def test_one_running_exam_at_a_time(self):
        other = make_exam(self.teacher, self.subject, is_active=True)
        self.start()
        with self.assertRaises(StateConflictError) as ctx:
            self.start(exam=other)
        self.assertEqual(ctx.exception.code, "ATTEMPT_IN_PROGRESS_ELSEWHERE")

    def test_inactive_exam(self):
        self.exam.is_active = False
        self.exam.save()
        with self.assertRaises(StateConflictError) as ctx:
            self.start()
        self.assertEqual(ctx.exception.code, "NOT_ACTIVE")


class AccessCodeStartTest(AttemptFixture):
    def setUp(self):
        super().setUp()
        configure_access_code(exam=self.exam, code="OPEN-5", max_usage_count=5)

    def test_sixth_student_is_turned_away(self):
        students = [make_student(self.subject) for _ in range(6)]
        for student in students[:5]:
            self.assertTrue(self.start(student=student, code="OPEN-5").created)

        with self.assertRaises(StateConflictError) as ctx:
            self.start(student=students[5], code="OPEN-5")
        self.assertEqual(ctx.exception.code, "ACCESS_CODE_EXHAUSTED")

        access_code = ExamAccessCode.objects.get(exam=self.exam)
        self.assertEqual(access_code.usage_count, 5)
        self.assertEqual(access_code.used_by.count(), 5)
        self.assertFalse(ExamAttempt.objects.filter(student=students[5]).exists())

    def test_wrong_code(self):
        with self.assertRaises(ForbiddenError) as ctx:
            self.start(code="nope")
        self.assertEqual(ctx.exception.code, "ACCESS_CODE_INVALID")

    def test_resume_does_not_redeem_twice(self):
        self.start(code="OPEN-5")
        self.start()
        self.assertEqual(ExamAccessCode.objects.get(exam=self.exam).usage_count, 1)

    def test_reuse_denied_after_submit(self):
        out = self.start(code="OPEN-5")
        submit_attempt(student=self.student, attempt_id=out.attempt.id)

        with self.assertRaises(StateConflictError) as ctx:
            self.start(code="OPEN-5")
        self.assertEqual(ctx.exception.code, "ACCESS_CODE_EXHAUSTED")


class AttemptQuestionTest(AttemptFixture):
    def setUp(self):
        super().setUp()
        self.attempt = self.start().attempt

    def answer(self, question, value, student=None):
        return attempt_question(
            student=student or self.student,
            attempt_id=self.attempt.id,
            question_id=question.id,
            answer=value,
        )

    def test_upsert(self):
        self.answer(self.boolean, True)
        entry = self.answer(self.boolean, "FALSE")
        self.assertEqual(entry.answer, "false")
        self.assertEqual(AttemptAnswer.objects.filter(attempt=self.attempt).count(), 1)

    def test_option_answers_are_validated(self):
        with self.assertRaises(ValidationFailed):
            self.answer(self.obj, [999999])
        with self.assertRaises(ValidationFailed):
            self.answer(self.boolean, "maybe")

        entry = self.answer(self.obj, option_ids(self.obj)[0])
        self.assertEqual(entry.answer, str(option_ids(self.obj)[0]))

    def test_question_from_another_exam(self):
        other = make_exam(self.teacher, self.subject)
        foreign = add_question(other, Question.Type.BOOLEAN, boolean_answer=True)
        with self.assertRaises(ValidationFailed) as ctx:
            self.answer(foreign, True)
        self.assertEqual(ctx.exception.code, "QUESTION_NOT_IN_EXAM")

    def test_other_students_attempt_is_not_found(self):
        intruder = make_student(self.subject)
        with self.assertRaises(NotFoundError):
            self.answer(self.boolean, True, student=intruder)

    def test_time_limit(self):
        ExamAttempt.objects.filter(id=self.attempt.id).update(
            start_time=timezone.now() - timedelta(hours=2)
        )
        with self.assertRaises(StateConflictError) as ctx:
            self.answer(self.boolean, True)
        self.assertEqual(ctx.exception.code, "TIME_EXPIRED")

    def test_answering_after_submit(self):
        submit_attempt(student=self.student, attempt_id=self.attempt.id)
        with self.assertRaises(StateConflictError) as ctx:
            self.answer(self.boolean, True)
        self.assertEqual(ctx.exception.code, "ATTEMPT_NOT_IN_PROGRESS")


class SubmitAttemptTest(AttemptFixture):
    def test_submit_grades_when_enabled(self):
        attempt = self.start().attempt
        attempt_question(
            student=self.student,
            attempt_id=attempt.id,
            question_id=self.boolean.id,
            answer=True,
        )

        out = submit_attempt(student=self.student, attempt_id=attempt.id)
        self.assertEqual(out.attempt.status, ExamAttempt.Status.COMPLETED)
        self.assertIsNotNone(out.attempt.end_time)
        self.assertEqual(out.grade.score, 2)
        self.assertEqual(out.attempt.score, 2)
        self.assertFalse(out.attempt.result_is_ready)

    def test_double_submit(self):
        attempt = self.start().attempt
        first = submit_attempt(student=self.student, attempt_id=attempt.id).attempt

        with self.assertRaises(StateConflictError) as ctx:
            submit_attempt(student=self.student, attempt_id=attempt.id)
        self.assertEqual(ctx.exception.code, "ALREADY_SUBMITTED")

        attempt.refresh_from_db()
        self.assertEqual(attempt.end_time, first.end_time)
        self.assertEqual(
            AttemptLog.objects.filter(attempt=attempt, action=AttemptLog.Action.TEST_SUBMITTED).count(),
            1,
        )

    def test_no_grading_when_disabled(self):
        exam = make_exam(self.teacher, self.subject, is_active=True)
        add_question(exam, Question.Type.BOOLEAN, boolean_answer=True)
        attempt = self.start(exam=exam).attempt

        out = submit_attempt(student=self.student, attempt_id=attempt.id)
        self.assertIsNone(out.grade)
        self.assertIsNone(out.attempt.graded_at)

    def test_close_expired_attempts(self):
        late = self.start().attempt
        ExamAttempt.objects.filter(id=late.id).update(start_time=timezone.now() - timedelta(hours=2))
        fresh = self.start(student=make_student(self.subject)).attempt

        self.assertEqual(close_expired_attempts(), 1)

        late.refresh_from_db()
        fresh.refresh_from_db()
        self.assertEqual(late.status, ExamAttempt.Status.COMPLETED)
        self.assertEqual(fresh.status, ExamAttempt.Status.IN_PROGRESS)
        self.assertTrue(
            AttemptLog.objects.filter(attempt=late, action=AttemptLog.Action.AUTO_SUBMITTED).exists()
        )


class TeacherReviewTest(AttemptFixture):
    def setUp(self):
        super().setUp()
        self.done = self.start().attempt
        submit_attempt(student=self.student, attempt_id=self.done.id)
        self.done.refresh_from_db()

        self.running_student = make_student(self.subject)
        self.running = self.start(student=self.running_student).attempt

    def test_only_completed_attempts_are_released(self):
        score_before = self.done.score

        updated = mark_results_ready(teacher=self.teacher, exam_id=self.exam.id)

        self.assertEqual(updated, 1)
        self.done.refresh_from_db()
        self.running.refresh_from_db()
        self.assertTrue(self.done.result_is_ready)
        self.assertEqual(self.done.score, score_before)
        self.assertFalse(self.running.result_is_ready)
        self.assertEqual(self.running.status, ExamAttempt.Status.IN_PROGRESS)

    def test_unknown_students_release_nothing(self):
        with self.assertRaises(NotFoundError) as ctx:
            mark_results_ready(
                teacher=self.teacher,
                exam_id=self.exam.id,
                student_ids=[self.running_student.id],
            )
        self.assertEqual(ctx.exception.code, "NO_COMPLETED_ATTEMPTS")

    def test_notification_email(self):
        with self.captureOnCommitCallbacks(execute=True):
            mark_results_ready(teacher=self.teacher, exam_id=self.exam.id, notify_via_email=True)

        self.assertEqual(len(mail.outbox), 1)
        self.assertEqual(mail.outbox[0].to, ["student@example.com"])
        self.assertIn(self.exam.title, mail.outbox[0].subject)

    def test_other_teacher_cannot_release(self):
        stranger = make_teacher(self.subject)
        with self.assertRaises(NotFoundError):
            mark_results_ready(teacher=stranger, exam_id=self.exam.id)

    def test_mark_question_correct(self):
        entry = mark_question_correct(
            teacher=self.teacher,
            attempt_id=self.done.id,
            question_id=self.obj.id,
        )
        self.assertTrue(entry.is_correct)
        self.assertTrue(entry.marked_by_teacher)
        self.done.refresh_from_db()
        self.assertEqual(self.done.score, 3)

    def test_mark_question_correct_needs_completed_attempt(self):
        with self.assertRaises(StateConflictError):
            mark_question_correct(
                teacher=self.teacher,
                attempt_id=self.running.id,
                question_id=self.obj.id,
            )
