from datetime import timedelta

from django.test import TestCase
from django.utils import timezone

from apps.core.errors import ForbiddenError, StateConflictError
from apps.core.tests.builders import make_exam, make_student, make_subject, make_teacher
from apps.domains.exams.models import ExamAccessCode
from apps.domains.exams.services.eligibility import (
    Eligibility,
    Reason,
    check_eligibility,
    evaluate_eligibility,
    redeem_access_code,
)
from apps.domains.students.models import Student


class EligibilityOrderTest(TestCase):
    def setUp(self):
        self.subject = make_subject()
        self.other_subject = make_subject()
        self.teacher = make_teacher(self.subject)
        self.exam = make_exam(self.teacher, self.subject, is_active=True)
        self.student = make_student(self.subject)

    def reason(self, student=None, exam="default", code=None):
        exam = self.exam if exam == "default" else exam
        return evaluate_eligibility(student or self.student, exam, code).reason

    def test_allowed(self):
        result = evaluate_eligibility(self.student, self.exam)
        self.assertTrue(result.allowed)
        self.assertEqual(result.reason, Reason.OK)

    def test_missing_exam(self):
        self.assertEqual(self.reason(exam=None), Reason.NOT_FOUND)
        result = check_eligibility(student=self.student, exam_id=987654)
        self.assertEqual(result.reason, Reason.NOT_FOUND)

    def test_inactive_exam(self):
        self.exam.is_active = False
        self.exam.save()
        self.assertEqual(self.reason(), Reason.NOT_ACTIVE)

    def test_not_enrolled(self):
        outsider = make_student(self.other_subject)
        self.assertEqual(self.reason(student=outsider), Reason.NOT_ENROLLED)

    def test_expired_enrollment(self):
        Student.objects.filter(id=self.student.id).update(
            end_date=timezone.now() - timedelta(minutes=1)
        )
        self.student.refresh_from_db()
        self.assertEqual(self.reason(), Reason.NOT_ENROLLED)

    def test_allow_list(self):
        listed = make_student(self.subject)
        self.exam.allowed_students.add(listed)

        self.assertEqual(self.reason(), Reason.NOT_ALLOWED)
        self.assertEqual(self.reason(student=listed), Reason.OK)

    def test_not_active_wins_over_not_enrolled(self):
        self.exam.is_active = False
        self.exam.save()
        outsider = make_student(self.other_subject)
        self.assertEqual(self.reason(student=outsider), Reason.NOT_ACTIVE)

    def test_as_error_kinds(self):
        self.exam.allowed_students.add(make_student(self.subject))
        with self.assertRaises(ForbiddenError) as ctx:
            evaluate_eligibility(self.student, self.exam).raise_for_reason()
        self.assertEqual(ctx.exception.code, Reason.NOT_ALLOWED)

    def test_every_refusal_maps_to_a_plain_error_code(self):
        self.assertEqual(Reason.OK.label, "Allowed")
        for reason in Reason:
            if reason == Reason.OK:
                continue
            error = Eligibility(False, reason).as_error()
            self.assertIs(type(error.code), str)
            self.assertEqual(error.code, reason.value)


class AccessCodeTest(TestCase):
    def setUp(self):
        self.subject = make_subject()
        self.teacher = make_teacher(self.subject)
        self.exam = make_exam(self.teacher, self.subject, is_active=True)
        self.access_code = ExamAccessCode.objects.create(
            exam=self.exam,
            code="OPEN-SESAME",
            max_usage_count=5,
            allow_reuse=False,
        )
        self.student = make_student(self.subject)

    def test_code_required_and_must_match(self):
        self.assertEqual(
            evaluate_eligibility(self.student, self.exam).reason,
            Reason.ACCESS_CODE_INVALID,
        )
        self.assertEqual(
            evaluate_eligibility(self.student, self.exam, "nope").reason,
            Reason.ACCESS_CODE_INVALID,
        )
        self.assertTrue(evaluate_eligibility(self.student, self.exam, "OPEN-SESAME").allowed)

    def test_expired_code_is_invalid(self):
        self.access_code.valid_until = timezone.now() - timedelta(seconds=1)
        self.access_code.save()
        self.assertEqual(
            evaluate_eligibility(self.student, self.exam, "OPEN-SESAME").reason,
            Reason.ACCESS_CODE_INVALID,
        )

    def test_cap_is_never_overrun(self):
        students = [make_student(self.subject) for _ in range(6)]
        for s in students[:5]:
            redeem_access_code(exam=self.exam, student=s)

        self.access_code.refresh_from_db()
        self.assertEqual(self.access_code.usage_count, 5)
        self.assertEqual(
            evaluate_eligibility(students[5], self.exam, "OPEN-SESAME").reason,
            Reason.ACCESS_CODE_EXHAUSTED,
        )
        with self.assertRaises(StateConflictError):
            redeem_access_code(exam=self.exam, student=students[5])

        self.access_code.refresh_from_db()
        self.assertEqual(self.access_code.usage_count, 5)
        self.assertEqual(self.access_code.used_by.count(), 5)

    def test_reuse_is_denied_without_allow_reuse(self):
        redeem_access_code(exam=self.exam, student=self.student)
        self.assertEqual(
            evaluate_eligibility(self.student, self.exam, "OPEN-SESAME").reason,
            Reason.ACCESS_CODE_EXHAUSTED,
        )

    def test_reuse_keeps_the_slot(self):
        self.access_code.allow_reuse = True
        self.access_code.save()

        redeem_access_code(exam=self.exam, student=self.student)
        redeem_access_code(exam=self.exam, student=self.student)

        self.access_code.refresh_from_db()
        self.assertEqual(self.access_code.usage_count, 1)
        self.assertTrue(evaluate_eligibility(self.student, self.exam, "OPEN-SESAME").allowed)
