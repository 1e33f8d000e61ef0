from datetime import timedelta

from django.test import TestCase
from django.utils import timezone
from rest_framework.test import APITestCase

from apps.core.errors import InvariantViolation, ValidationFailed
from apps.core.tests.builders import make_student, make_subject, make_teacher


class CreateStudentTest(TestCase):
    def setUp(self):
        self.math = make_subject("Math")
        self.art = make_subject("Art")

    def test_default_end_date_is_in_the_future(self):
        student = make_student(self.math)
        self.assertGreater(student.end_date, timezone.now() + timedelta(days=360))
        self.assertTrue(student.is_enrolled_in(self.math.id))
        self.assertFalse(student.is_enrolled_in(self.art.id))

    def test_end_date_in_the_past_is_rejected(self):
        with self.assertRaises(ValidationFailed) as ctx:
            make_student(self.math, end_date=timezone.now() - timedelta(days=1))
        self.assertEqual(ctx.exception.code, "END_DATE_IN_PAST")

    def test_expired_enrollment(self):
        student = make_student(self.math)
        later = student.end_date + timedelta(seconds=1)
        self.assertFalse(student.is_enrolled_in(self.math.id, now=later))

    def test_teacher_may_only_use_taught_subjects(self):
        teacher = make_teacher(self.math)
        with self.assertRaises(InvariantViolation):
            make_student(self.art, created_by=teacher)

        student = make_student(self.math, created_by=teacher)
        self.assertIn(student, teacher.students.all())

    def test_subjects_required(self):
        with self.assertRaises(ValidationFailed):
            make_student()


class StudentProfileApiTest(APITestCase):
    def test_update_profile(self):
        student = make_student(make_subject())
        self.client.force_authenticate(student.user)

        response = self.client.patch(
            "/api/v1/students/me/",
            {"contact": "555-0101", "first_name": "Ada"},
            format="json",
        )
        self.assertEqual(response.status_code, 200)
        student.refresh_from_db()
        self.assertEqual(student.contact, "555-0101")
        self.assertEqual(student.user.first_name, "Ada")
