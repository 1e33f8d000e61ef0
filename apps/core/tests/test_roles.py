from django.contrib.auth import get_user_model
from django.test import TestCase

from apps.core.errors import ForbiddenError
from apps.core.roles import Role, resolve_actor
from apps.core.tests.builders import make_admin, make_student, make_subject, make_teacher


class ResolveActorTest(TestCase):
    def setUp(self):
        self.subject = make_subject()

    def test_admin(self):
        actor = resolve_actor(make_admin())
        self.assertEqual(actor.role, Role.ADMIN)
        self.assertTrue(actor.is_admin)

    def test_teacher(self):
        teacher = make_teacher(self.subject)
        actor = resolve_actor(teacher.user)
        self.assertEqual(actor.role, Role.TEACHER)
        self.assertEqual(actor.teacher, teacher)

    def test_student(self):
        student = make_student(self.subject)
        actor = resolve_actor(student.user)
        self.assertEqual(actor.role, Role.STUDENT)
        self.assertEqual(actor.student, student)

    def test_user_without_profile_is_rejected(self):
        user = get_user_model().objects.create_user(username="nobody", password="x")
        with self.assertRaises(ForbiddenError) as ctx:
            resolve_actor(user)
        self.assertEqual(ctx.exception.code, "NO_ROLE")
