from django.test import TestCase

from apps.core.roles import Role
from apps.core.tests.builders import add_question, make_exam, make_subject, make_teacher
from apps.domains.exams.models import Question
from apps.domains.exams.projections import project_question, project_questions


class ProjectionTest(TestCase):
    def setUp(self):
        subject = make_subject()
        self.exam = make_exam(make_teacher(subject), subject)
        self.boolean = add_question(self.exam, Question.Type.BOOLEAN, boolean_answer=True, score=3)
        self.obj = add_question(self.exam, Question.Type.OBJ, correct=["a"], wrong=["b", "c"])

    def test_student_sees_no_grading_material(self):
        data = project_question(self.boolean, Role.STUDENT)
        for hidden in ("boolean_answer", "score", "explanation", "hint"):
            self.assertNotIn(hidden, data)
        self.assertEqual(data["text"], self.boolean.text)

        options = project_question(self.obj, Role.STUDENT)["options"]
        self.assertEqual(len(options), 3)
        for option in options:
            self.assertNotIn("is_correct", option)

    def test_teacher_sees_everything(self):
        data = project_question(self.boolean, Role.TEACHER)
        self.assertTrue(data["boolean_answer"])
        self.assertEqual(data["score"], 3)

        options = project_question(self.obj, Role.TEACHER)["options"]
        self.assertEqual(sum(o["is_correct"] for o in options), 1)

    def test_seeded_shuffle_is_stable(self):
        questions = [self.boolean, self.obj] + [
            add_question(self.exam, Question.Type.BOOLEAN, boolean_answer=False) for _ in range(6)
        ]
        first = project_questions(questions, Role.STUDENT, shuffle_questions=True, seed=42)
        second = project_questions(questions, Role.STUDENT, shuffle_questions=True, seed=42)
        self.assertEqual([q["id"] for q in first], [q["id"] for q in second])
        self.assertEqual({q["id"] for q in first}, {q.id for q in questions})
