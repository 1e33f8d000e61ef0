from django.test import SimpleTestCase, TestCase

from apps.core.errors import NotFoundError, StateConflictError
from apps.core.roles import resolve_actor
from apps.core.tests.builders import (
    add_question,
    make_admin,
    make_exam,
    make_student,
    make_subject,
    make_teacher,
    option_ids,
)
from apps.domains.exams.models import ExamSettings, Question
from apps.domains.results.models import ExamAttempt
from apps.domains.results.services.analysis_service import get_student_analysis, grade_band
from apps.domains.results.services.attempt_service import (
    attempt_question,
    mark_results_ready,
    start_exam,
    submit_attempt,
)


class GradeBandTest(SimpleTestCase):
    def test_bands(self):
        self.assertEqual(grade_band(95), ("A+", "Excellent"))
        self.assertEqual(grade_band(80), ("A", "Very Good"))
        self.assertEqual(grade_band(79.99), ("B", "Good"))
        self.assertEqual(grade_band(60), ("C", "Average"))
        self.assertEqual(grade_band(50), ("D", "Below Average"))
        self.assertEqual(grade_band(0), ("F", "Poor"))


class AnalysisTest(TestCase):
    def setUp(self):
        subject = make_subject()
        self.teacher = make_teacher(subject)
        self.student = make_student(subject)
        self.exam = make_exam(self.teacher, subject, is_active=True, allow_internal_grading=True)
        self.boolean = add_question(self.exam, Question.Type.BOOLEAN, boolean_answer=True, score=1)
        self.obj = add_question(self.exam, Question.Type.OBJ, correct=["a"], wrong=["b"], score=3)

        attempt = start_exam(student=self.student, exam_id=self.exam.id).attempt
        attempt_question(
            student=self.student,
            attempt_id=attempt.id,
            question_id=self.obj.id,
            answer=option_ids(self.obj)[0],
        )
        submit_attempt(student=self.student, attempt_id=attempt.id)
        self.attempt = attempt

    def analysis(self, user, student_id=None):
        return get_student_analysis(
            actor=resolve_actor(user),
            exam_id=self.exam.id,
            student_id=student_id,
        )

    def test_student_waits_for_release(self):
        with self.assertRaises(StateConflictError) as ctx:
            self.analysis(self.student.user)
        self.assertEqual(ctx.exception.code, "RESULT_NOT_READY")

    def test_student_view_after_release(self):
        mark_results_ready(teacher=self.teacher, exam_id=self.exam.id)

        data = self.analysis(self.student.user)

        overall = data["overall_performance"]
        self.assertEqual(overall["score"], 3)
        self.assertEqual(overall["total_possible_score"], 4)
        self.assertEqual(overall["score_percentage"], 75)
        self.assertEqual(overall["grade"], "B")
        self.assertEqual(overall["unattempted_questions"], 1)
        self.assertEqual(data["student_logs"], [])
        for row in data["question_analysis"]:
            self.assertNotIn("correct_answer", row)

    def test_correct_answers_when_enabled(self):
        ExamSettings.objects.filter(exam=self.exam).update(show_correct_answers=True)
        mark_results_ready(teacher=self.teacher, exam_id=self.exam.id)

        rows = {r["question_id"]: r for r in self.analysis(self.student.user)["question_analysis"]}
        self.assertIs(rows[self.boolean.id]["correct_answer"], True)
        self.assertEqual(rows[self.obj.id]["correct_answer"], "a")

    def test_teacher_sees_logs(self):
        data = self.analysis(self.teacher.user, student_id=self.student.id)
        actions = [log["action"] for log in data["student_logs"]]
        self.assertEqual(actions[0], "test_started")
        self.assertIn("test_submitted", actions)
        self.assertIn("boolean", data["insights"]["weaknesses"])
        self.assertIn("obj", data["insights"]["strengths"])

    def test_other_teacher_and_admin(self):
        with self.assertRaises(NotFoundError):
            self.analysis(make_teacher(self.exam.subject).user, student_id=self.student.id)

        data = self.analysis(make_admin(), student_id=self.student.id)
        self.assertEqual(data["attempt"]["id"], self.attempt.id)
        self.assertEqual(data["student_logs"], [])

    def test_no_attempt(self):
        other = make_student(self.exam.subject)
        with self.assertRaises(NotFoundError):
            self.analysis(self.teacher.user, student_id=other.id)
        self.assertEqual(ExamAttempt.objects.filter(student=other).count(), 0)
