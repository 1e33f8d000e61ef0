from rest_framework.test import APITestCase

from apps.core.tests.builders import add_question, make_exam, make_student, make_subject, make_teacher, option_ids
from apps.domains.exams.models import Question
from apps.domains.exams.services.exam_service import configure_access_code
from apps.domains.results.models import ExamAttempt


class StudentAttemptFlowTest(APITestCase):
    def setUp(self):
        subject = make_subject()
        self.teacher = make_teacher(subject)
        self.student = make_student(subject)
        self.exam = make_exam(self.teacher, subject, is_active=True, allow_internal_grading=True)
        self.boolean = add_question(self.exam, Question.Type.BOOLEAN, boolean_answer=True, score=2)
        self.mcq = add_question(self.exam, Question.Type.MCQ, correct=["a", "b"], wrong=["c"], score=3)
        self.client.force_authenticate(self.student.user)

    def test_start_answer_submit(self):
        response = self.client.post(f"/api/v1/exams/{self.exam.id}/start/", {}, format="json")
        self.assertEqual(response.status_code, 201)
        attempt = response.data["attempt"]
        self.assertEqual(len(attempt["questions"]), 2)
        for question in attempt["questions"]:
            self.assertNotIn("boolean_answer", question)
            self.assertNotIn("score", question)
            for option in question["options"]:
                self.assertNotIn("is_correct", option)

        response = self.client.post(f"/api/v1/exams/{self.exam.id}/start/", {}, format="json")
        self.assertEqual(response.status_code, 200)
        self.assertFalse(response.data["created"])

        attempt_id = attempt["id"]
        response = self.client.post(
            f"/api/v1/attempts/{attempt_id}/answers/",
            {"question_id": self.boolean.id, "answer": True},
            format="json",
        )
        self.assertEqual(response.status_code, 200)
        self.assertNotIn("is_correct", response.data)

        response = self.client.post(
            f"/api/v1/attempts/{attempt_id}/answers/",
            {"question_id": self.mcq.id, "answer": option_ids(self.mcq)},
            format="json",
        )
        self.assertEqual(response.status_code, 200)

        response = self.client.post(f"/api/v1/attempts/{attempt_id}/submit/", {}, format="json")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["status"], "completed")
        # graded, but not released yet
        self.assertIsNone(response.data["score"])
        self.assertEqual(ExamAttempt.objects.get(id=attempt_id).score, 5)

        response = self.client.post(f"/api/v1/attempts/{attempt_id}/submit/", {}, format="json")
        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.data["code"], "ALREADY_SUBMITTED")
        self.assertEqual(response.data["kind"], "STATE_CONFLICT")

    def test_error_body_for_bad_access_code(self):
        configure_access_code(exam=self.exam, code="LETMEIN")
        response = self.client.post(
            f"/api/v1/exams/{self.exam.id}/start/",
            {"access_code": "nope"},
            format="json",
        )
        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.data["code"], "ACCESS_CODE_INVALID")
        self.assertIn("detail", response.data)

    def test_cross_owner_attempt_is_404(self):
        other = make_student(self.exam.subject)
        attempt = ExamAttempt.objects.create(student=other, exam=self.exam)
        response = self.client.get(f"/api/v1/attempts/{attempt.id}/")
        self.assertEqual(response.status_code, 404)


class TeacherAttemptApiTest(APITestCase):
    def setUp(self):
        subject = make_subject()
        self.teacher = make_teacher(subject)
        self.exam = make_exam(self.teacher, subject, is_active=True)
        self.completed = ExamAttempt.objects.create(
            student=make_student(subject),
            exam=self.exam,
            status=ExamAttempt.Status.COMPLETED,
        )
        self.running = ExamAttempt.objects.create(
            student=make_student(subject),
            exam=self.exam,
            status=ExamAttempt.Status.IN_PROGRESS,
        )
        self.client.force_authenticate(self.teacher.user)

    def test_attempt_list_filter(self):
        response = self.client.get(f"/api/v1/exams/{self.exam.id}/attempts/", {"status": "completed"})
        self.assertEqual(response.status_code, 200)
        self.assertEqual([a["id"] for a in response.data], [self.completed.id])

        response = self.client.get(f"/api/v1/exams/{self.exam.id}/attempts/", {"status": "bogus"})
        self.assertEqual(response.status_code, 400)

    def test_mark_results_ready_requires_selection(self):
        url = f"/api/v1/exams/{self.exam.id}/mark-results-ready/"
        self.assertEqual(self.client.post(url, {}, format="json").status_code, 400)

        response = self.client.post(url, {"all": True}, format="json")
        self.assertEqual(response.data, {"updated": 1})

    def test_manual_grade(self):
        response = self.client.patch(
            f"/api/v1/teacher/attempts/{self.completed.id}/",
            {"score": 7.5, "teacher_feedback": "Good work"},
            format="json",
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["score"], 7.5)
        self.assertEqual(response.data["teacher_feedback"], "Good work")


class SecretKeyGradeApiTest(APITestCase):
    def test_invalid_key_is_403(self):
        subject = make_subject()
        exam = make_exam(make_teacher(subject), subject)
        response = self.client.post(
            f"/api/v1/exams/{exam.id}/grade/",
            {"secret_key": "wrong", "student_id": 1},
            format="json",
        )
        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.data["code"], "INVALID_SECRET_KEY")
