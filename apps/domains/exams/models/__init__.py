from .exam import Exam, ExamSettings
from .access_code import ExamAccessCode
from .question import Question, Option, Answer

__all__ = [
    "Exam",
    "ExamSettings",
    "ExamAccessCode",
    "Question",
    "Option",
    "Answer",
]
