# courses/exercise_types.py
"""
Typed views over the loosely-typed exercise columns.

``Exercise.test_cases`` is a JSON column and the code columns are nullable
for every exercise, so each row is parsed into exactly one variant here
before anything grades or serves it:

* ``MultipleChoiceExercise`` - a list of questions, each with options and
  the correct answer.
* ``CodeExercise`` - language, starter code and solution code.

``parse_exercise`` raises ``InvalidExercisePayload`` when the row does not
satisfy its variant's rules.
"""
import json
from dataclasses import dataclass, field
from typing import List, Optional, Union

from rest_framework import serializers

from cores.utils import round_half_up
from .models import Exercise


class InvalidExercisePayload(serializers.ValidationError):
    pass


@dataclass(frozen=True)
class QuizQuestion:
    question_text: str
    options: List[str]
    correct_answer: str
    explanation: Optional[str] = None

    def to_dict(self, include_answer=True):
        data = {"question_text": self.question_text, "options": list(self.options)}
        if include_answer:
            data["correct_answer"] = self.correct_answer
            data["explanation"] = self.explanation
        return data


@dataclass(frozen=True)
class MultipleChoiceExercise:
    exercise_id: Optional[int]
    questions: List[QuizQuestion] = field(default_factory=list)

    def grade(self, answers):
        """
        Score a submission as a 0-100 percentage.

        ``answers`` holds one chosen option per question, in question order.
        Missing answers count as wrong.
        """
        answers = list(answers or [])
        correct = sum(
            1 for index, question in enumerate(self.questions)
            if index < len(answers) and answers[index] == question.correct_answer
        )
        return round_half_up(correct / len(self.questions) * 100)


@dataclass(frozen=True)
class CodeExercise:
    exercise_id: Optional[int]
    language: str
    solution_code: str
    starter_code: str = ""


ExercisePayload = Union[MultipleChoiceExercise, CodeExercise]


def _load_json(raw):
    if isinstance(raw, str):
        try:
            return json.loads(raw or "[]")
        except ValueError:
            raise InvalidExercisePayload({"test_cases": "Questions are not valid JSON."})
    return raw


def parse_questions(raw):
    """Validate a raw question list and return ``QuizQuestion`` objects."""
    raw = _load_json(raw)
    if not isinstance(raw, list) or not raw:
        raise InvalidExercisePayload({"test_cases": "Add at least one question."})

    questions = []
    for number, item in enumerate(raw, start=1):
        if not isinstance(item, dict):
            raise InvalidExercisePayload({"test_cases": f"Question {number}: must be an object."})

        text = (item.get("question_text") or "").strip()
        if not text:
            raise InvalidExercisePayload({"test_cases": f"Question {number}: question text is required."})

        options = item.get("options") or []
        if isinstance(options, str):
            options = _load_json(options)
        options = [str(o).strip() for o in options if str(o).strip()]
        if len(options) < 2:
            raise InvalidExercisePayload({"test_cases": f"Question {number}: add at least 2 options."})

        correct = str(item.get("correct_answer") or "").strip()
        if correct not in options:
            raise InvalidExercisePayload({"test_cases": f"Question {number}: select the correct answer."})

        questions.append(QuizQuestion(
            question_text=text,
            options=options,
            correct_answer=correct,
            explanation=item.get("explanation") or None,
        ))
    return questions


def parse_code(language, solution_code, starter_code=None):
    if not (language or "").strip():
        raise InvalidExercisePayload({"language": "Select the programming language."})
    if not (solution_code or "").strip():
        raise InvalidExercisePayload({"solution_code": "Add the solution code."})
    return language.strip(), solution_code, starter_code or ""


def parse_exercise(exercise):
    """Return the typed variant for an ``Exercise`` row."""
    if exercise.type == Exercise.ExerciseType.MULTIPLE_CHOICE:
        return MultipleChoiceExercise(exercise_id=exercise.pk, questions=parse_questions(exercise.test_cases))

    if exercise.type == Exercise.ExerciseType.CODE:
        language, solution, starter = parse_code(exercise.language, exercise.solution_code, exercise.starter_code)
        return CodeExercise(exercise_id=exercise.pk, language=language, solution_code=solution, starter_code=starter)

    raise InvalidExercisePayload({"type": f"Unknown exercise type '{exercise.type}'."})
