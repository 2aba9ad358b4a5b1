import json

import pytest
from fastapi.testclient import TestClient

from quizgen.main import app, get_generator
from quizgen.providers import CompletionProvider
from quizgen.services import QuizBatchGenerator


class FakeProvider(CompletionProvider):
    """Returns a canned reply and records every call."""

    def __init__(self, reply="[]", error=None):
        self.reply = reply
        self.error = error
        self.calls = []

    async def complete(self, system_prompt, user_prompt, max_tokens, temperature):
        self.calls.append(
            {
                "system_prompt": system_prompt,
                "user_prompt": user_prompt,
                "max_tokens": max_tokens,
                "temperature": temperature,
            }
        )
        if self.error is not None:
            raise self.error
        return self.reply


def make_questions(count, with_ids=False):
    questions = []
    for i in range(count):
        q = {
            "question": f"Question {i}?",
            "options": ["a", "b", "c", "d"],
            "correctAnswers": [i % 4],
            "multipleChoice": False,
            "difficulty": "hard",
            "explanation": "Because.",
            "category": "graphs",
        }
        if with_ids:
            q["id"] = 100 + i
        questions.append(q)
    return questions


@pytest.fixture
def provider():
    return FakeProvider(reply=json.dumps(make_questions(3)))


@pytest.fixture
def client(provider):
    generator = QuizBatchGenerator(provider)
    app.dependency_overrides[get_generator] = lambda: generator
    yield TestClient(app)
    app.dependency_overrides.clear()
