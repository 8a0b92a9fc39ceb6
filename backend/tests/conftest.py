"""Pytest configuration and fixtures."""

import os

import pytest

os.environ.setdefault("AIRTABLE_API_KEY", "")

from stylequiz.core.models import Level, Option, Question, QuizClient, QuizContent, Template  # noqa: E402


def make_question(qid, order, a_traits, b_traits, category="Typography"):
    return Question(
        id=qid,
        order=order,
        category=category,
        option_a=Option(label=f"{qid} A", traits=a_traits),
        option_b=Option(label=f"{qid} B", traits=b_traits)
    )


def make_template(tid, profile, name=None, order=0):
    return Template(
        id=tid,
        name=name or tid,
        match_profile={trait: Level(level) for trait, level in profile.items()},
        order=order
    )


@pytest.fixture
def client_info():
    return QuizClient(id="recClient1", name="Acme", slug="acme")


@pytest.fixture
def minimal_rich_content(client_info):
    """Three questions, A scores minimal and B scores rich"""
    questions = [
        make_question(f"recQ{i}", i, {"minimal": 1}, {"rich": 1})
        for i in range(1, 4)
    ]
    templates = [
        make_template("recT-low", {"minimal": "low"}, name="Maximal"),
        make_template("recT-high", {"minimal": "high"}, name="Clean"),
        make_template("recT-any", {}, name="Anything Goes"),
    ]
    return QuizContent(client=client_info, questions=questions, templates=templates)


@pytest.fixture
def style_content(client_info):
    """Questions touching several dimensions with uneven weights"""
    questions = [
        make_question("recQ1", 1, {"minimal": 2, "cool": 1}, {"rich": 2, "warm": 1}, "Layout"),
        make_question("recQ2", 2, {"bold": 2}, {"refined": 2}, "Typography"),
        make_question("recQ3", 3, {"geometric": 1, "serious": 1}, {"organic": 1, "playful": 1}, "Shapes"),
        make_question("recQ4", 4, {"warm": 3}, {"cool": 3, "sparkly": 1}, "Colour"),
    ]
    templates = [
        make_template("recT1", {"warm": "high", "bold": "medium"}, name="Sunset"),
        make_template("recT2", {"cool": "high", "minimal": "high"}, name="Nordic"),
        make_template("recT3", {"playful": "high"}, name="Confetti"),
    ]
    return QuizContent(client=client_info, questions=questions, templates=templates)
