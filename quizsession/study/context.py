"""Tutor context pushed to chat subscribers when the question changes."""

from __future__ import annotations

from typing import Sequence

from quizsession.core.models import Question, QuestionContext

CONTEXT_TITLE = "Quiz Question"


def letter_for(index: int) -> str:
    """0 -> 'A', 1 -> 'B', ..."""
    return chr(ord("A") + index)


def build_tutor_context(
    category: str,
    question: Question,
    presented_options: Sequence[str],
) -> QuestionContext:
    lettered = "\n".join(
        f"{letter_for(i)}. {option}" for i, option in enumerate(presented_options)
    )
    context = (
        f"I'm currently taking a quiz on {category}. "
        f"Here's the current question I'm looking at:\n"
        f"Question: {question.content}\n"
        f"Available options as shown to me:\n"
        f"{lettered}\n\n"
        f'The correct answer is: "{question.correct_answer}" '
        f"(but this might appear in any position in my shuffled options)\n\n"
        f"Explanation for the correct answer:\n"
        f"{question.explanation}\n\n"
        "Please act as a tutor and explain concepts in a straight-forward and "
        "beginner-friendly manner. Remember not to reference the correct answer's "
        "position in the list, as the options are shuffled."
    )
    return QuestionContext(
        content_title=CONTEXT_TITLE,
        context=context,
        question_id=question.id,
    )
