"""Quiz scoring and per-category progress."""

from typing import Dict, Iterable, Mapping, Sequence


def is_correct_answer(correct_answer: int, answer_index: int) -> bool:
    return answer_index == correct_answer


def category_progress(quiz_ids: Iterable[str], progress: Mapping[str, bool]) -> Dict[str, float]:
    """Progress of one category given `progress` as {quiz_id: is_correct}.

    `completed` counts the category's questions that have a progress record,
    so `ratio` stays within [0, 1] and is 1 only when every question is
    answered.
    """
    ids = set(quiz_ids)
    answered = [progress[qid] for qid in ids if qid in progress]
    total = len(ids)
    completed = len(answered)
    return {
        "completed": completed,
        "total": total,
        "correct": sum(1 for ok in answered if ok),
        "ratio": (completed / total) if total else 0.0,
    }


def options_in_range(options: Sequence[str], answer_index: int) -> bool:
    return 0 <= answer_index < len(options)
