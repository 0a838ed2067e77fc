#!/usr/bin/env python3
"""
Seed the quiz bank and badge catalog.

Idempotent: categories and badges are matched by name, questions by text.
"""
import asyncio
import sys

from sqlmodel import select

try:
    from civic_api.database import async_session_factory, init_db
    from civic_api.models import Badge, Quiz, QuizCategory
except Exception as e:
    print("Failed to import application modules:", e, file=sys.stderr)
    sys.exit(2)


QUIZ_BANK = {
    ("Traffic Rules", "Road safety and traffic signals", "car"): [
        ("What does a flashing yellow signal mean?",
         ["Stop completely", "Slow down and proceed with caution", "Speed up", "U-turn allowed"], 1),
        ("Which side should pedestrians use when there is no footpath?",
         ["Same direction as traffic", "Facing oncoming traffic", "Middle of the road", "Either side"], 1),
    ],
    ("Civic Duties", "Responsibilities of every citizen", "users"): [
        ("What is the minimum voting age in India?", ["16", "18", "21", "25"], 1),
        ("Where should you report a broken streetlight?",
         ["Nowhere", "Social media only", "The civic issue portal", "A neighbour"], 2),
    ],
    ("Environment", "Waste, water and pollution", "leaf"): [
        ("Which bin is usually used for wet waste?", ["Blue", "Green", "Red", "Black"], 1),
        ("Which of these saves the most water at home?",
         ["Fixing leaking taps", "Longer showers", "Washing cars daily", "Leaving taps running"], 0),
    ],
    ("Public Safety", "Staying safe in public spaces", "shield"): [
        ("What is the national emergency number in India?", ["100", "101", "112", "108"], 2),
    ],
}

BADGES = [
    ("First Report", "Submitted your first civic report", "flag", 0),
    ("Quiz Starter", "Answered your first quiz question", "brain", 10),
    ("Community Helper", "Earned 100 points", "award", 100),
    ("Civic Champion", "Earned 500 points", "trophy", 500),
]


async def main():
    await init_db()
    async with async_session_factory() as session:
        created = 0
        for (name, description, icon), questions in QUIZ_BANK.items():
            category = (await session.exec(select(QuizCategory).where(QuizCategory.name == name))).first()
            if not category:
                category = QuizCategory(name=name, description=description, icon=icon)
                session.add(category)
                await session.flush()
            for question, options, correct in questions:
                statement = select(Quiz).where(Quiz.category_id == category.id, Quiz.question == question)
                if (await session.exec(statement)).first():
                    continue
                session.add(Quiz(category_id=category.id, question=question, options=options, correct_answer=correct))
                created += 1

        for name, description, icon, points_required in BADGES:
            if (await session.exec(select(Badge).where(Badge.name == name))).first():
                continue
            session.add(Badge(name=name, description=description, icon=icon, points_required=points_required))
            created += 1

        await session.commit()
        print(f"Seeded {created} new row(s)")


if __name__ == "__main__":
    asyncio.run(main())
