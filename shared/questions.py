# Copyright 2025 Google LLC
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
# ==============================================================================

"""The ordered question catalog shown by the quiz wizard."""

from typing import Dict, Optional, Sequence, Tuple

from shared.types import (
    AgeRule,
    DescriptionRule,
    MinSelectionRule,
    PhoneRule,
    Question,
    QuestionType,
)

PHONE_QUESTION_ID = "phone"

DEFAULT_QUESTIONS: Tuple[Question, ...] = (
    Question(
        id="gender",
        type=QuestionType.SELECT,
        prompt="What is your gender?",
        options=("Male", "Female", "Non-binary", "Prefer not to say"),
    ),
    Question(
        id="name",
        type=QuestionType.TEXT,
        prompt="What is your name?",
        placeholder="Enter your full name",
    ),
    Question(
        id="age",
        type=QuestionType.NUMBER,
        prompt="How old are you?",
        placeholder="Enter your age",
        rule=AgeRule(),
    ),
    Question(
        id=PHONE_QUESTION_ID,
        type=QuestionType.TEL,
        prompt="What is your phone number?",
        placeholder="Enter your phone number",
        rule=PhoneRule(),
    ),
    Question(
        id="orientation",
        type=QuestionType.SELECT,
        prompt="What is your sexual orientation?",
        options=(
            "Straight",
            "Gay",
            "Lesbian",
            "Bisexual",
            "Pansexual",
            "Asexual",
            "Other",
            "Prefer not to say",
        ),
    ),
    Question(
        id="relationshipGoals",
        type=QuestionType.SELECT,
        prompt="What are your relationship goals?",
        options=(
            "Long-term relationship",
            "Marriage",
            "Casual dating",
            "Friendship first",
            "Not sure yet",
        ),
    ),
    Question(
        id="drinkingSmoking",
        type=QuestionType.SELECT,
        prompt="Do you drink or smoke?",
        options=(
            "I drink occasionally",
            "I drink regularly",
            "I smoke occasionally",
            "I smoke regularly",
            "I don't drink or smoke",
            "I prefer not to say",
        ),
    ),
    Question(
        id="availableDates",
        type=QuestionType.MULTI_SELECT,
        prompt="Which dates work for you? (Select all that apply)",
        options=(
            "Weekday evenings",
            "Weekend afternoons",
            "Weekend evenings",
            "Weekday lunches",
            "Flexible schedule",
        ),
        rule=MinSelectionRule(),
    ),
    Question(
        id="selfDescription",
        type=QuestionType.TEXTAREA,
        prompt="Give a brief description of yourself. Hobbies, work, etc.",
        placeholder="Tell us about yourself...",
        rule=DescriptionRule(),
    ),
    Question(
        id="idealPartner",
        type=QuestionType.TEXTAREA,
        prompt=(
            "Give a brief description of your ideal partner. "
            "Green flags? Deal breakers?"
        ),
        placeholder="Describe your ideal partner...",
        rule=DescriptionRule(),
    ),
    Question(
        id="howDidYouFind",
        type=QuestionType.SELECT,
        prompt="How did you find out about this event?",
        options=(
            "Social media",
            "Friend recommendation",
            "Online search",
            "Event website",
            "Other",
        ),
    ),
)


class QuestionCatalog:
    """Immutable, ordered collection of questions with lookup by id."""

    def __init__(self, questions: Sequence[Question] = DEFAULT_QUESTIONS):
        if not questions:
            raise ValueError("A question catalog needs at least one question")
        self._questions: Tuple[Question, ...] = tuple(questions)
        self._by_id: Dict[str, Question] = {}
        for question in self._questions:
            if question.id in self._by_id:
                raise ValueError(f"Duplicate question id: {question.id}")
            self._by_id[question.id] = question

    def __len__(self) -> int:
        return len(self._questions)

    def __iter__(self):
        return iter(self._questions)

    def __getitem__(self, index: int) -> Question:
        return self._questions[index]

    def __contains__(self, question_id: object) -> bool:
        return question_id in self._by_id

    def get(self, question_id: str) -> Optional[Question]:
        return self._by_id.get(question_id)
