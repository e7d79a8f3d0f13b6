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

"""Per-question answer validation.

Every rule is pure: the same question and value always produce the same
message, and ``None`` means the answer is acceptable.
"""

import re
from functools import singledispatch
from typing import Any, Dict, Iterable, Optional

from shared.types import (
    AgeRule,
    AnswerSet,
    DescriptionRule,
    MinSelectionRule,
    PhoneRule,
    Question,
    ValidationError,
)

_PHONE_SEPARATORS = re.compile(r"[\s\-\(\)]")
_INTEGER = re.compile(r"-?[0-9]+")


def is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return value == ""
    if isinstance(value, (list, tuple, set)):
        return len(value) == 0
    return False


def validate(question: Question, value: Any) -> Optional[str]:
    """Returns an error message for ``value`` or ``None`` when it is valid."""
    if question.required and is_empty(value):
        return f"{question.prompt} is required"
    if question.rule is not None:
        return check_rule(question.rule, value)
    return None


@singledispatch
def check_rule(rule, value: Any) -> Optional[str]:
    raise TypeError(f"Unsupported validation rule: {type(rule).__name__}")


@check_rule.register
def _(rule: AgeRule, value: Any) -> Optional[str]:
    if is_empty(value):
        return "Age is required"
    text = str(value).strip()
    # ASCII digits only: no underscores, no other scripts.
    if not _INTEGER.fullmatch(text):
        return "Please enter a valid number"
    age = int(text)
    if age < rule.minimum:
        return f"You must be at least {rule.minimum} years old"
    if age > rule.maximum:
        return f"Please enter a valid age ({rule.minimum}-{rule.maximum})"
    return None


@check_rule.register
def _(rule: PhoneRule, value: Any) -> Optional[str]:
    if is_empty(value):
        return "Phone number is required"
    digits = _PHONE_SEPARATORS.sub("", str(value))
    pattern = rf"\+?[1-9][0-9]{{0,{rule.max_digits - 1}}}"
    if not re.fullmatch(pattern, digits):
        return "Please enter a valid phone number"
    return None


@check_rule.register
def _(rule: DescriptionRule, value: Any) -> Optional[str]:
    text = str(value or "").strip()
    if not text:
        return "Description is required"
    if len(text) < rule.min_length:
        return f"Description must be at least {rule.min_length} characters"
    if len(text) > rule.max_length:
        return f"Description must be less than {rule.max_length} characters"
    return None


@check_rule.register
def _(rule: MinSelectionRule, value: Any) -> Optional[str]:
    if not value or len(value) < rule.minimum:
        return "Please select at least one option"
    return None


def validate_answers(
    questions: Iterable[Question], answers: AnswerSet
) -> Dict[str, ValidationError]:
    """Validates a whole answer set, keyed by question id."""
    errors: Dict[str, ValidationError] = {}
    for question in questions:
        message = validate(question, answers.get(question.id))
        if message is not None:
            errors[question.id] = ValidationError(field=question.id, message=message)
    return errors
