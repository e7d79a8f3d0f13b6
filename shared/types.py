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

from dataclasses import dataclass
from enum import StrEnum
from typing import Dict, List, Optional, Tuple, Union

AnswerValue = Union[str, int, float, List[str]]
AnswerSet = Dict[str, AnswerValue]


class QuestionType(StrEnum):
    TEXT = "text"
    EMAIL = "email"
    TEL = "tel"
    NUMBER = "number"
    SELECT = "select"
    MULTI_SELECT = "multiSelect"
    TEXTAREA = "textarea"


class ProfileStatus(StrEnum):
    """Review status of a submitted profile. Only ever moves forward."""

    PENDING = "pending"
    MATCHED = "matched"
    CONTACTED = "contacted"

    def can_transition_to(self, other: "ProfileStatus") -> bool:
        order = list(ProfileStatus)
        return order.index(other) > order.index(self)


@dataclass(frozen=True)
class AgeRule:
    minimum: int = 18
    maximum: int = 99


@dataclass(frozen=True)
class PhoneRule:
    max_digits: int = 16


@dataclass(frozen=True)
class DescriptionRule:
    min_length: int = 10
    max_length: int = 500


@dataclass(frozen=True)
class MinSelectionRule:
    minimum: int = 1


ValidationRule = Union[AgeRule, PhoneRule, DescriptionRule, MinSelectionRule]


@dataclass(frozen=True)
class Question:
    """A single step of the quiz."""

    id: str
    type: QuestionType
    prompt: str
    required: bool = True
    placeholder: Optional[str] = None
    options: Tuple[str, ...] = ()
    rule: Optional[ValidationRule] = None


@dataclass(frozen=True)
class ValidationError:
    field: str
    message: str


@dataclass
class UserProfile:
    """The signed-in user together with their quiz submission, if any."""

    id: str
    email: str
    name: str
    picture: str = ""
    phone_number: Optional[str] = None
    answers: Optional[AnswerSet] = None
    status: ProfileStatus = ProfileStatus.PENDING
    submitted_at: Optional[str] = None

    @property
    def has_submitted(self) -> bool:
        return bool(self.answers)


@dataclass
class IdentityClaims:
    """Subset of Google ID token claims used to create a profile."""

    sub: str
    email: str
    name: str = ""
    picture: str = ""
