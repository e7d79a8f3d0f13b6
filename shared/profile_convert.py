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

"""
Helpers to convert UserProfile instances to and from their JSON payloads.

Payloads use the camelCase keys of the web client (``phoneNumber``,
``submittedAt``); snake_case keys are accepted when reading.
"""

from __future__ import annotations

import copy
from typing import Any

from shared.types import ProfileStatus, UserProfile


def _get_value(data: dict, *keys: str) -> Any:
    for key in keys:
        if key in data:
            return data[key]
    return None


def profile_to_dict(profile: UserProfile) -> dict:
    payload = {
        "id": profile.id,
        "email": profile.email,
        "name": profile.name,
        "picture": profile.picture,
        "status": profile.status.value,
    }
    if profile.phone_number is not None:
        payload["phoneNumber"] = profile.phone_number
    if profile.answers is not None:
        payload["answers"] = copy.deepcopy(profile.answers)
    if profile.submitted_at is not None:
        payload["submittedAt"] = profile.submitted_at
    return payload


def profile_from_dict(data: dict) -> UserProfile:
    answers = _get_value(data, "answers")
    return UserProfile(
        id=_get_value(data, "id", "userId", "user_id") or "",
        email=_get_value(data, "email") or "",
        name=_get_value(data, "name") or "",
        picture=_get_value(data, "picture") or "",
        phone_number=_get_value(data, "phoneNumber", "phone_number"),
        answers=copy.deepcopy(answers) if answers is not None else None,
        status=ProfileStatus(_get_value(data, "status") or ProfileStatus.PENDING),
        submitted_at=_get_value(data, "submittedAt", "submitted_at"),
    )
