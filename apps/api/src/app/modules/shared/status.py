"""
Status state machine helpers shared by payments and admissions.

Each module owns its transition map; these helpers apply it.
"""

import enum
from collections.abc import Iterable, Mapping
from typing import Any, TypeVar

StatusT = TypeVar("StatusT", bound=enum.Enum)
EntityT = TypeVar("EntityT")


class InvalidStatusTransitionError(ValueError):
    """Raised when an invalid status transition is attempted."""

    def __init__(
        self,
        current_status: enum.Enum,
        new_status: enum.Enum,
        valid_transitions: Iterable[enum.Enum] = (),
    ):
        self.current_status = current_status
        self.new_status = new_status
        super().__init__(
            f"Invalid status transition: {current_status.value} -> {new_status.value}. "
            f"Valid transitions: {sorted(s.value for s in valid_transitions)}"
        )


def apply_transition(
    entity: EntityT,
    status: StatusT,
    transitions: Mapping[StatusT, set[StatusT]],
    **fields: Any,
) -> EntityT:
    """
    Move ``entity`` to ``status`` and set extra fields, without committing.

    Nothing is changed when the move is refused.

    Raises:
        InvalidStatusTransitionError: If ``transitions`` forbids the move
    """
    current_status = entity.status
    valid = transitions.get(current_status, set())
    if status not in valid:
        raise InvalidStatusTransitionError(current_status, status, valid)

    entity.status = status
    for key, value in fields.items():
        setattr(entity, key, value)

    return entity
