"""Merging of streamed completion deltas into one completion.

Each delta refines the running result: content is appended per choice,
role and finish markers are set once. Deltas that contradict what has
already been merged (a different stream id, a different role for the same
choice, text after a finish marker) raise ``MergeError``.
"""

from dataclasses import dataclass, field

from chat_relay.models import Completion, CompletionChoice, CompletionDelta, Message, Role
from chat_relay.relay.errors import EmptyCompletionError, MergeError


@dataclass
class _ChoiceState:
    index: int
    role: Role | None = None
    parts: list[str] = field(default_factory=list)
    finish_reason: str | None = None


class CompletionMerger:
    """Running "final completion" accumulator for one stream."""

    def __init__(self) -> None:
        self._id: str | None = None
        self._choices: dict[int, _ChoiceState] = {}
        self._count = 0

    @property
    def delta_count(self) -> int:
        return self._count

    def add(self, delta: CompletionDelta) -> None:
        """Merge one delta into the running result.

        Raises:
            MergeError: If the delta is incompatible with earlier deltas.
        """
        if delta.id is not None:
            if self._id is not None and delta.id != self._id:
                raise MergeError(f"Delta id {delta.id!r} does not match stream id {self._id!r}")
            self._id = delta.id

        for choice in delta.choices:
            state = self._choices.setdefault(choice.index, _ChoiceState(index=choice.index))

            if choice.role is not None:
                if state.role is not None and state.role != choice.role:
                    raise MergeError(
                        f"Choice {choice.index} changed role from "
                        f"{state.role.value} to {choice.role.value}"
                    )
                state.role = choice.role

            if choice.content:
                if state.finish_reason is not None:
                    raise MergeError(f"Choice {choice.index} received content after finishing")
                state.parts.append(choice.content)

            if choice.finish_reason is not None:
                if state.finish_reason is not None and state.finish_reason != choice.finish_reason:
                    raise MergeError(
                        f"Choice {choice.index} finished twice "
                        f"({state.finish_reason}, {choice.finish_reason})"
                    )
                state.finish_reason = choice.finish_reason

        self._count += 1

    def result(self) -> Completion:
        """Return the merged completion.

        Raises:
            EmptyCompletionError: If no delta was merged or no choice was produced.
        """
        if self._count == 0 or not self._choices:
            raise EmptyCompletionError("Completion stream produced no choices")

        choices = [
            CompletionChoice(
                index=state.index,
                message=Message(role=state.role or Role.ASSISTANT, content="".join(state.parts)),
                finish_reason=state.finish_reason,
            )
            for state in sorted(self._choices.values(), key=lambda s: s.index)
        ]
        return Completion(id=self._id, choices=choices)
