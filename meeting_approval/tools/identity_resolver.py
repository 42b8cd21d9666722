"""
Identity Resolver

Maps the name the model heard ("Alice", "bob", "smi") to a concrete
participant. Matching runs through ordered tiers and stops at the first tier
with a hit:

    1. exact identity
    2. exact display name (case-sensitive)
    3. case-insensitive exact name or identity
    4. case-insensitive substring of name or identity, only if unique

Ambiguity never guesses: two substring hits resolve to an error just like
zero hits. Agent participants (reserved identity prefix) are never candidates.
"""

from collections.abc import Iterable

from loguru import logger

from meeting_approval.config import DEFAULT_AGENT_IDENTITY_PREFIX
from meeting_approval.result import Error, Ok, Result
from meeting_approval.transport.interfaces import Participant, ParticipantDirectory


def match_participant(
    target_descriptor: str,
    candidates: Iterable[Participant],
    reserved_prefix: str = DEFAULT_AGENT_IDENTITY_PREFIX,
) -> Result[Participant, str]:
    """Pure tiered match over a participant snapshot."""
    descriptor = target_descriptor.strip()
    humans = [
        p for p in candidates if not (reserved_prefix and p.identity.startswith(reserved_prefix))
    ]

    if not descriptor:
        return Error("No approver was named for this request")
    if not humans:
        return Error("There are no other participants in the meeting to approve this request")

    for participant in humans:
        if participant.identity == descriptor:
            return Ok(participant)

    for participant in humans:
        if participant.name == descriptor:
            return Ok(participant)

    folded = descriptor.casefold()
    for participant in humans:
        if participant.name.casefold() == folded or participant.identity.casefold() == folded:
            return Ok(participant)

    partial = [
        p for p in humans if folded in p.name.casefold() or folded in p.identity.casefold()
    ]
    if len(partial) == 1:
        return Ok(partial[0])
    if len(partial) > 1:
        names = ", ".join(p.display_name for p in partial)
        return Error(f'"{descriptor}" matches more than one participant ({names})')

    return Error(f'Could not find a participant named "{descriptor}" in the meeting')


class IdentityResolver:
    """Resolves against a fresh directory snapshot on every call (no caching)."""

    def __init__(
        self,
        directory: ParticipantDirectory,
        reserved_prefix: str = DEFAULT_AGENT_IDENTITY_PREFIX,
    ) -> None:
        self._directory = directory
        self._reserved_prefix = reserved_prefix

    def resolve(self, target_descriptor: str) -> Result[Participant, str]:
        snapshot = self._directory.list_participants()
        result = match_participant(target_descriptor, snapshot, self._reserved_prefix)
        match result:
            case Ok(participant):
                logger.info(
                    f"[IdentityResolver] '{target_descriptor}' → {participant.identity} "
                    f"({participant.display_name})"
                )
            case Error(reason):
                logger.warning(
                    f"[IdentityResolver] '{target_descriptor}' unresolved among "
                    f"{[p.identity for p in snapshot]}: {reason}"
                )
        return result
