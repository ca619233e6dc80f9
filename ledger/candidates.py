"""Candidate roster, single-choice tally and the flat vote history."""

import logging
from collections.abc import Iterable
from dataclasses import replace

from ledger.models import Candidate
from ledger.validation import validate_candidate_id, validate_name

logger = logging.getLogger(__name__)


class CandidateRegistry:
    """Flat roster of candidates with a majority tally and LIFO undo.

    Candidates live in a list in insertion order. A dict maps each id to its
    position in that list; it is derived state and is rebuilt whenever
    positions shift (add and delete).

    Every vote cast goes into the vote history, including votes for ids that
    match no candidate. Deleting a candidate leaves its history entries in
    place, so the history is an audit trail rather than a mirror of the
    counts.
    """

    def __init__(self):
        self._candidates: list[Candidate] = []
        self._index: dict[int, int] = {}
        self._history: list[int] = []

    def _rebuild_index(self) -> None:
        self._index = {c.id: i for i, c in enumerate(self._candidates)}

    def _get(self, candidate_id: int) -> Candidate | None:
        position = self._index.get(candidate_id)
        if position is None:
            return None
        return self._candidates[position]

    # --- roster ---

    @property
    def candidates(self) -> list[Candidate]:
        """Copies of all candidates in registry order."""
        return [replace(c) for c in self._candidates]

    @property
    def valid_ids(self) -> list[int]:
        return [c.id for c in self._candidates]

    def __len__(self) -> int:
        return len(self._candidates)

    def __contains__(self, candidate_id: int) -> bool:
        return candidate_id in self._index

    def add_candidate(self, candidate_id: int, name: str, department: str = "") -> bool:
        """Add a zero-vote candidate.

        Fails if the id is not positive, the name is invalid or the id is
        already taken.
        """
        if not validate_candidate_id(candidate_id):
            logger.debug("rejecting candidate id %r: not a positive integer", candidate_id)
            return False
        if not validate_name(name):
            logger.debug("rejecting candidate %d: invalid name %r", candidate_id, name)
            return False
        if candidate_id in self._index:
            logger.debug("rejecting candidate %d: id already taken", candidate_id)
            return False

        self._candidates.append(Candidate(id=candidate_id, name=name, department=department or ""))
        self._rebuild_index()
        logger.info("added candidate %d (%s)", candidate_id, name)
        return True

    def modify_candidate(self, candidate_id: int, new_name: str, new_department: str = "") -> bool:
        """Overwrite a candidate's name and department, keeping its votes and position."""
        candidate = self._get(candidate_id)
        if candidate is None:
            logger.debug("cannot modify candidate %r: not found", candidate_id)
            return False
        if not validate_name(new_name):
            logger.debug("cannot modify candidate %d: invalid name %r", candidate_id, new_name)
            return False

        candidate.name = new_name
        candidate.department = new_department or ""
        logger.info("modified candidate %d", candidate_id)
        return True

    def delete_candidate(self, candidate_id: int) -> bool:
        """Remove a candidate. Its entries in the vote history are kept."""
        position = self._index.get(candidate_id)
        if position is None:
            logger.debug("cannot delete candidate %r: not found", candidate_id)
            return False

        del self._candidates[position]
        self._rebuild_index()
        logger.info("deleted candidate %d", candidate_id)
        return True

    def query_candidate(self, candidate_id: int) -> Candidate | None:
        """Get a copy of the candidate with the given id, or None."""
        candidate = self._get(candidate_id)
        return replace(candidate) if candidate is not None else None

    def restore_vote_count(self, candidate_id: int, vote_count: int) -> bool:
        """Set a candidate's count directly; used when importing snapshots."""
        candidate = self._get(candidate_id)
        if candidate is None or vote_count < 0:
            return False
        candidate.vote_count = vote_count
        return True

    # --- voting ---

    @property
    def vote_history(self) -> list[int]:
        """Copy of the vote history, oldest first."""
        return list(self._history)

    @property
    def total_votes(self) -> int:
        return sum(c.vote_count for c in self._candidates)

    def vote(self, vote_vector: Iterable[int], cumulative: bool = True) -> int:
        """Tally a batch of votes.

        Each id is appended to the history; ids matching a live candidate
        increment its count. With ``cumulative=False`` the counts and the
        history are reset first, giving a fresh tally of just this batch.

        Returns:
            Number of votes in the batch that matched no candidate.
        """
        if not cumulative:
            self.reset_votes()

        invalid = 0
        cast = 0
        for vote_id in vote_vector:
            self._history.append(vote_id)
            candidate = self._get(vote_id)
            if candidate is None:
                invalid += 1
            else:
                candidate.vote_count += 1
            cast += 1

        logger.info("tallied %d votes (%d invalid)", cast, invalid)
        return invalid

    def cast_vote(self, candidate_id: int) -> bool:
        """Cast a single vote. Nothing is recorded if the candidate is unknown."""
        candidate = self._get(candidate_id)
        if candidate is None:
            logger.debug("cannot vote for candidate %r: not found", candidate_id)
            return False

        candidate.vote_count += 1
        self._history.append(candidate_id)
        return True

    def find_winner(self) -> int | None:
        """Find the candidate holding a strict majority of all votes.

        A candidate wins when its count exceeds ``total // 2``. At most one
        candidate can satisfy that, so the registry-order scan returns it.

        Returns:
            The winner's id, or None if there are no candidates, no votes,
            or nobody has a majority.
        """
        if not self._candidates:
            return None
        total = self.total_votes
        if total == 0:
            return None

        threshold = total // 2
        for candidate in self._candidates:
            if candidate.vote_count > threshold:
                return candidate.id
        return None

    # --- undo ---

    def undo_last_vote(self) -> bool:
        """Take back the most recent vote.

        The entry is always removed from the history; the count is only
        decremented if the candidate still exists and has votes.
        """
        if not self._history:
            return False

        vote_id = self._history.pop()
        candidate = self._get(vote_id)
        if candidate is not None and candidate.vote_count > 0:
            candidate.vote_count -= 1
        logger.info("undid vote for %d", vote_id)
        return True

    def undo_last_votes(self, count: int) -> int:
        """Undo up to ``count`` of the most recent votes; returns how many were undone."""
        if count <= 0:
            return 0
        undone = 0
        for _ in range(min(count, len(self._history))):
            if self.undo_last_vote():
                undone += 1
        return undone

    def reset_votes(self) -> None:
        """Zero every count and clear the history, keeping the roster."""
        for candidate in self._candidates:
            candidate.vote_count = 0
        self._history.clear()
        logger.info("reset all candidate votes")

    def clear_all(self) -> None:
        """Remove all candidates and the whole history."""
        self._candidates.clear()
        self._index.clear()
        self._history.clear()
        logger.info("cleared candidate registry")
