"""Evaluation transcript entity."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from ..exceptions import ValidationError


class MessagePhase(str, Enum):
    """Phase a transcript message belongs to."""

    SCORING = "scoring"
    DISCUSSION = "discussion"
    CONSENSUS = "consensus"


@dataclass(frozen=True)
class ConversationMessage:
    """One agent contribution or system note."""

    phase: MessagePhase
    content: str
    agent_id: Optional[str] = None  # None for system notes
    score: Optional[float] = None
    is_outlier: bool = False
    timestamp: datetime = field(default_factory=datetime.utcnow)

    @property
    def is_system(self) -> bool:
        return self.agent_id is None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "phase": self.phase.value,
            "content": self.content,
            "agent_id": self.agent_id,
            "score": self.score,
            "is_outlier": self.is_outlier,
            "timestamp": self.timestamp.isoformat(),
        }


class TranscriptRound:
    """Messages of one round, in arrival order."""

    def __init__(self, round_number: int):
        self.round_number = round_number
        self.variance: Optional[float] = None
        self._messages: List[ConversationMessage] = []

    @property
    def messages(self) -> Tuple[ConversationMessage, ...]:
        return tuple(self._messages)

    def append(self, message: ConversationMessage) -> None:
        self._messages.append(message)

    def scores(self) -> Dict[str, float]:
        """Scores submitted by agents in this round, outliers included."""
        return {
            message.agent_id: message.score
            for message in self._messages
            if message.phase == MessagePhase.SCORING
            and message.agent_id is not None
            and message.score is not None
        }

    def to_dict(self) -> Dict[str, Any]:
        return {
            "round": self.round_number,
            "variance": self.variance,
            "messages": [message.to_dict() for message in self._messages],
        }


class EvaluationTranscript:
    """Append-only record of every round of an evaluation."""

    def __init__(self):
        self._rounds: List[TranscriptRound] = []

    @property
    def rounds(self) -> Tuple[TranscriptRound, ...]:
        return tuple(self._rounds)

    @property
    def current_round(self) -> Optional[TranscriptRound]:
        return self._rounds[-1] if self._rounds else None

    def start_round(self, round_number: int) -> TranscriptRound:
        """Open a new round; round numbers must increase."""
        if self._rounds and round_number <= self._rounds[-1].round_number:
            raise ValidationError(
                f"Round {round_number} must follow round {self._rounds[-1].round_number}"
            )

        transcript_round = TranscriptRound(round_number)
        self._rounds.append(transcript_round)
        return transcript_round

    def add_message(self, message: ConversationMessage) -> None:
        """Append a message to the current round."""
        if not self._rounds:
            raise ValidationError("Cannot add a message before the first round starts")
        self._rounds[-1].append(message)

    def set_round_variance(self, variance: float) -> None:
        """Record the consensus variance of the current round."""
        if not self._rounds:
            raise ValidationError("No round to record variance for")
        if self._rounds[-1].variance is not None:
            raise ValidationError(
                f"Variance of round {self._rounds[-1].round_number} is already recorded"
            )
        self._rounds[-1].variance = variance

    def all_messages(self) -> List[ConversationMessage]:
        return [
            message for transcript_round in self._rounds for message in transcript_round.messages
        ]

    def is_empty(self) -> bool:
        return not self._rounds

    def to_dict(self) -> Dict[str, Any]:
        return {"rounds": [transcript_round.to_dict() for transcript_round in self._rounds]}
