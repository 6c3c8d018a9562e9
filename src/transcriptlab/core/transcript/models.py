from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, List

DEFAULT_SPEAKER = "Speaker"


@dataclass(frozen=True)
class Utterance:
    """
    One normalized spoken turn.

    Notes:
    - time is a sort key only: seconds from the vendor payload, or epoch seconds
      for timestamped entries, 0 when unknown.
    - speaker is already a display label ("Speaker", "Speaker 2", "Alice").
    """
    time: float
    speaker: str
    text: str

    def render(self) -> str:
        return f"{self.speaker}: {self.text}"


@dataclass(frozen=True)
class ConversationTranscript:
    utterances: List[Utterance] = field(default_factory=list)

    def __iter__(self) -> Iterator[Utterance]:
        return iter(self.utterances)

    def __len__(self) -> int:
        return len(self.utterances)

    def sorted(self) -> "ConversationTranscript":
        # sorted() is stable: equal times keep insertion order
        return ConversationTranscript(utterances=sorted(self.utterances, key=lambda u: u.time))

    def render(self) -> str:
        """
        Plain-text rendering: "{speaker}: {text}" per turn, each followed by a blank line.
        """
        return "".join(f"{u.render()}\n\n" for u in self.utterances)
