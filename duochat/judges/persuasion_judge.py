"""Per-utterance persuasion judge."""

from __future__ import annotations

import logging
import re
from collections.abc import Awaitable, Callable

from duochat.config.settings import JudgingConfig
from duochat.models.gateway import ProviderGateway
from duochat.models.providers.base_text_provider import TextRequest
from duochat.models.providers.exceptions import ProviderRateLimitError

from .scoring import ScoreState

logger = logging.getLogger(__name__)

FALLBACK_RATING = 5
MIN_RATING = 0
MAX_RATING = 10

_INTEGER_PATTERN = re.compile(r"-?\d+")

ScoredCallback = Callable[[ScoreState], Awaitable[None]]


def parse_rating(reply: str | None) -> int:
    """First integer in the reply, clamped to 0..10; 5 when there is none."""
    match = _INTEGER_PATTERN.search(reply or "")
    if match is None:
        return FALLBACK_RATING
    return max(MIN_RATING, min(MAX_RATING, int(match.group())))


def build_judge_prompt(text: str, speaker: str, topic: str) -> str:
    return (
        f'Rate argument strength (0-10) by {speaker} on "{topic}": "{text}". '
        "Output NUMBER only."
    )


class PersuasionJudge:
    """Rates single utterances and folds them into a ``ScoreState``.

    Meant to run as a detached task: ``judge`` never raises. Results that
    arrive after ``begin_session`` started a new session are discarded.
    """

    def __init__(
        self,
        gateway: ProviderGateway,
        config: JudgingConfig,
        scores: ScoreState | None = None,
        on_scored: ScoredCallback | None = None,
    ):
        self.gateway = gateway
        self.config = config
        self.scores = scores or ScoreState()
        self.on_scored = on_scored
        self._agent_a = ""
        self._agent_b = ""
        self._generation = 0

    @property
    def name(self) -> str:
        return f"Persuasion Judge ({self.config.provider}:{self.config.model})"

    def begin_session(self, agent_a: str, agent_b: str) -> None:
        self._generation += 1
        self._agent_a = agent_a
        self._agent_b = agent_b
        self.scores.reset([agent_a, agent_b])

    async def judge(self, text: str, speaker: str, topic: str) -> int | None:
        """Rate ``text`` and update the scores. Returns the rating applied."""
        if not text.strip():
            return None

        generation = self._generation
        request = TextRequest(
            model=self.config.model,
            prompt=build_judge_prompt(text, speaker, topic),
            api_key=self.config.api_key,
            api_endpoint=self.config.api_endpoint,
            temperature=0.3,
        )

        try:
            reply = await self.gateway.complete(
                self.config.provider, request, retry=False, description="judge"
            )
        except ProviderRateLimitError:
            logger.debug(f"Judge rate limited; skipping rating for {speaker}")
            return None
        except Exception as e:
            logger.error(f"Judging failed for {speaker}: {e}")
            return None

        if generation != self._generation:
            logger.debug(f"Dropping rating for {speaker} from a finished session")
            return None

        if speaker == self._agent_a:
            favours_a = True
        elif speaker == self._agent_b:
            favours_a = False
        else:
            logger.warning(f"Judge got an utterance from unknown speaker {speaker!r}")
            return None

        rating = parse_rating(reply)
        self.scores.apply(speaker, rating, favours_a=favours_a)
        logger.info(
            f"Judge rated {speaker} {rating}/10, momentum now {self.scores.momentum}"
        )

        if self.on_scored is not None:
            try:
                await self.on_scored(self.scores)
            except Exception as e:
                logger.error(f"Score callback failed: {e}")
        return rating
