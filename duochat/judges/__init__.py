"""Persuasion judging and score aggregation."""

from .persuasion_judge import PersuasionJudge, parse_rating
from .scoring import ScoreState

__all__ = ["PersuasionJudge", "ScoreState", "parse_rating"]
