"""Shared data model helpers."""

from curator.data_model.base import StrictBaseModel
from curator.data_model.scores import Engagement, ScoreBreakdown


__all__ = ["Engagement", "ScoreBreakdown", "StrictBaseModel"]
