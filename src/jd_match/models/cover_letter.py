"""Pydantic model for generated cover letters."""

from __future__ import annotations

from pydantic import BaseModel

from jd_match.models.analysis import Source


class CoverLetter(BaseModel):
    body: str
    source: Source = "model"

    model_config = {"frozen": True}
