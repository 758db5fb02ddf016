"""Routers package."""

from . import (
    health,
    analysis,
    viral,
    saved,
)
