"""Application state container."""

from beerfest.state.festival_state import FestivalState

__all__ = ["FestivalState"]
