#!/usr/bin/env python3
"""
collaborators.py
-------------------
Interfaces of the external services the store consumes.

The store never talks to these services itself: the UI layer owns their
transport, retries and timeouts. DataStore only receives finished results
through these protocols so it can track the action and persist the text.
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
from dataclasses import dataclass
from typing import Optional, Protocol, runtime_checkable


@dataclass(frozen=True)
class TranscriptionResult:
    """Finished transcription handed back by the transcription service."""

    text: str
    language: Optional[str] = None


@runtime_checkable
class TranscriptionService(Protocol):
    """Turns an audio blob into text."""

    def transcribe(self, audio: bytes) -> TranscriptionResult: ...


@runtime_checkable
class TextGenerationService(Protocol):
    """Generates text (report drafts, chat answers) from a prompt."""

    def generate(self, prompt: str) -> str: ...
