"""Craft queue orchestration for a poll-only external crafting agent.

The agent never reports completion. The orchestrator therefore infers
progress from periodically polled ``busy``/``list running`` flags and drives
the queue one item at a time.
"""

__version__ = "0.1.0"
