"""
Utility functions for conversation summaries.
"""
from typing import Sequence

from ..agents.conversation_state import Turn
from ..utils.logging_config import get_logger

logger = get_logger(__name__)


def print_conversation_summary(turns: Sequence[Turn]) -> None:
    """
    Print a table of recorded turns.

    Args:
        turns: Recorded turns in conversation order
    """
    logger.info("Generating conversation summary")

    print(f"\n{'=' * 60}")
    print("CONVERSATION SUMMARY")
    print(f"{'=' * 60}")
    print(f"{'Round':>5}  {'Agent':<30}  {'Chars':>8}")

    for turn in turns:
        print(f"{turn.round:>5}  {turn.agent_name:<30}  {len(turn.text):>8}")

    total = sum(len(turn.text) for turn in turns)
    print(f"\n{len(turns)} turns, {total} characters")
    print(f"{'=' * 60}\n")

    logger.debug(f"Conversation summary completed ({len(turns)} turns)")
