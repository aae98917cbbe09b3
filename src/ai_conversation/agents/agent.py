"""
Conversation participant definition.
"""
from dataclasses import dataclass

from .bindings import StreamingBinding


@dataclass(frozen=True)
class Agent:
    """
    One of the two participants in a conversation.

    The initial prompt template holds two positional slots: `{0}` is the
    agent's own name and `{1}` is its partner's name.
    """
    name: str
    binding: StreamingBinding
    initial_prompt_template: str
    color: str = "green"

    def format_initial_prompt(self, partner_name: str) -> str:
        """Format the introduction prompt with this agent's and its partner's names."""
        return self.initial_prompt_template.format(self.name, partner_name)
