"""
Conversation agent module.
"""

from voicegate.agent.base import ConversationAgent
from voicegate.agent.openai_agent import OpenAIConversationAgent

__all__ = ["ConversationAgent", "OpenAIConversationAgent"]
