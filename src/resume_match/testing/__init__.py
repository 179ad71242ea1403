"""Public testing utilities for resume-match.

Provides a mock chat model for exercising the chat-model reply generator
without requiring API keys.
"""

from resume_match.testing.mock_llm import MockReplyChatModel

__all__ = ["MockReplyChatModel"]
