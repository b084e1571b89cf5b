# backend/app/services/messaging/__init__.py
"""
Messaging services package.

Chat freshness is pull based: clients poll the messages endpoint with
ChatMessagePoller. A push transport could notify the poller to fetch
early without changing the room state machine.
"""

from app.services.messaging.chat_poller import ChatMessagePoller

__all__ = ["ChatMessagePoller"]
