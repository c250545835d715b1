"""Contact form inbox."""

import logging

from shop.domain import ContactMessage, MessageId, MessageStatus, NewContactMessage
from shop.domain.errors import MessageNotFoundError
from shop.stores.interfaces import MessageStore

logger = logging.getLogger(__name__)


class ContactService:
    def __init__(self, store: MessageStore) -> None:
        self._store = store

    def submit(self, message: NewContactMessage) -> ContactMessage:
        """Store a visitor's message as unread."""
        saved = self._store.add_message(message)
        logger.info("Contact message received", extra={"message_id": str(saved.id)})
        return saved

    def list_messages(self) -> list[ContactMessage]:
        return self._store.list_messages()

    def set_status(self, message_id: str, status: MessageStatus) -> ContactMessage:
        """Mark a message read or replied.

        Raises:
            MessageNotFoundError: If no message has this ID.
        """
        try:
            parsed = MessageId.from_string(message_id)
        except ValueError:
            raise MessageNotFoundError()
        updated = self._store.set_status(parsed, status)
        if updated is None:
            raise MessageNotFoundError()
        return updated
