"""Domain errors."""

from uuid import UUID


class ConversationNotFoundError(ValueError):
    """Raised when a conversation id is not known to the repository."""

    def __init__(self, conversation_id: UUID):
        self.conversation_id = conversation_id
        super().__init__(f"Conversation {conversation_id} not found")
