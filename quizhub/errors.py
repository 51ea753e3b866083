class GameError(Exception):
    """A rejected command. The message is safe to show to the client that sent it."""

    def __init__(self, message):
        super().__init__(message)
        self.message = message


class InvalidPayload(GameError):
    """Inbound event data did not match the event's schema."""

    def __init__(self, event, details=None):
        super().__init__(f'Invalid payload for {event}.')
        self.event = event
        self.details = details or []
