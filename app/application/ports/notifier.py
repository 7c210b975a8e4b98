from abc import ABC, abstractmethod


class NotifierPort(ABC):
    @abstractmethod
    def send(self, to_email: str, subject: str, body: str) -> None:
        """Deliver one message. Raises ExternalSyncError on failure."""
        raise NotImplementedError
