"""
Protocol definition for notification backends.

Defines the payload sent for each feed item and the interface
that notifiers must implement.
"""

from dataclasses import dataclass
from typing import Protocol, runtime_checkable


@dataclass(frozen=True)
class NotificationPayload:
    """
    Values delivered with a single notification.

    Attributes
    ----------
    title : str
        Feed item title.
    url : str
        Feed item URL.
    icon_url : str
        Image shown alongside the notification.
    """

    title: str
    url: str
    icon_url: str

    def to_json(self) -> dict[str, str]:
        """Return the web hook body ("value1".."value3")."""
        return {"value1": self.title, "value2": self.url, "value3": self.icon_url}


@runtime_checkable
class Notifier(Protocol):
    """
    Protocol defining the interface for notification backends.

    A notifier performs a single best-effort delivery per call, without
    retrying or queuing.
    """

    async def notify(self, title: str, url: str) -> None:
        """
        Send one notification.

        Parameters
        ----------
        title : str
            Title of the item being announced.
        url : str
            URL of the item being announced.

        Raises
        ------
        NotifyError
            If the notification could not be delivered.
        """
        ...

    async def close(self) -> None:
        """
        Close the notifier and release any resources.

        This method should be called when shutting down the application
        to cleanly close connections and free resources.
        """
        ...
