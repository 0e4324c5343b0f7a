"""Navigation state: which folder is currently open."""

from __future__ import annotations

import logging
from dataclasses import dataclass

logger = logging.getLogger(__name__)

HOME_FOLDER_NAME = "Home"


@dataclass(frozen=True)
class NavigationState:
    """The currently open folder.

    Attributes:
        folder_id: Id of the open folder, or None for the root.
        folder_name: Display name of the open folder.
        version: Navigation stamp, incremented on every navigation. Work
            issued under one version is stale once the version moves on.
    """

    folder_id: str | None
    folder_name: str
    version: int = 0


class Navigator:
    """Owns the NavigationState and replaces it atomically."""

    def __init__(self, home_folder_name: str = HOME_FOLDER_NAME) -> None:
        self._home_folder_name = home_folder_name
        self._state = NavigationState(folder_id=None, folder_name=home_folder_name)

    @property
    def state(self) -> NavigationState:
        return self._state

    def navigate_to(self, folder_id: str | None, folder_name: str) -> NavigationState:
        """Open a folder.

        The id, name and version change together in a single assignment.

        Args:
            folder_id: Id of the folder to open, or None for the root.
            folder_name: Display name of the folder.

        Returns:
            The new navigation state.
        """
        self._state = NavigationState(
            folder_id=folder_id,
            folder_name=folder_name,
            version=self._state.version + 1,
        )
        logger.info(
            "[navigate_to] navigated; folder_id:%s;version:%d",
            folder_id,
            self._state.version,
        )
        return self._state

    def navigate_home(self) -> NavigationState:
        """Open the root folder."""
        return self.navigate_to(None, self._home_folder_name)

    def is_current(self, folder_id: str | None) -> bool:
        """Return whether ``folder_id`` is the open folder (None checks for the root)."""
        return self._state.folder_id == folder_id

    def is_stale(self, issued: NavigationState) -> bool:
        """Return whether navigation has moved on since ``issued`` was captured."""
        return issued.version != self._state.version
