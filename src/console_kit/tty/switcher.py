"""Scoped terminal mode changes."""

from __future__ import annotations

import logging
from typing import Optional

from console_kit.errors import ModeSwitchError
from console_kit.tty.stty import STTY, TTYMode

logger = logging.getLogger(__name__)


class ModeSwitcher:
    """
    Switches the terminal mode, and restores the previous mode on close.

    Switchers on the same terminal nest, and must be closed innermost
    first:

        with stty.switch(TTYMode.RAW):
            with stty.switch(TTYMode.COOKED):
                ...  # cooked
            ...  # raw again
    """

    def __init__(self, stty: STTY, mode: TTYMode) -> None:
        self._stty = stty
        self._closed = False
        self.mode = mode
        with stty.lock:
            self.before = stty.get_mode()
            if self.before is not mode:
                stty.set_mode(mode)
                logger.debug("Switched terminal mode %s -> %s", self.before.name, mode.name)
            stty.mode_stack.append(self)

    @property
    def did_change_mode(self) -> bool:
        return self.before is not self.mode

    @property
    def current_mode(self) -> TTYMode:
        return self._stty.get_mode()

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        """
        Restore the mode from before the switch. Closing twice is a no-op.

        Raises:
            ModeSwitchError: If a switcher opened after this one is still
                open, or the previous mode could not be restored.
        """
        with self._stty.lock:
            if self._closed:
                return
            stack = self._stty.mode_stack
            if not stack or stack[-1] is not self:
                raise ModeSwitchError("Mode switchers must be closed in reverse order of opening")
            stack.pop()
            self._closed = True
            if self.did_change_mode:
                self._stty.set_mode(self.before)
                logger.debug("Restored terminal mode %s", self.before.name)

    def __enter__(self) -> ModeSwitcher:
        return self

    def __exit__(self, exc_type: Optional[type], exc: Optional[BaseException], tb: object) -> None:
        self.close()
