"""
RCPanel - Reactive Update Channel

Server-to-client event stream that patches previously rendered fragments,
merges client signals, runs scripts or navigates, without a page reload.
Events are framed by the Datastar SDK (datastar-py).

A channel is opened per request. Events are written in emission order and
never batched. Delivery is fire and forget: before every emission the
channel checks whether the peer is still connected and drops the event if
it is not. Nothing is buffered for a peer that reconnects.
"""

import json
import logging
import threading
from typing import Any, Callable, Dict, Optional

from datastar_py import ServerSentEventGenerator as SSE
from datastar_py.consts import ElementPatchMode

logger = logging.getLogger(__name__)

# How a Fragment-Patch is applied; OUTER (morphing replacement) is the default
PatchMode = ElementPatchMode


def _js_string(value: str) -> str:
    # Keep "</script>" inside the literal from closing the script element
    return json.dumps(value).replace("</", "<\\/")


def SelectorForId(element_id: str) -> str:
    return f"#{element_id}"


class UpdateChannel:
    """
    Ordered event writer for one connection.

    Args:
        send: Writes one framed event to the peer
        is_disconnected: Reports whether the peer has gone away

    Emission methods return True when the event was written and False when
    it was dropped because the channel is closed. They may be called from
    any thread; a lock keeps concurrent emissions in a single order.
    """

    def __init__(self, send: Callable[[str], None],
                 is_disconnected: Callable[[], bool] = lambda: False):
        self._send = send
        self._is_disconnected = is_disconnected
        self._lock = threading.Lock()
        self._closed = False
        self.events_sent = 0

    def is_closed(self) -> bool:
        """True once the peer disconnected or the channel was closed."""
        return self._closed or self._is_disconnected()

    def close(self):
        self._closed = True

    def _emit(self, event: str) -> bool:
        with self._lock:
            if self.is_closed():
                logger.debug("Dropping event for closed channel")
                return False
            self._send(str(event))
            self.events_sent += 1
            return True

    # ==================== Fragments ====================

    def patch_elements(self, elements: str, selector: Optional[str] = None,
                       mode: PatchMode = PatchMode.OUTER, use_view_transition: bool = False,
                       event_id: Optional[str] = None) -> bool:
        """
        Fragment-Patch: apply markup to the element(s) matched by selector.

        Without a selector the client matches top-level elements by their id.
        """
        return self._emit(SSE.patch_elements(
            elements,
            selector=selector,
            mode=mode,
            use_view_transition=use_view_transition or None,
            event_id=event_id
        ))

    def patch_html_by_id(self, element_id: str, html: str, mode: PatchMode = PatchMode.OUTER) -> bool:
        """Fragment-Patch addressed to a DOM id."""
        return self.patch_elements(html, selector=SelectorForId(element_id), mode=mode)

    def append_by_id(self, element_id: str, html: str) -> bool:
        return self.patch_html_by_id(element_id, html, mode=PatchMode.APPEND)

    def prepend_by_id(self, element_id: str, html: str) -> bool:
        return self.patch_html_by_id(element_id, html, mode=PatchMode.PREPEND)

    def remove(self, selector: str) -> bool:
        """Fragment-Remove: remove the element(s) matched by selector."""
        return self._emit(SSE.remove_elements(selector))

    def remove_by_id(self, element_id: str) -> bool:
        return self.remove(SelectorForId(element_id))

    # ==================== Signals ====================

    def patch_signals(self, signals: Dict[str, Any], only_if_missing: bool = False) -> bool:
        """Signal-Patch: merge a JSON object into the client's signals."""
        return self._emit(SSE.patch_signals(signals, only_if_missing=only_if_missing or None))

    # ==================== Scripts ====================

    def execute_script(self, script: str, auto_remove: bool = True) -> bool:
        """Script-Execute: append a script element to the body and run it."""
        return self._emit(SSE.execute_script(script, auto_remove=auto_remove))

    def console_log(self, message: str) -> bool:
        return self.execute_script(f"console.log({_js_string(message)})")

    def alert(self, message: str) -> bool:
        """Show a browser alert, used for one-off notifications."""
        return self.execute_script(f"alert({_js_string(message)})")

    def navigate(self, url: str) -> bool:
        """Navigate: change the client's location once the stream is already open."""
        return self._emit(SSE.redirect(url))
