"""
RCPanel - Embedded Transport

Transport that runs rclone inside this process through librclone, so no
external `rclone rcd` daemon is needed.

librclone is a process-wide singleton: only one EmbeddedTransport should be
active per process. The initialization guard below belongs to the instance,
so tests can build independent transports around fake libraries.

Author: RCPanel Project
"""

import logging
import threading
from typing import Callable, Optional, Tuple

from rcpanel.api.librclone import LibRclone
from rcpanel.api.transport import normalize_params, transport_failure

logger = logging.getLogger(__name__)


class EmbeddedTransport:
    """
    Transport calling librclone directly.

    Responsibilities:
    - Load and initialize librclone exactly once, on the first call, even when
      several request threads make their first call at the same time
    - Finalize librclone on close(); calls after close() are a programming error
    """

    def __init__(self, library_path: Optional[str] = None,
                 library_factory: Optional[Callable[[], object]] = None):
        """
        Initialize embedded transport. Nothing is loaded until the first call.

        Args:
            library_path: Path to librclone (see librclone.find_library)
            library_factory: Callable returning an object with initialize(),
                             finalize() and rpc(method, params); defaults to LibRclone
        """
        self.library_path = library_path
        self._library_factory = library_factory or (lambda: LibRclone(library_path))
        self._library = None
        self._init_lock = threading.Lock()
        self._initialized = False
        self._init_error: Optional[str] = None
        self._closed = False

    def _ensure_initialized(self):
        if self._initialized:
            return
        with self._init_lock:
            if self._initialized:
                return
            try:
                library = self._library_factory()
                library.initialize()
                self._library = library
                logger.info("librclone initialized")
            except Exception as e:
                # Initialization is attempted once; later calls report the same failure
                self._init_error = f"Failed to initialize librclone: {e}"
                logger.error(self._init_error)
            self._initialized = True

    def call(self, method: str, params: str) -> Tuple[str, int]:
        """
        Make one RC call in-process.

        Returns:
            Tuple of (response body, status code)

        Raises:
            RuntimeError: If called after close()
        """
        if self._closed:
            raise RuntimeError(f"EmbeddedTransport used after close (method {method})")

        self._ensure_initialized()
        if self._init_error:
            return transport_failure(self._init_error)

        logger.debug(f"RC call (embedded): {method}")
        return self._library.rpc(method, normalize_params(params))

    def close(self):
        """Finalize librclone. Safe to call more than once."""
        with self._init_lock:
            if self._closed:
                return
            self._closed = True
            if self._library is not None:
                self._library.finalize()
                logger.info("librclone finalized")
