"""
RCPanel - librclone Binding

Thin ctypes binding to the librclone shared library built from
rclone/librclone (`go build --buildmode=c-shared -o librclone.so`).

Exported C functions:
    void RcloneInitialize(void);
    void RcloneFinalize(void);
    struct RcloneRPCResult { char* Output; int Status; } RcloneRPC(char* method, char* input);
    void RcloneFreeString(char* str);

Author: RCPanel Project
"""

import ctypes
import ctypes.util
import logging
import os
from typing import Optional, Tuple

logger = logging.getLogger(__name__)

# Environment variable pointing at the shared library
LIBRARY_ENV_VAR = "RCLONE_LIBRARY"


class RcloneRPCResult(ctypes.Structure):
    # Output is a C string owned by Go; keep it as a raw pointer so it can be freed
    _fields_ = [("Output", ctypes.c_void_p), ("Status", ctypes.c_int)]


def find_library(library_path: Optional[str] = None) -> str:
    """
    Locate the librclone shared library.

    Search order: explicit path, RCLONE_LIBRARY environment variable,
    the system library search path, then "librclone.so" in the working directory.
    """
    if library_path:
        return library_path
    env_path = os.environ.get(LIBRARY_ENV_VAR)
    if env_path:
        return env_path
    found = ctypes.util.find_library("rclone")
    if found:
        return found
    return os.path.abspath("librclone.so")


class LibRclone:
    """Loaded librclone shared library."""

    def __init__(self, library_path: Optional[str] = None):
        """
        Load the shared library and declare the exported signatures.

        Raises:
            OSError: If the library cannot be loaded
        """
        self.path = find_library(library_path)
        logger.info(f"Loading librclone from {self.path}")
        lib = ctypes.CDLL(self.path)

        lib.RcloneInitialize.argtypes = ()
        lib.RcloneInitialize.restype = None
        lib.RcloneFinalize.argtypes = ()
        lib.RcloneFinalize.restype = None
        lib.RcloneRPC.argtypes = (ctypes.c_char_p, ctypes.c_char_p)
        lib.RcloneRPC.restype = RcloneRPCResult
        lib.RcloneFreeString.argtypes = (ctypes.c_void_p,)
        lib.RcloneFreeString.restype = None

        self._lib = lib

    def initialize(self):
        self._lib.RcloneInitialize()

    def finalize(self):
        self._lib.RcloneFinalize()

    def rpc(self, method: str, params: str) -> Tuple[str, int]:
        """Run one RC call in-process and return (output JSON, status)."""
        result = self._lib.RcloneRPC(method.encode("utf-8"), params.encode("utf-8"))
        try:
            output = ctypes.string_at(result.Output).decode("utf-8") if result.Output else ""
        finally:
            if result.Output:
                self._lib.RcloneFreeString(result.Output)
        return output, int(result.Status)
