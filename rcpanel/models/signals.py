"""
RCPanel - Signal Models

Pydantic models for the client signals sent with Datastar actions.
"""

from pydantic import BaseModel


class MkdirSignals(BaseModel):
    """Signals for creating a directory in the file browser"""
    path: str = ""  # Directory currently shown
    dirName: str


class TransferSignals(BaseModel):
    """Signals for starting a copy or move"""
    srcRemote: str
    srcPath: str = ""
    dstRemote: str
    dstPath: str = ""
