"""
RCPanel - Transfer Endpoints

Start copy and move jobs. The engine runs them asynchronously; the client
is sent to the jobs page to follow their progress.
"""

import logging

from rcpanel import engine
from rcpanel.context import Context
from rcpanel.exceptions import RCError
from rcpanel.models import TransferSignals
from rcpanel.router import Router
from rcpanel.views import ERROR_REGION_ID, ErrorFragment

# Create logger
logger = logging.getLogger(__name__)

# Create router instance
router = Router(tags=["Transfers"])


def _start_transfer(ctx: Context, operation: str):
    sse = ctx.sse()
    try:
        signals = ctx.read_signals(TransferSignals)
    except ValueError as e:
        sse.patch_elements(ErrorFragment(f"Invalid transfer request: {e}", ERROR_REGION_ID))
        return

    start = engine.rc_client.copy if operation == "copy" else engine.rc_client.move
    try:
        start(signals.srcRemote, signals.srcPath, signals.dstRemote, signals.dstPath)
    except RCError as e:
        logger.error(f"Error starting {operation}: {e}")
        sse.patch_elements(ErrorFragment(str(e), ERROR_REGION_ID))
        return

    sse.alert(f"Started {operation} of {signals.srcRemote}:{signals.srcPath} to {signals.dstRemote}:{signals.dstPath}")
    sse.navigate("/jobs")


@router.post("/api/transfers/copy")
def start_copy(ctx: Context):
    _start_transfer(ctx, "copy")


@router.post("/api/transfers/move")
def start_move(ctx: Context):
    _start_transfer(ctx, "move")
