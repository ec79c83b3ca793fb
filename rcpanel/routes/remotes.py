"""
RCPanel - Remote Endpoints

Streaming endpoints for the remotes list.
"""

import logging

from rcpanel import engine
from rcpanel.context import Context
from rcpanel.exceptions import RCError
from rcpanel.router import Router
from rcpanel.views import DomId, ErrorFragment, GetRemotesInfo, RenderTemplate

# Create logger
logger = logging.getLogger(__name__)

# Create router instance
router = Router(tags=["Remotes"])

REMOTES_LIST_ID = "remotes-list"


@router.get("/api/remotes/refresh")
def refresh_remotes(ctx: Context):
    """Re-render the remotes list"""
    sse = ctx.sse()
    try:
        remotes = GetRemotesInfo(engine.rc_client)
    except RCError as e:
        logger.error(f"Error listing remotes: {e}")
        sse.patch_html_by_id(REMOTES_LIST_ID, ErrorFragment(str(e), REMOTES_LIST_ID))
        return
    sse.patch_html_by_id(REMOTES_LIST_ID, RenderTemplate("partials/remotes_list.html", remotes=remotes))


@router.delete("/api/remotes/{name}")
def delete_remote(ctx: Context):
    """Delete a remote and remove its row"""
    sse = ctx.sse()
    name = ctx.param("name")
    try:
        engine.rc_client.delete_remote(name)
    except RCError as e:
        logger.error(f"Error deleting remote '{name}': {e}")
        row_id = DomId("remote", name)
        sse.patch_html_by_id(row_id, ErrorFragment(str(e), row_id))
        return
    sse.remove_by_id(DomId("remote", name))
