"""
RCPanel - File Browser Endpoints

Streaming endpoints for browsing a remote and managing its files.
"""

import logging
import posixpath

from rcpanel import engine
from rcpanel.context import Context
from rcpanel.exceptions import RCError
from rcpanel.models import MkdirSignals
from rcpanel.router import Router
from rcpanel.views import DomId, ErrorFragment, GetFileItems, ParentPath, RenderTemplate

# Create logger
logger = logging.getLogger(__name__)

# Create router instance
router = Router(tags=["Files"])

FILE_BROWSER_ID = "file-browser"


def PatchFileBrowser(ctx: Context, remote: str, path: str):
    """List a directory and patch the file browser with it"""
    sse = ctx.sse()
    try:
        items = GetFileItems(engine.rc_client, remote, path)
    except RCError as e:
        logger.error(f"Error listing {remote}:{path}: {e}")
        sse.patch_html_by_id(FILE_BROWSER_ID, ErrorFragment(str(e), FILE_BROWSER_ID))
        return
    html = RenderTemplate(
        "partials/file_browser.html",
        remote=remote,
        path=path,
        parent=ParentPath(path),
        items=items
    )
    sse.patch_html_by_id(FILE_BROWSER_ID, html)


@router.get("/api/remotes/{name}/browse")
def browse_remote(ctx: Context):
    """Show the contents of a directory (path ".." goes back to the root)"""
    path = ctx.query("path").strip("/")
    if path == "..":
        path = ""
    PatchFileBrowser(ctx, ctx.param("name"), path)


@router.post("/api/remotes/{name}/mkdir")
def make_directory(ctx: Context):
    """Create a directory inside the directory currently shown"""
    sse = ctx.sse()
    name = ctx.param("name")
    try:
        signals = ctx.read_signals(MkdirSignals)
    except ValueError as e:
        sse.patch_html_by_id(FILE_BROWSER_ID, ErrorFragment(f"Invalid request: {e}", FILE_BROWSER_ID))
        return

    dir_name = signals.dirName.strip().strip("/")
    if not dir_name:
        sse.patch_html_by_id(FILE_BROWSER_ID, ErrorFragment("Folder name is required", FILE_BROWSER_ID))
        return

    path = signals.path.strip("/")
    try:
        engine.rc_client.mkdir(name, posixpath.join(path, dir_name) if path else dir_name)
    except RCError as e:
        logger.error(f"Error creating folder '{dir_name}' on {name}: {e}")
        sse.patch_html_by_id(FILE_BROWSER_ID, ErrorFragment(str(e), FILE_BROWSER_ID))
        return
    PatchFileBrowser(ctx, name, path)


def _delete_entry(ctx: Context, purge: bool):
    sse = ctx.sse()
    name = ctx.param("name")
    path = ctx.query("path").strip("/")
    row_id = DomId("file", path)
    if not path:
        sse.patch_html_by_id(FILE_BROWSER_ID, ErrorFragment("Path is required", FILE_BROWSER_ID))
        return
    try:
        if purge:
            engine.rc_client.purge(name, path)
        else:
            engine.rc_client.delete_file(name, path)
    except RCError as e:
        logger.error(f"Error deleting {name}:{path}: {e}")
        sse.patch_html_by_id(row_id, ErrorFragment(str(e), row_id))
        return
    sse.remove_by_id(row_id)


@router.delete("/api/remotes/{name}/file")
def delete_file(ctx: Context):
    """Delete one file and remove its row"""
    _delete_entry(ctx, purge=False)


@router.delete("/api/remotes/{name}/dir")
def purge_directory(ctx: Context):
    """Delete a directory with all of its contents and remove its row"""
    _delete_entry(ctx, purge=True)
