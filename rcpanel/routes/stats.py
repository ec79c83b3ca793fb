"""
RCPanel - Stats Endpoints
"""

from rcpanel import engine
from rcpanel.context import Context
from rcpanel.router import Router
from rcpanel.views import GetStatsInfo, RenderTemplate

# Create router instance
router = Router(tags=["Stats"])

STATS_CONTENT_ID = "stats-content"


@router.get("/api/stats/refresh")
def refresh_stats(ctx: Context):
    """Re-render the stats panel and publish the raw numbers as signals"""
    sse = ctx.sse()
    stats, version = GetStatsInfo(engine.rc_client)
    sse.patch_html_by_id(STATS_CONTENT_ID, RenderTemplate("partials/stats_content.html", stats=stats, version=version))
    sse.patch_signals({"stats": stats.signals})
