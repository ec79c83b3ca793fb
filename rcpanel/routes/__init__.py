"""
RCPanel - Routes Package

Page and streaming route modules. Each module exposes a `router` (a
rcpanel.router.Router) that server.py includes into the application.
"""
