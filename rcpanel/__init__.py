"""
RCPanel - Web control panel for the rclone remote control API.
"""

__version__ = "1.0.0"
