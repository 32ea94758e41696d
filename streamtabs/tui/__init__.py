#!/usr/bin/env python3
# SPDX-License-Identifier: MIT
"""
TUI module for the streamtabs viewer.

Provides the Textual presenter over a StreamEngine:
- Tab strip with unread badges and pause marker
- Line body with the pinned line injected and highlighted
- Keyboard and mouse intents

Usage:
    from streamtabs.tui import run_app
    run_app(engine, source)
"""

from .layout import (
    clip_with_ellipsis,
    fit_tab_title,
    format_unread_slot,
    layout_tabs,
    viewport_for_lines,
)


# Defer app import to avoid textual dependency at module load time
def _get_app():
    """Lazy import of app module to avoid textual import at module load."""
    from .app import StreamTabsApp, run_app
    return StreamTabsApp, run_app


def run_app(*args, **kwargs):
    """Run the TUI application. See app.run_app for details."""
    _, _run_app = _get_app()
    return _run_app(*args, **kwargs)


__all__ = [
    # Layout
    "clip_with_ellipsis",
    "fit_tab_title",
    "format_unread_slot",
    "layout_tabs",
    "viewport_for_lines",
    # App (lazy loaded)
    "run_app",
]
