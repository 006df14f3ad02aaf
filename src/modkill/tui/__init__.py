"""Textual interface for modkill."""

from modkill.tui.app import ModkillApp, run_tui

__all__ = ["ModkillApp", "run_tui"]
