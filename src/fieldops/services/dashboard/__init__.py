"""Console view state."""

from .state_machine import ConsoleState, DashboardView, ViewStateMachine

__all__ = ["ConsoleState", "DashboardView", "ViewStateMachine"]
