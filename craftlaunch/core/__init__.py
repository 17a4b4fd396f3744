"""Launch planning and process spawning."""

from .game_launcher import GameLauncher, LaunchOptions, LaunchPlan, LaunchPlanner, MemoryOptions
from .process import GameProcess, ProcessLauncher

__all__ = [
    "GameLauncher", "LaunchOptions", "LaunchPlan", "LaunchPlanner", "MemoryOptions",
    "GameProcess", "ProcessLauncher",
]
