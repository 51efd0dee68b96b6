# daymap/__init__.py
"""
daymap: turn a project goal into a day-by-day task roadmap.

A local LLM checks whether the goal fits the time available and generates
the roadmap; the tasks are then tracked per day from the CLI or over MCP.
"""

__version__ = "0.1.0"
