"""DingTalk Notify - DingTalk robot notifications as MCP tools.

Lets an AI coding assistant report task and session completion to a
DingTalk group through a custom robot webhook.
"""

__version__ = "1.0.0"

__all__ = ["__version__"]
