"""
hookbot - GitHub webhook alerts and self-updating deploys for chat bots
"""

__version__ = "0.1.0"
__logo__ = "🪝"
