from .command import Command
from .pattern import PatternMatcher, integer
from .registry import EventHandler, HandlerRegistry

__all__ = ["Command", "EventHandler", "HandlerRegistry", "PatternMatcher", "integer"]
