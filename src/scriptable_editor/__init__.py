"""
Scriptable Editor host core.

Provides the host option store and the scripting layer that exposes a
subset of those options to user scripts.
"""
