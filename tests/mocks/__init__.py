"""
Mocking infrastructure for purenut tests.

Provides a scripted peer for socketpair-based unit tests and a small threaded
upsd stand-in for tests that need a real TCP listener.
"""

from .nut_server import MockNUTServer, ScriptedPeer, default_responses

__all__ = ["MockNUTServer", "ScriptedPeer", "default_responses"]
