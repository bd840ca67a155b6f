"""
Control Layer - Execution.

Main control loop that coordinates all other layers.
"""

from .emitter import CommandEmitter, CommandSink
from .controller import Controller

__all__ = ["CommandEmitter", "CommandSink", "Controller"]
