"""Tic-tac-toe package exposing the game engine and the web application."""

from .game import GameSnapshot, ScoreTally, TicTacToeGame
from .ui import app

__all__ = ["GameSnapshot", "ScoreTally", "TicTacToeGame", "app"]
