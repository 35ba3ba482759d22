"""Gensyn peer leaderboard service."""
