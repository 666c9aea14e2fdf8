"""
Post-solve passes for schedule improvement.
"""

from .division_clustering import cluster_division_games

__all__ = [
    "cluster_division_games",
]
