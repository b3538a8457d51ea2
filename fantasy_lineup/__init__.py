"""
Fantasy Lineup Engine

Picks a weekly fantasy football starting lineup from a Yahoo Fantasy Sports
roster. Player point values are resolved from inconsistently-shaped API data
and starters are assigned greedily under positional eligibility rules.
"""

__version__ = "1.0.0"
__author__ = "Fantasy Lineup Engine Team"
__description__ = "Score resolution and lineup optimization for Yahoo Fantasy Football"
