"""
quizsession: scored, timed quiz sessions with a coin reward economy.

Turns a content category into a paginated, shuffled, timed assessment,
records every answer against the grading service and settles the coin
reward once per completed session.
"""

__version__ = "1.0.0"
