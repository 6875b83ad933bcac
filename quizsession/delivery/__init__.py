"""
Delivery layer: terminal front end for quiz sessions.

Run with ``python -m quizsession.delivery`` or the ``quizsession`` script.
"""
