"""
Triage Module
=============

Bounded Context for citizen complaint classification.

Responsibilities:
- Classify complaints into a category by ordered keyword rules
- Escalate emergency wording to urgent priority
- Adjust confidence for image evidence and trusted reporters
- Route the result to a handling agent with a coordination note
"""

__version__ = "1.0.0"
