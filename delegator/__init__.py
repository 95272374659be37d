"""
Delegator: routes a question to retrieval, chart, image or direct answering
and streams the result as ordered events.
"""

__version__ = "0.1.0"
