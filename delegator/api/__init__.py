"""
HTTP adapter: JSON and Server-Sent Events endpoints over the delegating agent.
"""
