"""
Team dependency graph for Jira-derived engineering metrics.

Turns outbound/inbound epic dependency snapshots into a weighted team graph
and positions it for the dashboard.
"""

__version__ = "0.1.0"
