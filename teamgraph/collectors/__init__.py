"""
Data Collectors - Fetch dependency snapshots from the metrics backend

This package contains:
    - dependency_collector: Outbound/inbound epic dependency rows per PI, fetched concurrently

Usage:
    from teamgraph.collectors.dependency_collector import AsyncDependencyCollector

    snapshot = await AsyncDependencyCollector().fetch_dependencies("Q32025")
"""

__all__ = []
