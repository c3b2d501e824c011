"""
Crawler orchestration: browser surface, strategies, registry and storage.
"""
