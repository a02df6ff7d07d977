"""Top-level package for the tensionwatch ingestion service.

This package contains the news ingestion cycle: fetching articles from search
providers, classifying and scoring them, maintaining the tension index and
dispatching alerts for critical events.
"""

__all__ = []
