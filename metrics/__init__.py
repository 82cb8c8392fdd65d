"""
Metrics and Analytics Module
"""
from .collector import MetricsCollector

__all__ = ['MetricsCollector']
