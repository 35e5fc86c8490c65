"""
Core application infrastructure: configuration, logging, lifecycle and routing.
"""
