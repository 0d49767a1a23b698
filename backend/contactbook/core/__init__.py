"""
Core infrastructure: configuration, logging, store handle, routing, validation
"""
