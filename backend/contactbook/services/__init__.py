"""
Store-facing services
"""
