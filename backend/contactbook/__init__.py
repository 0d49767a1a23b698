"""
ContactBook: server-rendered contact management
"""
__version__ = "0.1.0"
