"""
Services module - one class per MongoDB collection.
"""
