"""Storage and persistence layer.

This module binds root compounds to storage locations with atomic replace.
It powers loading, saving, and reloading of tag files for the SDK.
"""
