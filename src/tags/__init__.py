"""Tag value model.

This module defines the tagged-union node type and its containers.
Lists and compounds own their children, keeping every tree acyclic.
"""
