"""Binary tag-tree codec.

This module encodes compounds to the big-endian wire format and back.
It also renders trees as stringified tag text for inspection.
"""
