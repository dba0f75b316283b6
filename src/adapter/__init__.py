"""Live-object adapter boundary.

This module declares the contract external adapters implement to project
host objects onto tag trees and back.
"""
