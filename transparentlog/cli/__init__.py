"""
Command-line interface for TransparentLog.
"""
