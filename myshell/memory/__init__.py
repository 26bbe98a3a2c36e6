"""
MyShell Memory Accounting Module

Tracks the buffers owned by shell components and reports leaks.
"""

from .tracker import AllocationRecord, AllocationRegistry, byte_length

__all__ = [
    'AllocationRecord',
    'AllocationRegistry',
    'byte_length',
]
