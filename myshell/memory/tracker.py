"""
Allocation Tracker Module

Accounting for the buffers owned by shell components:
- Every tracked allocation holds exactly one live record
- A size ceiling rejects oversized requests
- Statistics for the memstat builtin
- Leak reporting and forced release at shutdown

Python manages the memory itself; the registry records who owns what so
that unreleased buffers can be reported.
"""

import os
import sys
from dataclasses import dataclass
from typing import Optional, Any, List

from myshell.core.config_loader import LimitsConfig, MemoryConfig
from myshell.core.diagnostics import Diagnostics
from myshell.exceptions import (
    BufferOverflowError,
    InvalidArgumentError,
    MemoryAllocationError,
    ResourceLimitExceeded,
)


# First address handed out; addresses are 16-byte aligned
BASE_ADDRESS = 0x1000
ALIGNMENT = 16


@dataclass
class AllocationRecord:
    """A live tracked allocation."""
    address: int
    size: int
    site: str
    context: str

    def describe(self) -> str:
        return (
            f"{self.size} bytes at {hex(self.address)} "
            f"({self.site}) - {self.context or 'no context'}"
        )


def byte_length(text: str) -> int:
    """Size of ``text`` as the OS sees it; undecodable bytes count as one byte each."""
    return len(os.fsencode(text))


def _caller_site(depth: int = 2) -> str:
    """Return "file:line" of the frame ``depth`` levels above this one."""
    try:
        frame = sys._getframe(depth)
    except ValueError:
        return "unknown"
    return f"{os.path.basename(frame.f_code.co_filename)}:{frame.f_lineno}"


class AllocationRegistry:
    """
    Registry of tracked allocations.

    Example:
        >>> registry = AllocationRegistry(diagnostics)
        >>> addr = registry.allocate(64, "parse_command: arguments array")
        >>> registry.free(addr)
        >>> registry.leak_count()
        0
    """

    def __init__(
        self,
        diagnostics: Diagnostics,
        limits: Optional[LimitsConfig] = None,
        config: Optional[MemoryConfig] = None
    ):
        self._diag = diagnostics
        self._limits = limits or LimitsConfig()
        self._config = config or MemoryConfig()
        self._records: dict[int, AllocationRecord] = {}
        self._next_address = BASE_ADDRESS

        self.total_allocated = 0
        self.peak_allocated = 0
        self.allocation_count = 0
        self.deallocation_count = 0

        self._diag.info("Memory tracking system initialized")

    @property
    def tracking_enabled(self) -> bool:
        return self._config.tracking_enabled

    @tracking_enabled.setter
    def tracking_enabled(self, enabled: bool) -> None:
        self._config.tracking_enabled = enabled
        self._diag.info(
            "Memory tracking enabled" if enabled else "Memory tracking disabled"
        )

    @property
    def max_allocation_size(self) -> int:
        return self._limits.max_allocation_size

    def _check_size(self, size: int, context: str) -> None:
        if size <= 0:
            raise InvalidArgumentError(f"invalid allocation size {size}", context=context)
        if size > self._limits.max_allocation_size:
            raise ResourceLimitExceeded(context, size, self._limits.max_allocation_size)

    def _reserve_address(self, size: int, context: str) -> int:
        address = self._next_address
        if address in self._records:
            raise MemoryAllocationError(context, size)
        step = (size + ALIGNMENT - 1) // ALIGNMENT * ALIGNMENT
        self._next_address += step
        return address

    def _account(self, delta: int) -> None:
        self.total_allocated += delta
        if self.total_allocated > self.peak_allocated:
            self.peak_allocated = self.total_allocated

    def allocate(self, size: int, context: str, site: Optional[str] = None) -> int:
        """
        Record a new allocation.

        Args:
            size: Number of bytes requested
            context: What the buffer is for
            site: "file:line" of the caller; detected when omitted

        Returns:
            Address identifying the allocation

        Raises:
            InvalidArgumentError: size is not positive
            ResourceLimitExceeded: size is above the configured ceiling
            MemoryAllocationError: the request cannot be recorded
        """
        self._check_size(size, context)
        address = self._reserve_address(size, context)

        if not self._config.tracking_enabled:
            return address

        try:
            self._records[address] = AllocationRecord(
                address=address,
                size=size,
                site=site or _caller_site(),
                context=context,
            )
        except MemoryError:
            raise MemoryAllocationError(context, size)
        self.allocation_count += 1
        self._account(size)
        return address

    def reallocate(
        self,
        address: Optional[int],
        size: int,
        context: str,
        site: Optional[str] = None
    ) -> int:
        """
        Resize a tracked allocation.

        The record keeps its address but takes the new size, context and
        call site. A None address behaves like allocate().
        """
        site = site or _caller_site()
        if address is None:
            return self.allocate(size, context, site)

        self._check_size(size, context)

        if not self._config.tracking_enabled:
            return address

        record = self._records.get(address)
        if record is None:
            raise InvalidArgumentError(
                f"reallocating untracked address {hex(address)}",
                context="tracked_realloc: pointer not found"
            )

        self._account(size - record.size)
        record.size = size
        record.context = context
        record.site = site
        return address

    def strdup(self, text: str, context: str, site: Optional[str] = None) -> int:
        """Record a copy of ``text`` including its terminator."""
        if text is None:
            raise InvalidArgumentError("string is None", context=context)
        if len(text) > self._limits.max_input_size - 1:
            raise BufferOverflowError(
                f"string of {len(text)} characters is too long",
                context=context
            )
        return self.allocate(byte_length(text) + 1, context, site or _caller_site())

    def free(self, address: Optional[int], site: Optional[str] = None) -> None:
        """
        Release a tracked allocation.

        Freeing an address without a record is logged as a warning and
        otherwise ignored.
        """
        if address is None or not self._config.tracking_enabled:
            return

        record = self._records.pop(address, None)
        if record is None:
            self._diag.warn(
                f"tracked_free: attempting to free untracked pointer "
                f"{hex(address)} at {site or _caller_site()}"
            )
            return

        self.deallocation_count += 1
        self._account(-record.size)

    def is_tracked(self, address: int) -> bool:
        return address in self._records

    def leak_count(self) -> int:
        return len(self._records)

    def leaks(self) -> List[AllocationRecord]:
        """Live records, oldest first."""
        return sorted(self._records.values(), key=lambda r: r.address)

    def stats(self) -> dict[str, Any]:
        """Get registry statistics."""
        return {
            'tracking_enabled': self._config.tracking_enabled,
            'allocation_count': self.allocation_count,
            'deallocation_count': self.deallocation_count,
            'total_allocated': self.total_allocated,
            'peak_allocated': self.peak_allocated,
            'outstanding': self.allocation_count - self.deallocation_count,
            'tracked_blocks': len(self._records),
        }

    def format_stats(self) -> str:
        if not self._config.tracking_enabled:
            return "Memory tracking is disabled"

        stats = self.stats()
        return "\n".join([
            "=== Memory Statistics ===",
            f"Total allocations: {stats['allocation_count']}",
            f"Total deallocations: {stats['deallocation_count']}",
            f"Current allocated: {stats['total_allocated']} bytes",
            f"Peak allocated: {stats['peak_allocated']} bytes",
            f"Outstanding blocks: {stats['outstanding']}",
            f"Tracked blocks: {stats['tracked_blocks']}",
            "========================",
        ])

    def format_leaks(self) -> str:
        records = self.leaks()
        if not records:
            return "No memory leaks detected."

        lines = ["=== Memory Leaks Detected ==="]
        for number, record in enumerate(records, start=1):
            lines.extend([
                f"Leak #{number}:",
                f"  Address: {hex(record.address)}",
                f"  Size: {record.size} bytes",
                f"  Context: {record.context or 'unknown'}",
                f"  Location: {record.site}",
            ])
        lines.append(f"Total leaks: {len(records)} blocks, {self.total_allocated} bytes")
        lines.append("=============================")
        return "\n".join(lines)

    def shutdown(self) -> int:
        """
        Report every remaining record as a leak and release it.

        Returns:
            Number of leaked allocations
        """
        records = self.leaks()
        if records:
            self._diag.warn("Memory leaks detected during cleanup")

        for record in records:
            self._diag.warn(f"Leaked memory: {record.describe()}")
            del self._records[record.address]
            self._account(-record.size)

        self._diag.info("Memory tracking system cleaned up")
        return len(records)
