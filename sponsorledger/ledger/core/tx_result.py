# MIT License
# Copyright (c) 2025 Hashborn

"""
Transaction results.

The result of applying one transaction: either every operation succeeded
and the state was committed, or one error code explains why nothing was.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ...protocol.types.common import ResultCode


@dataclass
class OpResult:
    """Outcome of one successfully applied operation."""
    op_type: str
    code: str = ResultCode.SUCCESS.value
    details: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {"op_type": self.op_type, "code": self.code, **self.details}


@dataclass
class TxResult:
    """
    Transaction result.

    Attributes:
        tx_hash: Transaction hash
        success: True if the transaction was committed
        code: ResultCode value (SUCCESS, or the error that aborted it)
        close_time: Ledger close time the transaction was applied at
        op_results: Per-operation results (empty on failure)
        failed_op_index: Index of the failing operation (None if success or commit-time failure)
        error: Error message if the transaction failed
    """
    tx_hash: str
    success: bool
    code: str
    close_time: int = 0
    op_results: List[OpResult] = field(default_factory=list)
    failed_op_index: Optional[int] = None
    error: Optional[str] = None

    def to_dict(self) -> dict:
        """Convert result to dictionary."""
        return {
            "tx_hash": self.tx_hash,
            "success": self.success,
            "code": self.code,
            "close_time": self.close_time,
            "op_results": [r.to_dict() for r in self.op_results],
            "failed_op_index": self.failed_op_index,
            "error": self.error,
        }
