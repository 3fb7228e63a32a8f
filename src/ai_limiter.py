# Copyright (c) 2026 TrailLensCo
# All rights reserved.
#
# This file is proprietary and confidential.
# Unauthorized copying, distribution, or use of this file,
# via any medium, is strictly prohibited without the express
# written permission of TrailLensCo.

"""
AI call limiter for the word generator.

Caps how many generator requests one process may make, in total and per
prompt type. The limiter belongs to a generator instance; the fill
engine itself holds no state.
"""

import time
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Dict, List, Any


@dataclass
class CallRecord:
    """Record of a single AI call."""
    prompt_type: str
    timestamp: float
    tokens_used: int = 0
    success: bool = True


@dataclass
class AICallbackLimiter:
    """
    Tracks and enforces AI call limits.

    Usage:
        limiter = AICallbackLimiter(max_total=50, limits={'slot_word_generation': 40})

        if limiter.can_call('slot_word_generation'):
            ...
            limiter.record_call('slot_word_generation', tokens_used=120)
    """
    max_total: int = 50
    limits: Dict[str, int] = field(default_factory=dict)
    counts: Dict[str, int] = field(default_factory=lambda: defaultdict(int))
    total_calls: int = 0
    total_tokens: int = 0
    call_history: List[CallRecord] = field(default_factory=list)
    start_time: float = field(default_factory=time.time)

    def can_call(self, prompt_type: str) -> bool:
        """True if both the total and the per-type budget allow a call."""
        if self.total_calls >= self.max_total:
            return False
        type_limit = self.limits.get(prompt_type, self.max_total)
        return self.counts[prompt_type] < type_limit

    def record_call(self, prompt_type: str, tokens_used: int = 0, success: bool = True) -> None:
        self.counts[prompt_type] += 1
        self.total_calls += 1
        self.total_tokens += tokens_used
        self.call_history.append(CallRecord(
            prompt_type=prompt_type,
            timestamp=time.time(),
            tokens_used=tokens_used,
            success=success,
        ))

    def get_remaining(self, prompt_type: str = None) -> int:
        """Remaining calls, overall or for one prompt type."""
        total_remaining = self.max_total - self.total_calls
        if prompt_type:
            type_limit = self.limits.get(prompt_type, self.max_total)
            return min(type_limit - self.counts[prompt_type], total_remaining)
        return total_remaining

    def get_stats(self) -> Dict[str, Any]:
        successful = sum(1 for c in self.call_history if c.success)
        return {
            'total_calls': self.total_calls,
            'total_tokens': self.total_tokens,
            'remaining_calls': self.get_remaining(),
            'calls_by_type': dict(self.counts),
            'elapsed_seconds': time.time() - self.start_time,
            'success_rate': successful / len(self.call_history) if self.call_history else 1.0,
        }

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> 'AICallbackLimiter':
        """Create limiter from a generation config dictionary."""
        return cls(
            max_total=config.get('max_ai_callbacks', 50),
            limits=config.get('limits', {}),
        )
