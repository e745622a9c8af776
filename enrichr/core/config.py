"""Executor configuration.

ExecutorConfig is a Pydantic model so that configuration loaded from files or
environment dictionaries is validated before the executor is built.
"""

from __future__ import annotations

from pydantic import BaseModel, field_validator

from enrichr.core.enums import ExecutionPolicy


class ExecutorConfig(BaseModel):
    """Configuration for operation executors."""

    policy: ExecutionPolicy = ExecutionPolicy.DISORDERED
    batch_size: int = -1
    key_separator: str = ","
    log_execution_time: bool = False
    execute_inactive: bool = False

    @field_validator("key_separator")
    @classmethod
    def _separator_not_empty(cls, value: str) -> str:
        if not value:
            raise ValueError("key_separator must not be empty")
        return value
