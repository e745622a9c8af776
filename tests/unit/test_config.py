"""Unit tests for ExecutorConfig."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from enrichr.core.config import ExecutorConfig
from enrichr.core.enums import ExecutionPolicy


class TestExecutorConfig:
    def test_defaults(self) -> None:
        config = ExecutorConfig()
        assert config.policy is ExecutionPolicy.DISORDERED
        assert config.batch_size == -1
        assert config.key_separator == ","
        assert config.log_execution_time is False
        assert config.execute_inactive is False

    def test_from_dict(self) -> None:
        config = ExecutorConfig.model_validate({"policy": "ordered", "batch_size": "100"})
        assert config.policy is ExecutionPolicy.ORDERED
        assert config.batch_size == 100

    def test_invalid_policy(self) -> None:
        with pytest.raises(ValidationError):
            ExecutorConfig(policy="random")  # type: ignore[arg-type]

    def test_empty_separator(self) -> None:
        with pytest.raises(ValidationError, match="key_separator"):
            ExecutorConfig(key_separator="")
