"""Pytest configuration and shared fixtures."""

import os
from collections.abc import Generator

import pytest

# Set test environment
os.environ.setdefault("TASKSPEC_LOG_LEVEL", "WARNING")
os.environ.setdefault("TASKSPEC_DEBUG", "false")


@pytest.fixture
def mock_settings() -> Generator:
    """Provide fresh settings for testing."""
    from taskspec.core.config import clear_settings_cache

    # Clear any cached settings
    clear_settings_cache()

    yield

    # Clear again after test
    clear_settings_cache()


@pytest.fixture
def single_task_spec() -> str:
    """Provide a complete single-task spec document."""
    return """# Task: Build REST API

## Objective
Create a REST API for a todo application.

## Model
sonnet

## Requirements
- [ ] GET /todos endpoint
- [x] POST /todos endpoint
- [ ] DELETE /todos/:id endpoint

## Constraints
- Use FastAPI
- Keep response times under 100ms

## Completion Criteria
All endpoints return correct status codes.

## Max Iterations
30

## Completion Promise
<promise>COMPLETE</promise>
"""


@pytest.fixture
def multi_task_spec() -> str:
    """Provide a multi-task spec with global settings."""
    return """# Spec: Full Stack App

## Objective
Build a full stack todo application.

## Global Settings
default_model: sonnet
max_parallel_workers: 3
completion_promise: "COMPLETE"

## Tasks

### Task: backend
Build the REST backend.

- [ ] CRUD endpoints
- [ ] Persistence layer

## Model
opus

## Priority
1

### Task: frontend
Build the web client.

- [ ] Todo list view

## Depends On
[backend]

## Priority
2
"""


@pytest.fixture
def cyclic_spec() -> str:
    """Provide a spec whose tasks depend on each other."""
    return """# Task: Cycle

## Objective
Two tasks waiting on each other.

## Tasks

### Task: task1
First task.

## Dependencies
- task2

### Task: task2
Second task.

## Dependencies
- task1
"""


@pytest.fixture
def sample_tasks() -> list:
    """Provide sample task entries for graph tests."""
    from taskspec.instructions.models import TaskEntry

    return [
        TaskEntry(id="setup", description="Initialize project"),
        TaskEntry(id="models", description="Define models", depends_on=["setup"], priority=2),
        TaskEntry(id="api", description="Build API", depends_on=["models"]),
        TaskEntry(id="docs", description="Write docs", depends_on=["setup"], priority=1),
        TaskEntry(id="tests", description="Write tests", depends_on=["api", "models"]),
    ]


def pytest_configure(config: pytest.Config) -> None:
    """Configure custom pytest markers."""
    config.addinivalue_line("markers", "unit: mark test as unit test")
    config.addinivalue_line("markers", "integration: mark test as integration test")
    config.addinivalue_line("markers", "slow: mark test as slow running")
