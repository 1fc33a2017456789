"""Test fixtures for allocation and LP model testing."""

from .solver_mocks import create_mock_solver_config

__all__ = ['create_mock_solver_config']
