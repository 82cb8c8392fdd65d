"""
Scenario Execution Module
"""
from .executor import ScenarioExecutor, ScenarioConfig, ExecutionResult

__all__ = ['ScenarioExecutor', 'ScenarioConfig', 'ExecutionResult']
