"""
AgentCore Cost - monthly cost estimator for Bedrock AgentCore usage.
"""

__version__ = "0.1.0"
