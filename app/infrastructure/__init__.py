"""Infrastructure modules for the spend alert agent.

Centralized infrastructure components:
- configuration: Settings management (settings, Settings)
- logging: Structured logging (configure_logging, get_module_logger)
- operations: Operation results, error categories and classification
- resilience: Circuit breakers and the retry executor
- clients: AWS service clients (SNS, DynamoDB, Cost Explorer, Bedrock)
- persistence: Key-value storage for device records and shared state
- notifications: Multi-channel alert dispatcher
"""
