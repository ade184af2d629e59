"""
Shared module for cross-cutting concerns of the order engine.

STRUCTURE:
- shared.config: Configuration
  - settings.py: Environment config (Pydantic)
  - logging.py: Structured logging
  - constants.py: Order status, dispatch types, kitchen priorities

- shared.infrastructure: Request plumbing
  - correlation.py: Correlation ID middleware and logging filter

- shared.utils: Utilities
  - exceptions.py: HTTP-aware domain exceptions with auto-logging
  - validators.py: Price, quantity and lookup-key parsing

IMPORT EXAMPLES:
    from shared.config.settings import settings
    from shared.config.constants import OrderStatus, DispatchType
    from shared.config.logging import get_logger
    from shared.utils.exceptions import NotFoundError, ValidationError
    from shared.utils.validators import parse_price
"""
