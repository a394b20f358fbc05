from __future__ import annotations

"""Application-wide logging utilities.

This module exposes a shared `logger` instance configured to use the
`uvicorn.error` logger so forecast pipeline messages (cache hits, provider
fallbacks, degraded checkpoints) appear in the server output.
"""

import logging

logger = logging.getLogger("uvicorn.error")
