"""
FastAPI dependencies.
The terminal store lives on app.state; tests override get_terminal.
"""

from fastapi import Request

from pos_api.services.terminal import PosTerminal


def get_terminal(request: Request) -> PosTerminal:
    """Return the process-wide terminal created at startup."""
    return request.app.state.terminal
