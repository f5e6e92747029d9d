"""Qt-facing application facade and state objects.

- Single command entry: backend.dispatch(cmd, payload)
- UI binding via state QObjects (backend.adjustments)
- Python -> UI notifications via backend.event
"""
