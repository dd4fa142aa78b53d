"""
Realtime chat service with WebSocket fan-out
"""
__version__ = "1.0.0"
