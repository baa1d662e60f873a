"""TaskPilot Gateway -- FastAPI HTTP 层"""
