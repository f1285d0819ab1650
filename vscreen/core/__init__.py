"""Core allocation, mode and layout engine for vscreen."""
