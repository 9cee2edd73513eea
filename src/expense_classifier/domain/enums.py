from enum import Enum

class ConfidenceLabel(Enum):
    """Human-readable band for a suggestion's confidence"""
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
