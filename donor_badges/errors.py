"""Exceptions raised by badge evaluation"""

class BadgeEvaluationError(Exception):
    """Base exception for badge evaluation errors"""
    pass

class BadgeLoadError(BadgeEvaluationError):
    """Badge rules or donations could not be loaded"""
    pass

class AchievementPersistError(BadgeEvaluationError):
    """Achievements could not be written"""
    pass
