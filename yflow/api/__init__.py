"""
API Module

This module provides the translation store client and its exceptions.
"""

from yflow.api.exceptions import APIError, AuthenticationError, RateLimitError
from yflow.api.client import APIClient, BatchPushResult

__all__ = ['APIError', 'AuthenticationError', 'RateLimitError', 'APIClient', 'BatchPushResult']
