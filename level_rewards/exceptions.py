"""Errors raised by the reward distribution components"""


class InvalidInput(ValueError):
    """A level document or reward total violates the caller contract"""
    pass


class RatesUnavailableError(Exception):
    """USD conversion rates could not be fetched"""
    pass
