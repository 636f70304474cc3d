"""TrustNest: roommate matching with identity verification"""
__version__ = '1.0.0'
