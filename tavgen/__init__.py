"""TalkingAvatarGenerator package.

This package drives a third-party talking-avatar service through an
ordered pipeline: photo upload, script processing, video generation and
finalisation, with step-by-step progress reporting.
"""

from .pipeline import TalkingAvatarGenerator  # noqa: F401

__all__ = ["TalkingAvatarGenerator"]
