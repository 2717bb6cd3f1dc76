"""Cancellation token implementation parts; import from ``coachbot.base.cancellation``."""
