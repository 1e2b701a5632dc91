"""
AfriLink Signals.

product_status_changed is sent after a lifecycle transition is stored.
Keyword arguments: product, action, old_status, new_status, actor.

verification_decided is sent after an admin verifies or rejects a profile.
Keyword arguments: profile, approved, actor.
"""

from django.dispatch import Signal

product_status_changed = Signal()
verification_decided = Signal()
