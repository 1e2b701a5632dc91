"""
LifecycleService — Product moderation state machine.
"""

from __future__ import annotations

import logging

from django.db import DatabaseError, transaction

from afrilink.actors import Actor
from afrilink.exceptions import InvalidTransition, NotFound, StoreUnavailable, Unauthorized, ValidationError
from afrilink.models import Product
from afrilink.signals import product_status_changed


logger = logging.getLogger(__name__)


def coerce_action(action) -> Product.Action:
    """Validates a loose action value against Product.Action."""
    try:
        return Product.Action(action)
    except ValueError:
        raise ValidationError(
            code="unknown_action",
            message=f"Unknown action: {action!r}",
            context={"action": action, "allowed": list(Product.Action.values)},
        )


class LifecycleService:
    """
    Applies product status transitions.

    Pipeline:
    1. Validate action and actor role (no store access)
    2. Lock the product row (select_for_update)
    3. Check ownership and current status
    4. Conditional update: SET status=<to> WHERE id=<id> AND status=<from>
    5. Record ProductEvent
    6. Send product_status_changed (after the transaction)

    Any failure leaves the stored status untouched. Nothing is retried.
    """

    @staticmethod
    def allowed_actions(product: Product, actor: Actor) -> list[str]:
        """Actions the actor could successfully apply to the product right now."""
        allowed = []
        for action, rule in Product.TRANSITIONS.items():
            if rule.source != product.status or rule.role != actor.role:
                continue
            if actor.is_vendor and product.vendor_id != actor.user_id:
                continue
            allowed.append(action.value)
        return allowed

    @staticmethod
    def apply_transition(product_id: int, action, actor: Actor) -> Product:
        """
        Applies one lifecycle action to a product.

        Args:
            product_id: Product identifier
            action: Product.Action (or its string value)
            actor: Caller identity and role

        Returns:
            Product with the new status

        Raises:
            ValidationError: Unknown action
            Unauthorized: Role does not match, or vendor does not own the product
            NotFound: Product does not exist
            InvalidTransition: Current status is not the action's "from" status
            StoreUnavailable: Database failure
        """
        action = coerce_action(action)
        rule = Product.TRANSITIONS[action]

        log_context = {
            "product_id": product_id,
            "action": action.value,
            "actor": actor.label,
            "role": actor.role,
        }
        logger.info("Transition requested", extra=log_context)

        if actor.role != rule.role:
            logger.warning("Transition refused: role mismatch", extra=log_context)
            raise Unauthorized(
                code="role_mismatch",
                message=f"Action '{action.value}' requires role '{rule.role}'",
                context={"action": action.value, "required_role": rule.role, "actor_role": actor.role},
            )

        try:
            with transaction.atomic():
                product = LifecycleService._write(product_id, action, rule, actor, log_context)
        except DatabaseError as exc:
            logger.exception("Transition failed: store unavailable", extra=log_context)
            raise StoreUnavailable(
                code="store_unavailable",
                message="Product store unavailable",
                context={"product_id": product_id, "action": action.value},
            ) from exc

        logger.info(
            "Transition applied",
            extra={**log_context, "old_status": rule.source, "new_status": rule.target},
        )

        for receiver, response in product_status_changed.send_robust(
            sender=Product,
            product=product,
            action=action.value,
            old_status=rule.source,
            new_status=rule.target,
            actor=actor,
        ):
            if isinstance(response, Exception):
                logger.error(
                    "product_status_changed receiver failed",
                    extra={**log_context, "receiver": repr(receiver), "error": str(response)},
                )

        return product

    @staticmethod
    def _write(product_id, action, rule, actor: Actor, log_context: dict) -> Product:
        try:
            product = Product.objects.select_for_update().get(pk=product_id)
        except (Product.DoesNotExist, ValueError, TypeError):
            logger.warning("Transition refused: product not found", extra=log_context)
            raise NotFound(
                code="product_not_found",
                message=f"Product not found: {product_id}",
                context={"product_id": product_id},
            )

        if actor.is_vendor and product.vendor_id != actor.user_id:
            logger.warning("Transition refused: not owner", extra=log_context)
            raise Unauthorized(
                code="not_owner",
                message="Vendors can only act on their own products",
                context={"product_id": product_id, "vendor_id": product.vendor_id},
            )

        if product.status != rule.source:
            logger.warning(
                "Transition refused: invalid status",
                extra={**log_context, "current_status": product.status},
            )
            raise InvalidTransition(
                code="invalid_transition",
                message=f"Action '{action.value}' not allowed from status '{product.status}'",
                context={
                    "current_status": product.status,
                    "requested_action": action.value,
                    "allowed_actions": product.get_available_actions(),
                },
            )

        # Compare-and-swap: the row must still be in the "from" status
        updated = Product.objects.filter(pk=product_id, status=rule.source).update(status=rule.target)
        if updated != 1:
            current = Product.objects.filter(pk=product_id).values_list("status", flat=True).first()
            logger.warning(
                "Transition refused: status changed concurrently",
                extra={**log_context, "current_status": current},
            )
            raise InvalidTransition(
                code="stale_status",
                message=f"Product status changed before '{action.value}' could be applied",
                context={"current_status": current, "requested_action": action.value},
            )

        product.refresh_from_db()
        product.emit_event(
            event_type="status_changed",
            actor=actor.label,
            payload={
                "action": action.value,
                "old_status": rule.source,
                "new_status": rule.target,
            },
        )
        return product
