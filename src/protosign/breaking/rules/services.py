"""
Service and RPC rules.  Methods are matched by name inside services
matched by name; every differing attribute yields its own change.
"""

from __future__ import annotations

from typing import Callable

from protosign.breaking.rules._base import (
    RuleFn,
    as_text,
    make_change,
    matched_methods,
    strip_leading_dots,
)
from protosign.breaking.schema import BreakingChange, RuleContext
from protosign.canonical.model import CanonicalFile, CanonicalMethod


def check_service_no_delete(
    current: CanonicalFile, previous: CanonicalFile, context: RuleContext
) -> list[BreakingChange]:
    current_services = current.service_by_name()
    return [
        make_change(
            "SERVICE_NO_DELETE",
            f'Previously present service "{service.name}" was deleted from file.',
            context,
            element_type="service",
            element_name=service.name,
        )
        for service in previous.services
        if service.name not in current_services
    ]


def check_rpc_no_delete(
    current: CanonicalFile, previous: CanonicalFile, context: RuleContext
) -> list[BreakingChange]:
    changes = []
    current_services = current.service_by_name()
    for old_service in previous.services:
        new_service = current_services.get(old_service.name)
        if new_service is None:
            continue
        new_methods = new_service.method_by_name()
        for method in old_service.methods:
            if method.name not in new_methods:
                changes.append(
                    make_change(
                        "RPC_NO_DELETE",
                        f'Previously present RPC "{method.name}" on service '
                        f'"{old_service.name}" was deleted.',
                        context,
                        element_type="method",
                        element_name=f"{old_service.name}.{method.name}",
                    )
                )
    return changes


def _method_rule(
    rule_id: str, what: str, getter: Callable[[CanonicalMethod], object]
) -> RuleFn:
    """Build a rule comparing one attribute of matched methods."""

    def check(
        current: CanonicalFile, previous: CanonicalFile, context: RuleContext
    ) -> list[BreakingChange]:
        changes = []
        for service, old_method, new_method in matched_methods(current, previous):
            old = getter(old_method)
            new = getter(new_method)
            if old == new:
                continue
            changes.append(
                make_change(
                    rule_id,
                    f'RPC "{new_method.name}" on service "{service.name}" changed {what} '
                    f'from "{as_text(old)}" to "{as_text(new)}".',
                    context,
                    element_type="method",
                    element_name=f"{service.name}.{new_method.name}",
                )
            )
        return changes

    check.__name__ = f"check_{rule_id.lower()}"
    return check


def _idempotency(method: CanonicalMethod) -> str:
    return method.idempotency_level or "IDEMPOTENCY_UNKNOWN"


RULES: dict[str, RuleFn] = {
    "RPC_NO_DELETE": check_rpc_no_delete,
    "RPC_SAME_CLIENT_STREAMING": _method_rule(
        "RPC_SAME_CLIENT_STREAMING", "client streaming", lambda m: m.client_streaming
    ),
    "RPC_SAME_IDEMPOTENCY_LEVEL": _method_rule(
        "RPC_SAME_IDEMPOTENCY_LEVEL", "idempotency level", _idempotency
    ),
    "RPC_SAME_REQUEST_TYPE": _method_rule(
        "RPC_SAME_REQUEST_TYPE", "request type", lambda m: strip_leading_dots(m.input_type)
    ),
    "RPC_SAME_RESPONSE_TYPE": _method_rule(
        "RPC_SAME_RESPONSE_TYPE", "response type", lambda m: strip_leading_dots(m.output_type)
    ),
    "RPC_SAME_SERVER_STREAMING": _method_rule(
        "RPC_SAME_SERVER_STREAMING", "server streaming", lambda m: m.server_streaming
    ),
    "SERVICE_NO_DELETE": check_service_no_delete,
}
