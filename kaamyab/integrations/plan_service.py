"""Client for the external plan generation/extension service.

The service is opaque: we send context, it returns ``{"plan": {...}}`` or
``{"error": "..."}``. Responses are parsed into Plan values here; adopting
them (invariant checks, resetting state) happens in ``kaamyab.plans.lifecycle``.
"""

from __future__ import annotations

from typing import Any, Protocol

import httpx
from loguru import logger
from pydantic import ValidationError

from kaamyab.config.settings import settings
from kaamyab.plans.errors import PlanServiceError
from kaamyab.plans.lifecycle import merge_extension_weeks
from kaamyab.plans.types import Plan


def _parse_plan(document: dict[str, Any]) -> Plan:
    try:
        return Plan.from_document(document)
    except ValidationError as e:
        raise PlanServiceError(f"Plan service returned a malformed plan: {e}") from e


class PlanGenerationService(Protocol):
    async def generate(self, profile_context: dict[str, Any]) -> Plan: ...

    async def extend(self, existing_plan: Plan, weeks_to_add: int) -> Plan: ...


class PlanServiceClient:
    """HTTP client for the generate-plan / extend-plan functions."""

    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = (base_url or settings.plan_service_url).rstrip("/")
        self.api_key = api_key if api_key is not None else settings.plan_service_api_key
        self.timeout = timeout or settings.plan_service_timeout_seconds
        self._transport = transport

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    async def _post(self, path: str, payload: dict[str, Any]) -> dict[str, Any]:
        url = f"{self.base_url}/{path}"
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(url, json=payload, headers=self._headers())
        except httpx.RequestError as e:
            logger.bind(url=url, error=str(e)).error("Plan service request failed")
            raise PlanServiceError(f"Plan service unreachable: {e}") from e

        try:
            body = response.json()
        except ValueError as e:
            raise PlanServiceError("Plan service returned invalid JSON", response.status_code) from e

        if response.is_error:
            message = body.get("error") if isinstance(body, dict) else None
            logger.bind(url=url, status_code=response.status_code, error=message).warning("Plan service returned error")
            raise PlanServiceError(message or f"Plan service error {response.status_code}", response.status_code)

        if not isinstance(body, dict):
            raise PlanServiceError("Plan service response is not an object", response.status_code)
        return body

    async def generate(self, profile_context: dict[str, Any]) -> Plan:
        """Request a new plan document for a profile."""
        body = await self._post("generate-plan", {"profile": profile_context})
        plan = body.get("plan")
        if not isinstance(plan, dict):
            raise PlanServiceError("Plan service response has no plan")
        return _parse_plan(plan)

    async def extend(self, existing_plan: Plan, weeks_to_add: int) -> Plan:
        """Request ``weeks_to_add`` more weeks.

        Accepts either a full extended plan or a ``new_weeks`` list that is
        appended to the existing plan.
        """
        if weeks_to_add < 1:
            raise PlanServiceError(f"weeks_to_add must be positive, got {weeks_to_add}")
        body = await self._post(
            "extend-plan",
            {"existingPlan": existing_plan.to_document(), "weeksToAdd": weeks_to_add},
        )
        if isinstance(body.get("plan"), dict):
            return _parse_plan(body["plan"])
        if isinstance(body.get("new_weeks"), list):
            try:
                return merge_extension_weeks(existing_plan, body["new_weeks"])
            except ValidationError as e:
                raise PlanServiceError(f"Plan service returned malformed weeks: {e}") from e
        raise PlanServiceError("Plan service response has no plan")
