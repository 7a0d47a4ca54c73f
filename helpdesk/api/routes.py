from __future__ import annotations

from fastapi import APIRouter

from helpdesk.api import assignments, proofs, reminders, ticket_responses, tickets, users

router = APIRouter()

router.include_router(tickets.router)
router.include_router(assignments.router)
router.include_router(proofs.router)
router.include_router(reminders.router)
router.include_router(ticket_responses.router)
router.include_router(ticket_responses.satisfy_router)
router.include_router(users.router)


@router.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok"}
