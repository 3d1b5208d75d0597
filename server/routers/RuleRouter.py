from fastapi import APIRouter, Request

from server.models.requests import RuleRequest
from shared.models.rule import Rule

router = APIRouter(prefix="/rules", tags=["rules"])


@router.get("")
async def list_rules(request: Request) -> list[Rule]:
    return request.app.state.rule_registry.get_all()


@router.get("/{rule_id}")
async def get_rule(request: Request, rule_id: str) -> Rule:
    return request.app.state.rule_registry.require(rule_id)


@router.put("")
async def put_rule(request: Request, body: RuleRequest) -> Rule:
    """Insert a rule or replace the rule with the same id."""
    rule = Rule(**body.model_dump())
    request.app.state.rule_registry.add_rule(rule)
    return rule


@router.delete("/{rule_id}", status_code=204)
async def delete_rule(request: Request, rule_id: str) -> None:
    request.app.state.rule_registry.remove_rule(rule_id)
